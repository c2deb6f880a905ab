from loguru import logger

# Disable logging by default for library usage.
# Application entry points (e.g., skillsync.cli) should call logger.enable("skillsync")
# to enable logging.
logger.disable("skillsync")

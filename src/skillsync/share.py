import os
from pathlib import Path


def resolve_share_dir(override: str | Path | None = None, *, home: Path | None = None) -> Path:
    """Resolve the skillsync home directory without creating it."""
    if override:
        return Path(override).expanduser()
    env_dir = os.getenv("SKILLSYNC_HOME")
    if env_dir:
        return Path(env_dir).expanduser()
    return (home if home is not None else Path.home()) / ".skillsync"


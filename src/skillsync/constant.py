from __future__ import annotations

import importlib.metadata

NAME = importlib.metadata.metadata("skillsync")["Name"]
VERSION = importlib.metadata.version("skillsync")

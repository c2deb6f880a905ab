from __future__ import annotations

from enum import IntEnum, StrEnum
from pathlib import Path
from typing import Any


class ErrorKind(StrEnum):
    """Stable tags attached to every skillsync error."""

    IO = "IOError"
    PARSE = "ParseError"
    NOT_A_SKILL = "NotASkill"
    SCOPE_VIOLATION = "ScopeViolation"
    CONFLICT = "Conflict"
    CANCELLED = "Cancelled"
    INVARIANT_VIOLATION = "InvariantViolation"
    CONFIG = "Config"
    NOT_FOUND = "NotFound"
    EXISTS = "Exists"
    DUPLICATE = "Duplicate"


class ExitCode(IntEnum):
    """Process exit codes used when surfacing core errors."""

    SUCCESS = 0
    PARTIAL = 1
    USAGE = 2
    IO = 3
    CONFLICT = 4


class SkillsyncError(Exception):
    """Base exception class for skillsync."""

    kind: ErrorKind = ErrorKind.INVARIANT_VIOLATION

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class SkillIOError(SkillsyncError):
    """A filesystem operation failed."""

    kind = ErrorKind.IO

    def __init__(
        self, message: str, *, path: Path | None = None, cause: BaseException | None = None
    ):
        super().__init__(message)
        self.path = path
        self.cause = cause


class SkillParseError(SkillsyncError, ValueError):
    """Front-matter or body could not be parsed."""

    kind = ErrorKind.PARSE

    def __init__(self, message: str, *, path: Path | None = None, line: int | None = None):
        super().__init__(message)
        self.path = path
        self.line = line


class NotASkillError(SkillsyncError, ValueError):
    """File does not have the shape of a skill."""

    kind = ErrorKind.NOT_A_SKILL

    def __init__(self, message: str, *, path: Path | None = None):
        super().__init__(message)
        self.path = path


class ScopeViolationError(SkillsyncError):
    """A write was attempted against a read-only scope."""

    kind = ErrorKind.SCOPE_VIOLATION


class ConflictUnresolvedError(SkillsyncError):
    """Interactive resolution was requested but not supplied for some conflicts."""

    kind = ErrorKind.CONFLICT

    def __init__(self, message: str, *, skill_names: list[str] | None = None):
        super().__init__(message)
        self.skill_names = skill_names or []


class CancelledError(SkillsyncError):
    """Cooperative cancellation was observed.

    ``partial`` holds whatever the operation completed before stopping.
    """

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Operation cancelled", *, partial: Any = None):
        super().__init__(message)
        self.partial = partial


class InvariantViolationError(SkillsyncError, AssertionError):
    """An internal consistency check failed."""

    kind = ErrorKind.INVARIANT_VIOLATION


class ConfigError(SkillsyncError, ValueError):
    """Configuration error."""

    kind = ErrorKind.CONFIG


class BackupNotFoundError(SkillsyncError, KeyError):
    """No backup with the requested id."""

    kind = ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return self.message


class SkillNotFoundError(SkillsyncError, LookupError):
    """The requested skill does not exist in the given scope."""

    kind = ErrorKind.NOT_FOUND


class SkillExistsError(SkillsyncError):
    """A skill with the same name already exists at the destination."""

    kind = ErrorKind.EXISTS


def exit_code_for(error: BaseException) -> ExitCode:
    """Map an error onto the exit code the CLI reports for it."""
    if isinstance(error, ConflictUnresolvedError):
        return ExitCode.CONFLICT
    if isinstance(error, (ConfigError, ScopeViolationError, SkillNotFoundError, SkillExistsError)):
        return ExitCode.USAGE
    if isinstance(error, BackupNotFoundError):
        return ExitCode.USAGE
    if isinstance(error, (SkillIOError, OSError)):
        return ExitCode.IO
    return ExitCode.PARTIAL

"""Data model shared by every skillsync component."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SkillLayout = Literal["directory", "file"]

SKILL_FILE_NAMES = ("SKILL.md", "skill.md")


class Platform(StrEnum):
    """A supported AI coding assistant."""

    CLAUDE_CODE = "claude-code"
    CURSOR = "cursor"
    CODEX = "codex"

    @property
    def code(self) -> str:
        """Short display code, at most three characters."""
        return _PLATFORM_CODES[self]

    @property
    def config_dir(self) -> str:
        """Directory name the platform keeps its configuration under, e.g. ``.claude``."""
        return _PLATFORM_DIRS[self]

    @property
    def layout(self) -> SkillLayout:
        """On-disk layout used when skillsync writes a new skill for this platform."""
        return "file" if self is Platform.CURSOR else "directory"

    @property
    def skill_suffixes(self) -> tuple[str, ...]:
        if self is Platform.CURSOR:
            return (".md", ".mdc")
        return (".md",)

    @classmethod
    def parse(cls, value: str) -> Platform:
        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            pass
        alias = _PLATFORM_ALIASES.get(normalized)
        if alias is None:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"unknown platform {value!r} (valid: {valid})")
        return alias


_PLATFORM_CODES = {
    Platform.CLAUDE_CODE: "CC",
    Platform.CURSOR: "CUR",
    Platform.CODEX: "CDX",
}

_PLATFORM_DIRS = {
    Platform.CLAUDE_CODE: ".claude",
    Platform.CURSOR: ".cursor",
    Platform.CODEX: ".codex",
}

_PLATFORM_ALIASES = {
    "claude": Platform.CLAUDE_CODE,
    "claudecode": Platform.CLAUDE_CODE,
    "claude_code": Platform.CLAUDE_CODE,
    "cc": Platform.CLAUDE_CODE,
    "cur": Platform.CURSOR,
    "cdx": Platform.CODEX,
}


class Scope(StrEnum):
    """Tier a skill was discovered in.

    Members are declared from highest to lowest precedence.
    """

    REPO = "repo"
    USER = "user"
    PLUGIN = "plugin"
    SYSTEM = "system"
    ADMIN = "admin"
    BUILTIN = "builtin"

    @property
    def precedence(self) -> int:
        """Higher values override lower ones."""
        return _SCOPE_PRECEDENCE[self]

    @property
    def writable(self) -> bool:
        return self in (Scope.REPO, Scope.USER)

    @property
    def description(self) -> str:
        return _SCOPE_DESCRIPTIONS[self]

    def outranks(self, other: Scope) -> bool:
        return self.precedence > other.precedence

    @classmethod
    def by_precedence(cls) -> list[Scope]:
        """All scopes, highest precedence first."""
        return sorted(cls, key=lambda s: s.precedence, reverse=True)

    @classmethod
    def parse(cls, value: str) -> Scope:
        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            pass
        alias = _SCOPE_ALIASES.get(normalized)
        if alias is None:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"unknown scope {value!r} (valid: {valid})")
        return alias


_SCOPE_PRECEDENCE = {
    Scope.REPO: 5,
    Scope.USER: 4,
    Scope.PLUGIN: 3,
    Scope.SYSTEM: 2,
    Scope.ADMIN: 1,
    Scope.BUILTIN: 0,
}

_SCOPE_DESCRIPTIONS = {
    Scope.REPO: "Repository-level skills local to a specific project",
    Scope.USER: "User-level skills in the user's home directory",
    Scope.PLUGIN: "Skills installed through the skillsync plugin directory",
    Scope.SYSTEM: "System-wide skills installed at the system level",
    Scope.ADMIN: "Administrator-defined skills",
    Scope.BUILTIN: "Built-in skills that ship with the platform",
}

_SCOPE_ALIASES = {
    "repository": Scope.REPO,
    "project": Scope.REPO,
    "local": Scope.REPO,
    "global": Scope.USER,
    "home": Scope.USER,
    "plugins": Scope.PLUGIN,
    "administrator": Scope.ADMIN,
    "sys": Scope.SYSTEM,
    "default": Scope.BUILTIN,
    "built-in": Scope.BUILTIN,
}


class Skill(BaseModel):
    """A skill as found on disk. Instances are immutable; use :meth:`with_changes`."""

    model_config = ConfigDict(frozen=True)

    name: str
    platform: Platform
    scope: Scope
    path: Path
    description: str | None = None
    tools: tuple[str, ...] = ()
    content: str = ""
    modified_at: datetime = Field(default_factory=lambda: datetime.fromtimestamp(0, UTC))
    raw_front: dict[str, Any] = Field(default_factory=dict)
    front_block: str = Field(default="", repr=False)
    """Exact front-matter text (delimiters included) as read from disk."""

    @property
    def key(self) -> str:
        """Canonical identity used for maps and deduplication."""
        return f"{self.platform.value}:{self.scope.value}:{self.name}"

    @property
    def layout(self) -> SkillLayout:
        return "directory" if self.path.name in SKILL_FILE_NAMES else "file"

    @property
    def root_path(self) -> Path:
        """The skill directory for directory-form skills, the file otherwise."""
        return self.path.parent if self.layout == "directory" else self.path

    def display_scope(self) -> str:
        match self.scope:
            case Scope.USER:
                return f"~/{self.platform.config_dir}/skills"
            case Scope.REPO:
                return f"{self.platform.config_dir}/skills"
            case Scope.PLUGIN:
                plugin = self.raw_front.get("plugin")
                return f"plugin:{plugin}" if plugin else "plugin"
            case _:
                return self.scope.value

    def with_changes(self, **changes: Any) -> Skill:
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)


def skill_sort_key(skill: Skill) -> tuple[str, str, str, int]:
    """Stable ordering: platform, case-insensitive name, exact name, precedence (high first)."""
    return (skill.platform.value, skill.name.casefold(), skill.name, -skill.scope.precedence)


class BackupRecord(BaseModel):
    """Metadata describing one stored snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str
    platform: Platform
    source_path: Path
    created_at: datetime
    size: int
    checksum: str


@dataclass(frozen=True, slots=True)
class PlatformSpec:
    """A ``platform[:scope[,scope...]]`` selector, e.g. ``cursor:repo,user``."""

    platform: Platform
    scopes: tuple[Scope, ...] = field(default=())

    def __str__(self) -> str:
        if not self.scopes:
            return self.platform.value
        return f"{self.platform.value}:{','.join(s.value for s in self.scopes)}"

    @classmethod
    def parse(cls, value: str) -> PlatformSpec:
        value = value.strip()
        if not value:
            raise ValueError("platform spec cannot be empty")
        platform_part, sep, scope_part = value.partition(":")
        platform = Platform.parse(platform_part)
        if not sep:
            return cls(platform)
        scopes = [Scope.parse(s) for s in scope_part.split(",") if s.strip()]
        if not scopes:
            raise ValueError(f"no valid scopes found in {value!r}")
        return cls(platform, tuple(scopes))

    def target_scope(self) -> Scope:
        """Scope to write into when this spec names a sync target; defaults to ``user``."""
        if len(self.scopes) > 1:
            raise ValueError(f"target can only have one scope, got {len(self.scopes)}")
        scope = self.scopes[0] if self.scopes else Scope.USER
        if not scope.writable:
            raise ValueError(f"target scope must be 'repo' or 'user', got {scope.value!r}")
        return scope

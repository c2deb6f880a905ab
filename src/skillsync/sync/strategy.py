"""Conflict resolution strategies and per-conflict choices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Strategy(StrEnum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    NEWER = "newer"
    MERGE = "merge"
    THREE_WAY = "three-way"
    INTERACTIVE = "interactive"

    @property
    def description(self) -> str:
        return _STRATEGY_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: str) -> Strategy:
        normalized = value.strip().lower().replace("_", "-")
        if normalized == "threeway":
            normalized = cls.THREE_WAY.value
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"unknown strategy {value!r} (valid: {valid})") from None


_STRATEGY_DESCRIPTIONS = {
    Strategy.OVERWRITE: "Replace target with source",
    Strategy.SKIP: "Leave existing target skills unchanged",
    Strategy.NEWER: "Keep whichever side was modified most recently",
    Strategy.MERGE: "Union both versions, marking differing blocks",
    Strategy.THREE_WAY: "Merge against the lines both versions share",
    Strategy.INTERACTIVE: "Ask for a decision on each conflict",
}


class ResolutionChoice(StrEnum):
    USE_SOURCE = "use-source"
    USE_TARGET = "use-target"
    MERGE = "merge"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class Resolution:
    """A caller's decision for one conflict.

    ``content``, when given, replaces the body that would otherwise be written
    for ``use-source`` or ``merge``.
    """

    choice: ResolutionChoice
    content: str | None = None

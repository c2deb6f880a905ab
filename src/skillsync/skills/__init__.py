"""Skill files: parsing, serialization and discovery."""

from __future__ import annotations

from skillsync.skills.discovery import (
    DiscoveryEngine,
    DiscoveryOptions,
    DiscoveryResult,
    DiscoveryWarning,
    collapse_by_precedence,
    discover,
    skill_assets,
)
from skillsync.skills.parser import (
    parse_skill_file,
    parse_skill_text,
    render_skill,
    serialize_skill,
    split_frontmatter,
)

__all__ = [
    "DiscoveryEngine",
    "DiscoveryOptions",
    "DiscoveryResult",
    "DiscoveryWarning",
    "collapse_by_precedence",
    "discover",
    "parse_skill_file",
    "parse_skill_text",
    "render_skill",
    "serialize_skill",
    "skill_assets",
    "split_frontmatter",
]

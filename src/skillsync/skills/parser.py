"""YAML front-matter parsing and serialization for skill files."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, cast

import yaml

from skillsync.exception import NotASkillError, SkillIOError, SkillParseError
from skillsync.model import SKILL_FILE_NAMES, Platform, Scope, Skill
from skillsync.utils.string import dominant_newline

FRONTMATTER_DELIMITER = "---"

_TOOLS_SPLIT_RE = re.compile(r"[,\s]+")

_RECOGNIZED_KEYS = ("description", "tools")


def split_frontmatter(text: str, path: Path | None = None) -> tuple[str, str | None, str]:
    """Split skill text into its front-matter block, the YAML inside it and the body.

    Returns ``(front_block, yaml_text, body)``. ``front_block`` is the exact text of
    the block including both delimiter lines; when the text has no front-matter it
    is empty and ``yaml_text`` is ``None``.

    Raises:
        SkillParseError: If the opening delimiter is never closed.
    """
    first_end = text.find("\n")
    first_line = text if first_end == -1 else text[:first_end]
    if first_line.rstrip("\r") != FRONTMATTER_DELIMITER:
        return "", None, text
    if first_end == -1:
        raise SkillParseError("Front-matter not properly closed with ---", path=path, line=1)

    pos = first_end + 1
    while pos <= len(text):
        end = text.find("\n", pos)
        line = text[pos:] if end == -1 else text[pos:end]
        if line.rstrip("\r") == FRONTMATTER_DELIMITER:
            block_end = len(text) if end == -1 else end + 1
            return text[:block_end], text[first_end + 1 : pos], text[block_end:]
        if end == -1:
            break
        pos = end + 1
    raise SkillParseError("Front-matter not properly closed with ---", path=path, line=1)


def load_frontmatter(yaml_text: str, path: Path | None = None) -> dict[str, Any]:
    """Load the YAML between the delimiters; it must be a mapping or empty."""
    try:
        raw: Any = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        # +2 accounts for the opening delimiter and 0-based marks
        line = mark.line + 2 if mark is not None else None
        raise SkillParseError(f"Invalid YAML in front-matter: {e}", path=path, line=line) from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SkillParseError("Front-matter must be a YAML mapping", path=path, line=2)
    mapping = cast(dict[Any, Any], raw)
    return {str(key): value for key, value in mapping.items()}


def parse_tools(raw: Any) -> tuple[str, ...]:
    """Normalize a ``tools`` value into an ordered, duplicate-free tuple.

    A scalar is split on commas and whitespace; a sequence contributes one tag per
    non-empty item.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        items = _TOOLS_SPLIT_RE.split(raw)
    elif isinstance(raw, (list, tuple)):
        items = [str(item).strip() for item in cast(list[Any], raw) if item is not None]
    else:
        items = [str(raw)]
    return tuple(dict.fromkeys(item for item in items if item))


def _parse_description(raw: Any, path: Path | None) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, (dict, list)):
        raise SkillParseError("Front-matter 'description' must be a string", path=path)
    return str(raw)


def _recognized_fields(
    front: dict[str, Any], path: Path | None = None
) -> tuple[str | None, tuple[str, ...], dict[str, Any]]:
    description = _parse_description(front.get("description"), path)
    tools = parse_tools(front.get("tools"))
    raw_front = {k: v for k, v in front.items() if k not in _RECOGNIZED_KEYS}
    return description, tools, raw_front


def skill_name_for(path: Path, raw_front: dict[str, Any]) -> str:
    """Front-matter ``name`` if set, else the skill directory name or the file stem."""
    override = raw_front.get("name")
    if override is not None and str(override).strip():
        return str(override).strip()
    if path.name in SKILL_FILE_NAMES:
        return path.parent.name
    return path.stem


def parse_skill_text(
    text: str,
    *,
    path: Path,
    platform: Platform,
    scope: Scope,
    modified_at: datetime | None = None,
) -> Skill:
    """Build a :class:`Skill` from already-decoded file text."""
    front_block, yaml_text, body = split_frontmatter(text, path)
    front = load_frontmatter(yaml_text, path) if yaml_text is not None else {}
    description, tools, raw_front = _recognized_fields(front, path)
    if not body.strip():
        raise NotASkillError(f"Skill file has no body: {path}", path=path)

    fields: dict[str, Any] = {
        "name": skill_name_for(path, raw_front),
        "platform": platform,
        "scope": scope,
        "path": path,
        "description": description,
        "tools": tools,
        "content": body,
        "raw_front": raw_front,
        "front_block": front_block,
    }
    if modified_at is not None:
        fields["modified_at"] = modified_at
    return Skill(**fields)


def parse_skill_file(path: Path, platform: Platform, scope: Scope) -> Skill:
    """
    Parse a skill file on disk.

    Raises:
        NotASkillError: If the file has the wrong extension, is empty or has no body.
        SkillIOError: If the file cannot be read.
        SkillParseError: If the text is not UTF-8 or the front-matter is invalid.
    """
    if path.suffix.lower() not in platform.skill_suffixes:
        raise NotASkillError(f"Not a skill file for {platform.value}: {path}", path=path)
    try:
        data = path.read_bytes()
        stat = path.stat()
    except OSError as e:
        raise SkillIOError(f"Failed to read skill file {path}: {e}", path=path, cause=e) from e
    if not data.strip():
        raise NotASkillError(f"Skill file is empty: {path}", path=path)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SkillParseError(f"Skill file is not valid UTF-8: {e}", path=path) from e

    return parse_skill_text(
        text,
        path=path.resolve(),
        platform=platform,
        scope=scope,
        modified_at=datetime.fromtimestamp(stat.st_mtime, UTC),
    )


def render_skill(skill: Skill) -> str:
    """Render a skill back to file text.

    The original front-matter block is reused verbatim whenever the recognized
    fields still match it, so unchanged skills round-trip byte-identically.
    """
    if skill.front_block:
        _, yaml_text, _ = split_frontmatter(skill.front_block)
        if yaml_text is not None:
            try:
                original = _recognized_fields(load_frontmatter(yaml_text))
            except SkillParseError:
                original = None
            if original == (skill.description, skill.tools, skill.raw_front):
                return skill.front_block + skill.content
    elif skill.description is None and not skill.tools and not skill.raw_front:
        return skill.content
    return render_frontmatter(skill) + skill.content


def render_frontmatter(skill: Skill) -> str:
    """Generate a fresh front-matter block using the body's dominant line ending."""
    data: dict[str, Any] = {}
    if skill.description is not None:
        data["description"] = skill.description
    if skill.tools:
        data["tools"] = list(skill.tools)
    for key, value in skill.raw_front.items():
        if key not in _RECOGNIZED_KEYS:
            data[key] = value
    newline = dominant_newline(skill.content)
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True) if data else ""
    if newline != "\n":
        dumped = dumped.replace("\n", newline)
    return f"{FRONTMATTER_DELIMITER}{newline}{dumped}{FRONTMATTER_DELIMITER}{newline}"


def serialize_skill(skill: Skill) -> bytes:
    """Serialize a skill to the exact bytes written to disk."""
    return render_skill(skill).encode("utf-8")

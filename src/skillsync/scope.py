"""Moving skills between the writable scopes of one platform."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger

from skillsync.backup.controller import BackupController
from skillsync.exception import (
    ConfigError,
    ScopeViolationError,
    SkillExistsError,
    SkillIOError,
    SkillNotFoundError,
)
from skillsync.model import BackupRecord, Platform, Scope, Skill
from skillsync.paths import PathResolver
from skillsync.skills.discovery import DiscoveryOptions, discover, skill_assets
from skillsync.skills.parser import serialize_skill


def locate_skill(
    name: str,
    platform: Platform,
    scope: Scope,
    *,
    resolver: PathResolver,
    working_dir: Path,
) -> Skill:
    """Find the skill called ``name`` in one scope of ``platform``."""
    result = discover(
        [platform],
        working_dir,
        DiscoveryOptions(scope_filter=frozenset({scope}), collapse_precedence=False),
        resolver=resolver,
    )
    for skill in result.skills:
        if skill.name == name:
            return skill
    raise SkillNotFoundError(f"Skill '{name}' not found in {platform.value} {scope.value} scope")


def _destination(skill: Skill, root: Path, name: str) -> tuple[Path, Path]:
    """Return ``(root_path, skill_file)`` for the moved skill."""
    if skill.layout == "directory":
        skill_dir = root / name
        return skill_dir, skill_dir / skill.path.name
    target = root / f"{name}{skill.path.suffix}"
    return target, target


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


def _swap_in(staged: Path, dest: Path, aside: Path) -> None:
    """Replace ``dest`` with ``staged``; the previous ``dest`` comes back if the swap fails."""
    if not dest.exists() and not dest.is_symlink():
        os.replace(staged, dest)
        return
    os.replace(dest, aside)
    try:
        os.replace(staged, dest)
    except OSError:
        os.replace(aside, dest)
        raise


def move_skill(
    skill: Skill,
    to_scope: Scope,
    *,
    resolver: PathResolver,
    working_dir: Path,
    remove_source: bool = False,
    force: bool = False,
    rename: str | None = None,
    dry_run: bool = False,
) -> Skill:
    """
    Copy (or move) a skill into another writable scope of the same platform.

    Directory-form skills are copied with all of their assets. The copy is built
    in a hidden staging directory next to the destination and swapped in only once
    it is complete, so a failed move leaves an existing destination as it was.
    Returns the skill as it exists, or would exist, at the destination.

    Raises:
        ScopeViolationError: If either scope is read-only.
        SkillExistsError: If the destination exists and ``force`` is not set.
    """
    if not skill.scope.writable or not to_scope.writable:
        raise ScopeViolationError(
            f"Cannot move '{skill.name}' from {skill.scope.value} to {to_scope.value}: "
            "only repo and user scopes are writable"
        )
    if skill.scope is to_scope:
        raise ConfigError(f"Skill '{skill.name}' is already in {to_scope.value} scope")

    name = rename.strip() if rename else skill.name
    if not name:
        raise ConfigError("New skill name cannot be empty")
    root = resolver.write_root(skill.platform, to_scope, working_dir)
    dest_root, dest_file = _destination(skill, root, name)
    if dest_root.absolute() == skill.root_path.absolute():
        raise ConfigError(f"Source and destination of '{skill.name}' are the same path")
    if dest_root.exists() and not force:
        raise SkillExistsError(
            f"Skill '{name}' already exists in {to_scope.value} scope at {dest_root}"
        )

    raw_front = dict(skill.raw_front)
    if rename and "name" in raw_front:
        raw_front["name"] = name
    moved = skill.with_changes(name=name, scope=to_scope, path=dest_file, raw_front=raw_front)
    if dry_run:
        return moved

    try:
        root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{name}.", suffix=".tmp", dir=root))
    except OSError as e:
        raise SkillIOError(f"Failed to stage skill '{skill.name}': {e}", path=root, cause=e) from e
    try:
        staged_root, staged_file = _destination(skill, staging, name)
        if skill.layout == "directory":
            shutil.copytree(skill.root_path, staged_root, symlinks=True)
        staged_file.write_bytes(serialize_skill(moved))
        _swap_in(staged_root, dest_root, staging / ".previous")
        if remove_source:
            _remove(skill.root_path)
    except OSError as e:
        raise SkillIOError(
            f"Failed to move skill '{skill.name}': {e}", path=dest_root, cause=e
        ) from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.info(
        "{verb} {name} from {src} to {dst}",
        verb="Moved" if remove_source else "Copied",
        name=skill.name,
        src=skill.scope.value,
        dst=to_scope.value,
    )
    return moved.with_changes(path=dest_file.resolve())


def promote(skill: Skill, **kwargs: Any) -> Skill:
    """Move a repository skill up to the user scope."""
    if skill.scope is not Scope.REPO:
        raise ScopeViolationError(
            f"Only repo skills can be promoted, '{skill.name}' is {skill.scope.value}"
        )
    return move_skill(skill, Scope.USER, **kwargs)


def demote(skill: Skill, **kwargs: Any) -> Skill:
    """Move a user skill down into the current repository."""
    if skill.scope is not Scope.USER:
        raise ScopeViolationError(
            f"Only user skills can be demoted, '{skill.name}' is {skill.scope.value}"
        )
    return move_skill(skill, Scope.REPO, **kwargs)


def delete_skill(skill: Skill, backups: BackupController | None = None) -> list[BackupRecord]:
    """
    Delete a skill from a writable scope.

    With ``backups``, the skill file and every asset of a directory-form skill are
    snapshotted first; the skill file's record comes first in the returned list.
    """
    if not skill.scope.writable:
        raise ScopeViolationError(
            f"Cannot delete '{skill.name}' from read-only scope '{skill.scope.value}'"
        )
    records: list[BackupRecord] = []
    if backups is not None:
        records.append(backups.snapshot(skill.path, skill.platform))
        for relative in skill_assets(skill):
            records.append(backups.snapshot(skill.root_path / relative, skill.platform))
    try:
        _remove(skill.root_path)
    except OSError as e:
        raise SkillIOError(
            f"Failed to delete skill '{skill.name}': {e}", path=skill.root_path, cause=e
        ) from e
    logger.info("Deleted {name} from {scope}", name=skill.name, scope=skill.scope.value)
    return records

"""Tiered, precedence-ordered skill discovery."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from skillsync.cancel import CancelToken
from skillsync.exception import (
    CancelledError,
    ErrorKind,
    NotASkillError,
    SkillIOError,
    SkillParseError,
)
from skillsync.model import SKILL_FILE_NAMES, Platform, Scope, Skill, skill_sort_key
from skillsync.paths import PathResolver
from skillsync.skills.parser import parse_skill_file


@dataclass(frozen=True, slots=True)
class DiscoveryOptions:
    scope_filter: frozenset[Scope] | None = None
    """Scopes to walk; ``None`` walks all of them."""
    collapse_precedence: bool = True
    """Keep only the highest-precedence instance of each ``(platform, name)``."""
    follow_symlinks: bool = False
    repo_root: Path | None = None
    admin_path: str | Path | None = None
    system_path: str | Path | None = None
    builtin_path: str | Path | None = None


@dataclass(frozen=True, slots=True)
class DiscoveryWarning:
    """A non-fatal problem found while walking a root."""

    kind: ErrorKind
    path: Path
    message: str


@dataclass(slots=True)
class DiscoveryResult:
    skills: list[Skill] = field(default_factory=list)
    warnings: list[DiscoveryWarning] = field(default_factory=list)

    def by_platform(self, platform: Platform) -> list[Skill]:
        return [s for s in self.skills if s.platform is platform]


class DiscoveryEngine:
    """Walks the roots of each platform's scopes and parses the skills found there."""

    def __init__(
        self,
        options: DiscoveryOptions | None = None,
        *,
        resolver: PathResolver | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.options = options or DiscoveryOptions()
        self.resolver = resolver or PathResolver()
        self.cancel = cancel
        self._found: dict[tuple[Platform, Scope, str], Skill] = {}
        self._warnings: list[DiscoveryWarning] = []

    def run(self, platforms: Iterable[Platform], working_dir: Path) -> DiscoveryResult:
        self._found = {}
        self._warnings = []
        for platform in dict.fromkeys(platforms):
            roots = self.resolver.search_paths(
                platform,
                working_dir,
                repo_root=self.options.repo_root,
                admin_path=self.options.admin_path,
                system_path=self.options.system_path,
                builtin_path=self.options.builtin_path,
            )
            for scope, root in roots:
                self._check_cancelled()
                if self.options.scope_filter is not None and scope not in self.options.scope_filter:
                    continue
                self._walk_root(platform, scope, root)
        result = self._result()
        logger.info(
            "Discovered {count} skills ({warnings} warnings)",
            count=len(result.skills),
            warnings=len(result.warnings),
        )
        return result

    def _walk_root(self, platform: Platform, scope: Scope, root: Path) -> None:
        if not root.exists():
            logger.trace("Skipping missing root {root}", root=root)
            return
        try:
            entries = sorted(root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning("Cannot read skills root {root}: {error}", root=root, error=e)
            self._warn(ErrorKind.IO, root, f"Cannot read skills root: {e}")
            return

        logger.debug("Walking {scope} root {root}", scope=scope.value, root=root)
        visited: set[Path] = {root.resolve()}
        for skill_file in self._candidates(platform, entries, visited):
            self._check_cancelled()
            self._load(platform, scope, skill_file)

    def _candidates(
        self, platform: Platform, entries: list[Path], visited: set[Path]
    ) -> Iterator[Path]:
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_symlink():
                if not self.options.follow_symlinks:
                    logger.debug("Skipping symlink {path}", path=entry)
                    continue
                try:
                    real = entry.resolve(strict=True)
                except (OSError, RuntimeError) as e:
                    self._warn(ErrorKind.IO, entry, f"Broken symlink: {e}")
                    continue
                if real in visited:
                    logger.debug("Skipping already visited {path}", path=entry)
                    continue
                visited.add(real)
            if entry.is_dir():
                skill_file = _find_skill_file(entry)
                if skill_file is None:
                    continue
                if skill_file.is_symlink() and not self.options.follow_symlinks:
                    logger.debug("Skipping symlink {path}", path=skill_file)
                    continue
                yield skill_file
            elif entry.is_file() and entry.suffix.lower() in platform.skill_suffixes:
                yield entry

    def _load(self, platform: Platform, scope: Scope, skill_file: Path) -> None:
        try:
            skill = parse_skill_file(skill_file, platform, scope)
        except NotASkillError as e:
            logger.debug("Not a skill: {path}: {error}", path=skill_file, error=e.message)
            self._warn(e.kind, skill_file, e.message)
            return
        except (SkillParseError, SkillIOError) as e:
            logger.warning(
                "Skipping invalid skill {path}: {error}", path=skill_file, error=e.message
            )
            self._warn(e.kind, skill_file, e.message)
            return

        key = (platform, scope, skill.name)
        existing = self._found.get(key)
        if existing is not None:
            self._warn(
                ErrorKind.DUPLICATE,
                skill_file,
                f"Skill '{skill.name}' already found at {existing.path}",
            )
            return
        self._found[key] = skill

    def _warn(self, kind: ErrorKind, path: Path, message: str) -> None:
        self._warnings.append(DiscoveryWarning(kind=kind, path=path, message=message))

    def _check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.cancelled:
            raise CancelledError("Discovery cancelled", partial=self._result())

    def _result(self) -> DiscoveryResult:
        skills = list(self._found.values())
        if self.options.collapse_precedence:
            skills = collapse_by_precedence(skills)
        return DiscoveryResult(
            skills=sorted(skills, key=skill_sort_key),
            warnings=list(self._warnings),
        )


def _find_skill_file(skill_dir: Path) -> Path | None:
    for name in SKILL_FILE_NAMES:
        path = skill_dir / name
        if path.is_file():
            return path
    return None


def collapse_by_precedence(skills: Iterable[Skill]) -> list[Skill]:
    """Keep the highest-precedence skill for each ``(platform, name)``."""
    best: dict[tuple[Platform, str], Skill] = {}
    for skill in skills:
        key = (skill.platform, skill.name)
        current = best.get(key)
        if current is None or skill.scope.outranks(current.scope):
            best[key] = skill
    return list(best.values())


def skill_assets(skill: Skill) -> tuple[Path, ...]:
    """
    Files shipped next to a directory-form skill's skill file, relative to its directory.

    Hidden entries, symlinks and non-regular files are left out. File-form skills
    have no assets.
    """
    if skill.layout != "directory":
        return ()
    root = skill.root_path
    assets: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        base = Path(dirpath)
        for filename in filenames:
            path = base / filename
            if filename.startswith(".") or path == skill.path:
                continue
            if path.is_symlink() or not path.is_file():
                continue
            assets.append(path.relative_to(root))
    return tuple(sorted(assets))


def discover(
    platforms: Iterable[Platform],
    working_dir: Path,
    options: DiscoveryOptions | None = None,
    *,
    resolver: PathResolver | None = None,
    cancel: CancelToken | None = None,
) -> DiscoveryResult:
    """
    Discover skills for ``platforms`` across all resolved scope roots.

    Per-file problems become warnings on the result. Raises ``CancelledError``
    carrying the partial :class:`DiscoveryResult` if ``cancel`` fires.
    """
    return DiscoveryEngine(options, resolver=resolver, cancel=cancel).run(platforms, working_dir)

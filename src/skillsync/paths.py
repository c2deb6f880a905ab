"""Resolution of per-platform, per-scope skill roots."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from skillsync.exception import ScopeViolationError
from skillsync.model import Platform, Scope
from skillsync.share import resolve_share_dir
from skillsync.utils.path import expand_path, find_repo_root


class PathResolver:
    """
    Compute the ordered list of candidate roots for each scope of a platform.

    Resolution never touches the filesystem beyond probing for a ``.git`` entry
    when no repository root is supplied, and never fails: a tier whose roots
    cannot be determined gets an empty list.
    """

    def __init__(self, home: Path | None = None, skillsync_home: Path | None = None) -> None:
        self.home = home if home is not None else Path.home()
        self.skillsync_home = resolve_share_dir(skillsync_home, home=self.home)

    def plugin_root(self, platform: Platform) -> Path:
        return self.skillsync_home / "plugins" / platform.value

    def user_root(self, platform: Platform) -> Path:
        return self.home / platform.config_dir / "skills"

    def resolve(
        self,
        platform: Platform,
        working_dir: Path,
        *,
        repo_root: Path | None = None,
        admin_path: str | Path | None = None,
        system_path: str | Path | None = None,
        builtin_path: str | Path | None = None,
    ) -> dict[Scope, list[Path]]:
        working_dir = expand_path(working_dir)
        if repo_root is None:
            repo_root = find_repo_root(working_dir)
        else:
            repo_root = expand_path(repo_root, working_dir)

        repo_roots = [working_dir / platform.config_dir / "skills"]
        if repo_root is not None:
            candidate = repo_root / platform.config_dir / "skills"
            if candidate not in repo_roots:
                repo_roots.append(candidate)

        roots: dict[Scope, list[Path]] = {
            Scope.REPO: repo_roots,
            Scope.USER: [self.user_root(platform)],
            Scope.PLUGIN: [self.plugin_root(platform)],
            Scope.SYSTEM: [],
            Scope.ADMIN: [],
            Scope.BUILTIN: [],
        }
        for scope, raw in (
            (Scope.ADMIN, admin_path),
            (Scope.SYSTEM, system_path),
            (Scope.BUILTIN, builtin_path),
        ):
            if raw:
                roots[scope].append(expand_path(raw, working_dir))

        logger.trace(
            "Resolved roots for {platform}: {roots}",
            platform=platform.value,
            roots={scope.value: [str(p) for p in paths] for scope, paths in roots.items()},
        )
        return roots

    def search_paths(
        self,
        platform: Platform,
        working_dir: Path,
        **kwargs: str | Path | None,
    ) -> list[tuple[Scope, Path]]:
        """Flatten :meth:`resolve` into ``(scope, root)`` pairs, highest precedence first."""
        roots = self.resolve(platform, working_dir, **kwargs)  # type: ignore[arg-type]
        return [(scope, path) for scope in Scope.by_precedence() for path in roots[scope]]

    def write_root(self, platform: Platform, scope: Scope, working_dir: Path) -> Path:
        """Return the root new skills of ``platform`` are written to for ``scope``."""
        if not scope.writable:
            raise ScopeViolationError(
                f"Scope '{scope.value}' is read-only; only repo and user scopes can be written"
            )
        if scope is Scope.USER:
            return self.user_root(platform)
        return self.resolve(platform, working_dir)[Scope.REPO][0]

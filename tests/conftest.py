from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from skillsync.model import Platform, Scope, Skill
from skillsync.paths import PathResolver

WriteSkill = Callable[..., Path]
MakeSkill = Callable[..., Skill]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    (path / ".git").mkdir(parents=True)
    return path


@pytest.fixture
def resolver(home: Path) -> PathResolver:
    return PathResolver(home=home, skillsync_home=home / ".skillsync")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SKILLSYNC_HOME", raising=False)


@pytest.fixture
def write_skill() -> WriteSkill:
    """Write a skill under ``root`` in directory form (default) or file form."""

    def _write(
        root: Path,
        name: str,
        body: str = "Body\n",
        *,
        front: str | None = None,
        layout: str = "directory",
        suffix: str = ".md",
    ) -> Path:
        text = body if front is None else f"---\n{front}---\n{body}"
        if layout == "directory":
            path = root / name / "SKILL.md"
        else:
            path = root / f"{name}{suffix}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def make_skill(tmp_path: Path) -> MakeSkill:
    """Build an in-memory skill; ``path`` defaults to a directory-form location."""

    def _make(
        name: str,
        content: str = "Body\n",
        *,
        platform: Platform = Platform.CLAUDE_CODE,
        scope: Scope = Scope.USER,
        path: Path | None = None,
        modified_at: datetime | None = None,
        **fields: Any,
    ) -> Skill:
        if path is None:
            path = tmp_path / platform.value / scope.value / name / "SKILL.md"
        return Skill(
            name=name,
            platform=platform,
            scope=scope,
            path=path,
            content=content,
            modified_at=modified_at or datetime(2024, 1, 1, tzinfo=UTC),
            **fields,
        )

    return _make

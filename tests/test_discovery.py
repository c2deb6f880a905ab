from __future__ import annotations

import os
from pathlib import Path

import pytest

from skillsync.cancel import CancelToken
from skillsync.exception import CancelledError, ErrorKind
from skillsync.model import Platform, Scope
from skillsync.paths import PathResolver
from skillsync.skills.discovery import DiscoveryOptions, DiscoveryResult, discover


def _user_root(home: Path, platform: Platform = Platform.CLAUDE_CODE) -> Path:
    return home / platform.config_dir / "skills"


def _repo_root(work_dir: Path, platform: Platform = Platform.CLAUDE_CODE) -> Path:
    return work_dir / platform.config_dir / "skills"


class TestPrecedence:
    @pytest.fixture(autouse=True)
    def _alpha_in_two_scopes(self, home: Path, work_dir: Path, write_skill):
        write_skill(_user_root(home), "alpha", "A")
        write_skill(_repo_root(work_dir), "alpha", "B")

    def test_collapse_keeps_repo_instance(self, resolver: PathResolver, work_dir: Path):
        result = discover([Platform.CLAUDE_CODE], work_dir, resolver=resolver)
        assert len(result.skills) == 1
        skill = result.skills[0]
        assert skill.name == "alpha"
        assert skill.scope is Scope.REPO
        assert skill.content == "B"

    def test_without_collapse_returns_both(self, resolver: PathResolver, work_dir: Path):
        options = DiscoveryOptions(collapse_precedence=False)
        result = discover([Platform.CLAUDE_CODE], work_dir, options, resolver=resolver)
        assert [(s.name, s.scope, s.content) for s in result.skills] == [
            ("alpha", Scope.REPO, "B"),
            ("alpha", Scope.USER, "A"),
        ]

    def test_scope_filter(self, resolver: PathResolver, work_dir: Path):
        options = DiscoveryOptions(scope_filter=frozenset({Scope.USER}))
        result = discover([Platform.CLAUDE_CODE], work_dir, options, resolver=resolver)
        assert [s.scope for s in result.skills] == [Scope.USER]


def test_empty_roots(resolver: PathResolver, work_dir: Path):
    result = discover(list(Platform), work_dir, resolver=resolver)
    assert result == DiscoveryResult()


def test_file_and_directory_layouts(
    resolver: PathResolver, home: Path, work_dir: Path, write_skill
):
    root = _user_root(home, Platform.CURSOR)
    write_skill(root, "gamma", layout="file", suffix=".mdc")
    write_skill(root, "delta", layout="file")
    write_skill(root, "beta")
    (root / "notes.txt").write_text("not a skill")
    (root / "no-skill-dir").mkdir()

    result = discover([Platform.CURSOR], work_dir, resolver=resolver)
    assert [s.name for s in result.skills] == ["beta", "delta", "gamma"]
    assert result.warnings == []


def test_results_are_sorted_across_platforms(
    resolver: PathResolver, home: Path, work_dir: Path, write_skill
):
    write_skill(_user_root(home, Platform.CODEX), "zeta")
    write_skill(_user_root(home, Platform.CLAUDE_CODE), "Beta")
    write_skill(_user_root(home, Platform.CLAUDE_CODE), "alpha")

    result = discover([Platform.CODEX, Platform.CLAUDE_CODE], work_dir, resolver=resolver)
    assert [(s.platform, s.name) for s in result.skills] == [
        (Platform.CLAUDE_CODE, "alpha"),
        (Platform.CLAUDE_CODE, "Beta"),
        (Platform.CODEX, "zeta"),
    ]
    assert result.by_platform(Platform.CODEX)[0].name == "zeta"


def test_invalid_files_become_warnings(
    resolver: PathResolver, home: Path, work_dir: Path, write_skill
):
    root = _user_root(home)
    write_skill(root, "good")
    write_skill(root, "broken", front="description: [oops\n")
    empty = root / "empty" / "SKILL.md"
    empty.parent.mkdir()
    empty.write_bytes(b"")

    result = discover([Platform.CLAUDE_CODE], work_dir, resolver=resolver)
    assert [s.name for s in result.skills] == ["good"]
    kinds = {w.path.parent.name: w.kind for w in result.warnings}
    assert kinds == {"broken": ErrorKind.PARSE, "empty": ErrorKind.NOT_A_SKILL}


def test_duplicate_name_in_one_scope(
    resolver: PathResolver, home: Path, work_dir: Path, write_skill
):
    root = _user_root(home)
    write_skill(root, "first", front="name: shared\n")
    write_skill(root, "second", front="name: shared\n")

    result = discover([Platform.CLAUDE_CODE], work_dir, resolver=resolver)
    assert len(result.skills) == 1
    assert result.skills[0].path.parent.name == "first"
    assert [w.kind for w in result.warnings] == [ErrorKind.DUPLICATE]


def test_hidden_entries_are_skipped(
    resolver: PathResolver, home: Path, work_dir: Path, write_skill
):
    write_skill(_user_root(home), ".draft")
    result = discover([Platform.CLAUDE_CODE], work_dir, resolver=resolver)
    assert result.skills == []


@pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
def test_symlinks_only_followed_when_asked(
    resolver: PathResolver, home: Path, tmp_path: Path, work_dir: Path, write_skill
):
    shared = tmp_path / "shared"
    write_skill(shared, "linked")
    root = _user_root(home)
    root.mkdir(parents=True)
    (root / "linked").symlink_to(shared / "linked", target_is_directory=True)
    (root / "again").symlink_to(shared / "linked", target_is_directory=True)

    result = discover([Platform.CLAUDE_CODE], work_dir, resolver=resolver)
    assert result.skills == []

    options = DiscoveryOptions(follow_symlinks=True)
    result = discover([Platform.CLAUDE_CODE], work_dir, options, resolver=resolver)
    assert [s.name for s in result.skills] == ["linked"]


def test_configured_admin_tier(resolver: PathResolver, tmp_path: Path, work_dir: Path, write_skill):
    admin = tmp_path / "admin"
    write_skill(admin, "policy")
    options = DiscoveryOptions(admin_path=admin)
    result = discover([Platform.CODEX], work_dir, options, resolver=resolver)
    assert [(s.name, s.scope) for s in result.skills] == [("policy", Scope.ADMIN)]


def test_cancel_returns_partial_result(
    resolver: PathResolver, home: Path, work_dir: Path, write_skill
):
    write_skill(_user_root(home), "alpha")
    token = CancelToken()
    token.cancel()
    with pytest.raises(CancelledError) as exc_info:
        discover([Platform.CLAUDE_CODE], work_dir, resolver=resolver, cancel=token)
    assert isinstance(exc_info.value.partial, DiscoveryResult)
    assert exc_info.value.partial.skills == []

from __future__ import annotations

from pathlib import Path

import pytest

from skillsync.model import Platform, PlatformSpec, Scope, skill_sort_key


class TestPlatform:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("claude-code", Platform.CLAUDE_CODE),
            ("Claude", Platform.CLAUDE_CODE),
            (" cursor ", Platform.CURSOR),
            ("cdx", Platform.CODEX),
        ],
    )
    def test_parse(self, raw: str, expected: Platform):
        assert Platform.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="unknown platform 'vim'"):
            Platform.parse("vim")

    def test_layout_and_suffixes(self):
        assert Platform.CLAUDE_CODE.layout == "directory"
        assert Platform.CURSOR.layout == "file"
        assert Platform.CURSOR.skill_suffixes == (".md", ".mdc")
        assert Platform.CODEX.config_dir == ".codex"

    def test_codes_are_short(self):
        assert all(len(p.code) <= 3 for p in Platform)


class TestScope:
    def test_precedence_order(self):
        assert Scope.by_precedence() == [
            Scope.REPO,
            Scope.USER,
            Scope.PLUGIN,
            Scope.SYSTEM,
            Scope.ADMIN,
            Scope.BUILTIN,
        ]

    def test_outranks(self):
        assert Scope.REPO.outranks(Scope.USER)
        assert not Scope.BUILTIN.outranks(Scope.ADMIN)
        assert not Scope.USER.outranks(Scope.USER)

    def test_only_repo_and_user_are_writable(self):
        assert {s for s in Scope if s.writable} == {Scope.REPO, Scope.USER}

    def test_parse_alias(self):
        assert Scope.parse("project") is Scope.REPO
        assert Scope.parse("GLOBAL") is Scope.USER
        with pytest.raises(ValueError, match="unknown scope"):
            Scope.parse("team")


class TestSkill:
    def test_key_and_layout(self, make_skill):
        skill = make_skill("alpha")
        assert skill.key == "claude-code:user:alpha"
        assert skill.layout == "directory"
        assert skill.root_path == skill.path.parent

    def test_file_layout(self, make_skill, tmp_path: Path):
        skill = make_skill("beta", platform=Platform.CURSOR, path=tmp_path / "beta.mdc")
        assert skill.layout == "file"
        assert skill.root_path == tmp_path / "beta.mdc"

    def test_with_changes_returns_new_value(self, make_skill):
        skill = make_skill("alpha", raw_front={"x": 1})
        changed = skill.with_changes(content="other")
        assert changed.content == "other"
        assert skill.content == "Body\n"
        assert changed.raw_front == {"x": 1}

    def test_frozen(self, make_skill):
        skill = make_skill("alpha")
        with pytest.raises(ValueError):
            skill.name = "beta"  # type: ignore[misc]

    def test_display_scope(self, make_skill):
        assert make_skill("a").display_scope() == "~/.claude/skills"
        assert make_skill("a", scope=Scope.REPO).display_scope() == ".claude/skills"
        plugin = make_skill("a", scope=Scope.PLUGIN, raw_front={"plugin": "tools"})
        assert plugin.display_scope() == "plugin:tools"
        assert make_skill("a", scope=Scope.ADMIN).display_scope() == "admin"

    def test_sort_key(self, make_skill):
        skills = [
            make_skill("beta"),
            make_skill("Alpha", scope=Scope.REPO),
            make_skill("alpha", platform=Platform.CURSOR),
            make_skill("Alpha"),
        ]
        ordered = sorted(skills, key=skill_sort_key)
        assert [(s.platform, s.name, s.scope) for s in ordered] == [
            (Platform.CLAUDE_CODE, "Alpha", Scope.REPO),
            (Platform.CLAUDE_CODE, "Alpha", Scope.USER),
            (Platform.CLAUDE_CODE, "beta", Scope.USER),
            (Platform.CURSOR, "alpha", Scope.USER),
        ]


class TestPlatformSpec:
    def test_parse_platform_only(self):
        spec = PlatformSpec.parse("cursor")
        assert spec == PlatformSpec(Platform.CURSOR)
        assert str(spec) == "cursor"

    def test_parse_with_scopes(self):
        spec = PlatformSpec.parse("claude:repo,user")
        assert spec.platform is Platform.CLAUDE_CODE
        assert spec.scopes == (Scope.REPO, Scope.USER)
        assert str(spec) == "claude-code:repo,user"

    def test_empty_scope_list(self):
        with pytest.raises(ValueError, match="no valid scopes"):
            PlatformSpec.parse("cursor:")

    def test_target_scope_defaults_to_user(self):
        assert PlatformSpec.parse("codex").target_scope() is Scope.USER
        assert PlatformSpec.parse("codex:repo").target_scope() is Scope.REPO

    def test_target_scope_rejects_read_only(self):
        with pytest.raises(ValueError, match="must be 'repo' or 'user'"):
            PlatformSpec.parse("codex:system").target_scope()
        with pytest.raises(ValueError, match="only have one scope"):
            PlatformSpec.parse("codex:repo,user").target_scope()

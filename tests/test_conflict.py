from __future__ import annotations

from skillsync.model import Platform, Scope
from skillsync.sync.conflict import (
    ConflictType,
    OutcomeKind,
    classify,
    detect_conflicts,
)

TARGET = Platform.CURSOR


def _target(make_skill, name: str, content: str, scope: Scope = Scope.USER, **fields):
    return make_skill(name, content, platform=TARGET, scope=scope, **fields)


class TestClassify:
    def test_new(self, make_skill):
        outcome = classify(make_skill("alpha"), None)
        assert outcome.kind is OutcomeKind.NEW
        assert outcome.conflict is None

    def test_identical(self, make_skill):
        outcome = classify(make_skill("alpha", "X\n"), _target(make_skill, "alpha", "X\n"))
        assert outcome.kind is OutcomeKind.IDENTICAL

    def test_line_endings_do_not_conflict(self, make_skill):
        source = make_skill("alpha", "a\r\nb\r\n")
        outcome = classify(source, _target(make_skill, "alpha", "a\nb\n"))
        assert outcome.kind is OutcomeKind.IDENTICAL

    def test_content_conflict(self, make_skill):
        outcome = classify(
            make_skill("alpha", "one\ntwo\nthree\n"),
            _target(make_skill, "alpha", "one\nTWO\nthree\n"),
        )
        assert outcome.kind is OutcomeKind.CONFLICT
        conflict = outcome.conflict
        assert conflict is not None
        assert conflict.type is ConflictType.CONTENT
        assert (conflict.lines_added, conflict.lines_removed) == (1, 1)
        assert conflict.summary() == "alpha: content differs (+1 -1)"

    def test_metadata_conflict(self, make_skill):
        outcome = classify(
            make_skill("alpha", "X\n", description="new"),
            _target(make_skill, "alpha", "X\n", description="old"),
        )
        assert outcome.conflict is not None
        assert outcome.conflict.type is ConflictType.METADATA
        assert outcome.conflict.hunks == ()

    def test_tools_difference_is_metadata(self, make_skill):
        outcome = classify(
            make_skill("alpha", "X\n", tools=("Read",)),
            _target(make_skill, "alpha", "X\n"),
        )
        assert outcome.conflict is not None
        assert outcome.conflict.type is ConflictType.METADATA


class TestDetectConflicts:
    def test_report(self, make_skill):
        sources = [
            make_skill("new-one"),
            make_skill("same", "S\n"),
            make_skill("changed", "A\n"),
        ]
        targets = [
            _target(make_skill, "same", "S\n"),
            _target(make_skill, "changed", "B\n"),
            _target(make_skill, "target-only", "T\n"),
        ]
        report = detect_conflicts(sources, targets, TARGET, Scope.USER)
        assert [(o.skill_name, o.kind) for o in report.outcomes] == [
            ("changed", OutcomeKind.CONFLICT),
            ("new-one", OutcomeKind.NEW),
            ("same", OutcomeKind.IDENTICAL),
        ]
        assert [c.skill_name for c in report.conflicts] == ["changed"]
        assert report.missing == []

    def test_other_scopes_are_ignored(self, make_skill):
        targets = [_target(make_skill, "alpha", "old\n", scope=Scope.REPO)]
        report = detect_conflicts([make_skill("alpha", "new\n")], targets, TARGET, Scope.USER)
        assert report.outcomes[0].kind is OutcomeKind.NEW

    def test_bidirectional_reports_missing(self, make_skill):
        targets = [_target(make_skill, "target-only", "T\n")]
        report = detect_conflicts(
            [make_skill("alpha")], targets, TARGET, Scope.USER, bidirectional=True
        )
        assert [(c.skill_name, c.type) for c in report.missing] == [
            ("target-only", ConflictType.MISSING)
        ]
        assert report.missing[0].summary() == "target-only: only present in target"

    def test_highest_precedence_source_wins(self, make_skill):
        sources = [
            make_skill("alpha", "user\n", scope=Scope.USER),
            make_skill("alpha", "repo\n", scope=Scope.REPO),
        ]
        report = detect_conflicts(sources, [], TARGET, Scope.USER)
        assert len(report.outcomes) == 1
        assert report.outcomes[0].source.content == "repo\n"

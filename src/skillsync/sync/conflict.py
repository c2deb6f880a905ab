"""Classification of source skills against an existing target scope."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from skillsync.model import Platform, Scope, Skill
from skillsync.similarity.diff import DiffHunk, diff_text
from skillsync.utils.string import normalize_newlines


class OutcomeKind(StrEnum):
    NEW = "new"
    IDENTICAL = "identical"
    CONFLICT = "conflict"


class ConflictType(StrEnum):
    CONTENT = "content"
    METADATA = "metadata"
    MISSING = "missing"


@dataclass(frozen=True, slots=True)
class Conflict:
    skill_name: str
    type: ConflictType
    source: Skill | None
    target: Skill | None
    hunks: tuple[DiffHunk, ...] = ()
    lines_added: int = 0
    lines_removed: int = 0

    def summary(self) -> str:
        match self.type:
            case ConflictType.CONTENT:
                return (
                    f"{self.skill_name}: content differs "
                    f"(+{self.lines_added} -{self.lines_removed})"
                )
            case ConflictType.METADATA:
                return f"{self.skill_name}: front-matter differs"
            case ConflictType.MISSING:
                return f"{self.skill_name}: only present in target"


@dataclass(frozen=True, slots=True)
class DetectionOutcome:
    skill_name: str
    kind: OutcomeKind
    source: Skill
    target: Skill | None = None
    conflict: Conflict | None = None


@dataclass(slots=True)
class DetectionReport:
    outcomes: list[DetectionOutcome] = field(default_factory=list)
    missing: list[Conflict] = field(default_factory=list)

    @property
    def conflicts(self) -> list[Conflict]:
        return [o.conflict for o in self.outcomes if o.conflict is not None]

    def of_kind(self, kind: OutcomeKind) -> list[DetectionOutcome]:
        return [o for o in self.outcomes if o.kind is kind]


def metadata_differs(source: Skill, target: Skill) -> bool:
    return source.description != target.description or source.tools != target.tools


def classify(source: Skill, target: Skill | None) -> DetectionOutcome:
    """Classify one source skill against its same-named target, if any.

    Content is compared after CRLF normalization; the diff reads from source to
    target.
    """
    if target is None:
        return DetectionOutcome(source.name, OutcomeKind.NEW, source)

    if normalize_newlines(source.content) == normalize_newlines(target.content):
        if not metadata_differs(source, target):
            return DetectionOutcome(source.name, OutcomeKind.IDENTICAL, source, target)
        conflict = Conflict(source.name, ConflictType.METADATA, source, target)
        return DetectionOutcome(source.name, OutcomeKind.CONFLICT, source, target, conflict)

    diff = diff_text(source.content, target.content)
    conflict = Conflict(
        skill_name=source.name,
        type=ConflictType.CONTENT,
        source=source,
        target=target,
        hunks=diff.hunks,
        lines_added=diff.lines_added,
        lines_removed=diff.lines_removed,
    )
    return DetectionOutcome(source.name, OutcomeKind.CONFLICT, source, target, conflict)


def _index_by_name(skills: Iterable[Skill]) -> dict[str, Skill]:
    index: dict[str, Skill] = {}
    for skill in skills:
        current = index.get(skill.name)
        if current is None or skill.scope.outranks(current.scope):
            index[skill.name] = skill
    return index


def detect_conflicts(
    source_skills: Iterable[Skill],
    target_skills: Iterable[Skill],
    target_platform: Platform,
    target_scope: Scope,
    *,
    bidirectional: bool = False,
) -> DetectionReport:
    """
    Classify every source skill as new, identical or conflicting.

    Only target skills in ``(target_platform, target_scope)`` are considered.
    With ``bidirectional``, target skills with no source counterpart are reported
    as ``missing`` conflicts.
    """
    sources = _index_by_name(source_skills)
    targets = _index_by_name(
        t for t in target_skills if t.platform is target_platform and t.scope is target_scope
    )

    report = DetectionReport()
    for name in sorted(sources):
        report.outcomes.append(classify(sources[name], targets.get(name)))

    if bidirectional:
        for name in sorted(targets.keys() - sources.keys()):
            report.missing.append(Conflict(name, ConflictType.MISSING, None, targets[name]))

    logger.debug(
        "Detected {new} new, {identical} identical, {conflicts} conflicting skills",
        new=len(report.of_kind(OutcomeKind.NEW)),
        identical=len(report.of_kind(OutcomeKind.IDENTICAL)),
        conflicts=len(report.conflicts),
    )
    return report

"""Pure sync planning: decide what each source skill does to the target scope."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from loguru import logger

from skillsync.cancel import CancelToken
from skillsync.exception import (
    CancelledError,
    ConflictUnresolvedError,
    InvariantViolationError,
    ScopeViolationError,
)
from skillsync.model import SKILL_FILE_NAMES, Platform, Scope, Skill
from skillsync.skills.discovery import skill_assets
from skillsync.skills.parser import serialize_skill
from skillsync.sync.conflict import (
    Conflict,
    DetectionOutcome,
    OutcomeKind,
    detect_conflicts,
)
from skillsync.sync.merge import merge_text, three_way_merge_text
from skillsync.sync.strategy import Resolution, ResolutionChoice, Strategy


class PlanAction(StrEnum):
    CREATE = "create"
    OVERWRITE = "overwrite"
    SKIP = "skip"
    BACKUP_OVERWRITE = "backup+overwrite"
    MERGE_WRITE = "merge-write"

    @property
    def writes(self) -> bool:
        return self is not PlanAction.SKIP


@dataclass(frozen=True, slots=True)
class PlanEntry:
    skill_name: str
    action: PlanAction
    backup_required: bool
    resolved_content: bytes | None
    target_path: Path
    outcome: OutcomeKind
    source: Skill
    target: Skill | None = None
    conflict: Conflict | None = None
    reason: str = ""
    assets: tuple[Path, ...] = ()
    """Files copied from the source skill directory, relative to it."""


@dataclass(frozen=True, slots=True)
class SyncPlan:
    target_platform: Platform
    target_scope: Scope
    strategy: Strategy
    entries: tuple[PlanEntry, ...] = ()
    missing: tuple[Conflict, ...] = ()

    @property
    def writes(self) -> list[PlanEntry]:
        return [e for e in self.entries if e.action.writes]

    def count(self, action: PlanAction) -> int:
        return sum(1 for e in self.entries if e.action is action)


@dataclass(frozen=True, slots=True)
class Decision:
    action: PlanAction
    content: bytes | None = None
    reason: str = ""


def _source_bytes(source: Skill, body: str | None = None) -> bytes:
    if body is None:
        return serialize_skill(source)
    return serialize_skill(source.with_changes(content=body))


def _overwrite(source: Skill, backup: bool, body: str | None = None, reason: str = "") -> Decision:
    action = PlanAction.BACKUP_OVERWRITE if backup else PlanAction.OVERWRITE
    return Decision(action, _source_bytes(source, body), reason)


def _merge(source: Skill, target: Skill, *, three_way: bool) -> Decision:
    merged = (
        three_way_merge_text(source.content, target.content)
        if three_way
        else merge_text(source.content, target.content)
    )
    reason = "clean merge"
    if merged.has_conflict_markers:
        reason = f"{merged.conflicts} conflict block(s)"
    return Decision(PlanAction.MERGE_WRITE, _source_bytes(source, merged.content), reason)


def resolve_conflict(
    outcome: DetectionOutcome,
    strategy: Strategy,
    *,
    resolution: Resolution | None = None,
) -> Decision:
    """
    Decide how a conflicting skill is written, without touching the filesystem.

    Both the batch strategies and interactive resolutions go through here. For
    ``interactive``, ``resolution`` must be supplied.
    """
    source, target = outcome.source, outcome.target
    if target is None or outcome.conflict is None:
        raise InvariantViolationError(f"'{outcome.skill_name}' is not a conflict")

    match strategy:
        case Strategy.OVERWRITE:
            return _overwrite(source, backup=True)
        case Strategy.SKIP:
            return Decision(PlanAction.SKIP, reason="skip strategy")
        case Strategy.NEWER:
            if source.modified_at >= target.modified_at:
                return _overwrite(source, backup=True, reason="source is newer")
            return Decision(PlanAction.SKIP, reason="target is newer")
        case Strategy.MERGE:
            return _merge(source, target, three_way=False)
        case Strategy.THREE_WAY:
            return _merge(source, target, three_way=True)
        case Strategy.INTERACTIVE:
            if resolution is None:
                raise ConflictUnresolvedError(
                    f"No resolution supplied for '{outcome.skill_name}'",
                    skill_names=[outcome.skill_name],
                )
            return _apply_resolution(source, target, resolution)


def _apply_resolution(source: Skill, target: Skill, resolution: Resolution) -> Decision:
    match resolution.choice:
        case ResolutionChoice.USE_SOURCE:
            return _overwrite(source, backup=True, body=resolution.content, reason="use source")
        case ResolutionChoice.USE_TARGET:
            return Decision(PlanAction.SKIP, reason="use target")
        case ResolutionChoice.MERGE:
            if resolution.content is not None:
                return Decision(
                    PlanAction.MERGE_WRITE,
                    _source_bytes(source, resolution.content),
                    "explicit content",
                )
            return _merge(source, target, three_way=False)
        case ResolutionChoice.SKIP:
            return Decision(PlanAction.SKIP, reason="skipped")


def target_path_for(source: Skill, target: Skill | None, platform: Platform, root: Path) -> Path:
    """Existing target file, or where a new skill of ``platform`` lives under ``root``."""
    if target is not None:
        return target.path
    if platform.layout == "directory":
        return root / source.name / SKILL_FILE_NAMES[0]
    suffix = source.path.suffix if source.path.suffix in platform.skill_suffixes else ".md"
    return root / f"{source.name}{suffix}"


def _writes_directory(target: Skill | None, platform: Platform) -> bool:
    layout = target.layout if target is not None else platform.layout
    return layout == "directory"


def plan_sync(
    source_skills: Iterable[Skill],
    target_skills: Iterable[Skill],
    target_platform: Platform,
    target_scope: Scope,
    *,
    target_root: Path,
    strategy: Strategy = Strategy.OVERWRITE,
    resolutions: Mapping[str, Resolution] | None = None,
    backup: bool = True,
    bidirectional: bool = False,
    cancel: CancelToken | None = None,
) -> SyncPlan:
    """
    Build a sync plan from already-discovered skills.

    Raises:
        ScopeViolationError: If ``target_scope`` is read-only. Checked first.
        ConflictUnresolvedError: If ``strategy`` is interactive and some conflicts
            have no entry in ``resolutions``.
        CancelledError: If ``cancel`` fires; carries the entries planned so far.
    """
    if not target_scope.writable:
        raise ScopeViolationError(
            f"Cannot sync into read-only scope '{target_scope.value}' of {target_platform.value}"
        )

    resolutions = resolutions or {}
    report = detect_conflicts(
        source_skills, target_skills, target_platform, target_scope, bidirectional=bidirectional
    )

    entries: list[PlanEntry] = []
    unresolved: list[str] = []
    for outcome in report.outcomes:
        if cancel is not None and cancel.cancelled:
            raise CancelledError(
                "Planning cancelled",
                partial=SyncPlan(target_platform, target_scope, strategy, tuple(entries)),
            )
        target_path = target_path_for(outcome.source, outcome.target, target_platform, target_root)

        match outcome.kind:
            case OutcomeKind.NEW:
                decision = Decision(PlanAction.CREATE, _source_bytes(outcome.source), "new skill")
            case OutcomeKind.IDENTICAL:
                decision = Decision(PlanAction.SKIP, reason="identical")
            case OutcomeKind.CONFLICT:
                if strategy is Strategy.INTERACTIVE and outcome.skill_name not in resolutions:
                    unresolved.append(outcome.skill_name)
                    continue
                decision = resolve_conflict(
                    outcome, strategy, resolution=resolutions.get(outcome.skill_name)
                )

        action = decision.action
        if action is PlanAction.BACKUP_OVERWRITE and not backup:
            action = PlanAction.OVERWRITE
        backup_required = backup and action in (PlanAction.BACKUP_OVERWRITE, PlanAction.MERGE_WRITE)
        assets = (
            skill_assets(outcome.source)
            if action.writes and _writes_directory(outcome.target, target_platform)
            else ()
        )
        entries.append(
            PlanEntry(
                skill_name=outcome.skill_name,
                action=action,
                backup_required=backup_required,
                resolved_content=decision.content,
                target_path=target_path,
                outcome=outcome.kind,
                source=outcome.source,
                target=outcome.target,
                conflict=outcome.conflict,
                reason=decision.reason,
                assets=assets,
            )
        )

    if unresolved:
        raise ConflictUnresolvedError(
            f"{len(unresolved)} conflict(s) need a resolution: {', '.join(unresolved)}",
            skill_names=unresolved,
        )

    entries.sort(key=lambda e: e.skill_name)
    plan = SyncPlan(target_platform, target_scope, strategy, tuple(entries), tuple(report.missing))
    logger.info(
        "Planned sync into {platform}:{scope} with {strategy}: {writes} write(s), {skips} skip(s)",
        platform=target_platform.value,
        scope=target_scope.value,
        strategy=strategy.value,
        writes=len(plan.writes),
        skips=plan.count(PlanAction.SKIP),
    )
    return plan


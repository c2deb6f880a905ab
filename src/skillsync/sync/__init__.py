from __future__ import annotations

from skillsync.sync.conflict import (
    Conflict,
    ConflictType,
    DetectionOutcome,
    DetectionReport,
    OutcomeKind,
    detect_conflicts,
)
from skillsync.sync.executor import EntryResult, EntryState, SyncExecutor, SyncResult
from skillsync.sync.merge import MergeResult, merge_text, three_way_merge_text
from skillsync.sync.planner import (
    Decision,
    PlanAction,
    PlanEntry,
    SyncPlan,
    plan_sync,
    resolve_conflict,
)
from skillsync.sync.strategy import Resolution, ResolutionChoice, Strategy

__all__ = [
    "Conflict",
    "ConflictType",
    "Decision",
    "DetectionOutcome",
    "DetectionReport",
    "EntryResult",
    "EntryState",
    "MergeResult",
    "OutcomeKind",
    "PlanAction",
    "PlanEntry",
    "Resolution",
    "ResolutionChoice",
    "Strategy",
    "SyncExecutor",
    "SyncPlan",
    "SyncResult",
    "detect_conflicts",
    "merge_text",
    "plan_sync",
    "resolve_conflict",
    "three_way_merge_text",
]

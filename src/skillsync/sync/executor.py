"""Atomic, per-entry execution of a sync plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from loguru import logger

from skillsync.backup.store import BackupStore, checksum
from skillsync.cancel import CancelToken
from skillsync.exception import (
    CancelledError,
    ExitCode,
    InvariantViolationError,
    ScopeViolationError,
    SkillIOError,
    SkillsyncError,
)
from skillsync.model import BackupRecord
from skillsync.sync.planner import PlanEntry, SyncPlan
from skillsync.utils.path import atomic_write_all


class EntryState(StrEnum):
    PENDING = "pending"
    SNAPSHOTTING = "snapshotting"
    WRITING = "writing"
    COMMITTED = "committed"
    FAILED = "failed"
    SKIPPED = "skipped"
    FAILED_POST_COMMIT = "failed-post-commit"


_TRANSITIONS: dict[EntryState, frozenset[EntryState]] = {
    EntryState.PENDING: frozenset(
        {EntryState.SNAPSHOTTING, EntryState.WRITING, EntryState.SKIPPED, EntryState.FAILED}
    ),
    EntryState.SNAPSHOTTING: frozenset({EntryState.WRITING, EntryState.FAILED}),
    EntryState.WRITING: frozenset({EntryState.COMMITTED, EntryState.FAILED}),
    EntryState.COMMITTED: frozenset({EntryState.FAILED_POST_COMMIT}),
}


@dataclass(slots=True)
class EntryResult:
    entry: PlanEntry
    state: EntryState = EntryState.PENDING
    backup: BackupRecord | None = None
    asset_backups: list[BackupRecord] = field(default_factory=list)
    error: Exception | None = None

    def transition(self, state: EntryState) -> None:
        if state not in _TRANSITIONS.get(self.state, frozenset()):
            raise InvariantViolationError(
                f"Illegal transition {self.state.value} -> {state.value} "
                f"for '{self.entry.skill_name}'"
            )
        self.state = state


@dataclass(slots=True)
class SyncResult:
    entries: list[EntryResult] = field(default_factory=list)

    def _in(self, *states: EntryState) -> list[EntryResult]:
        return [r for r in self.entries if r.state in states]

    @property
    def committed(self) -> list[EntryResult]:
        return self._in(EntryState.COMMITTED)

    @property
    def skipped(self) -> list[EntryResult]:
        return self._in(EntryState.SKIPPED)

    @property
    def failed(self) -> list[EntryResult]:
        return self._in(EntryState.FAILED, EntryState.FAILED_POST_COMMIT)

    @property
    def backups(self) -> list[BackupRecord]:
        records: list[BackupRecord] = []
        for r in self.entries:
            if r.backup is not None:
                records.append(r.backup)
            records.extend(r.asset_backups)
        return records

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.PARTIAL if self.failed else ExitCode.SUCCESS

    def summary(self) -> str:
        return (
            f"{len(self.committed)} committed, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed"
        )


class SyncExecutor:
    """
    Apply a :class:`SyncPlan` one entry at a time.

    Each writing entry is snapshotted first when the plan asks for a backup, then
    written through sibling temporary files and atomic renames. The skill file and
    the assets of a directory-form skill are all staged before any of them is
    renamed into place. A failing entry leaves its target untouched and does not stop the run unless
    ``abort_on_error`` is set.
    """

    def __init__(
        self,
        backup_store: BackupStore | None = None,
        abort_on_error: bool = False,
        verify: bool = False,
    ) -> None:
        self.backup_store = backup_store
        self.abort_on_error = abort_on_error
        self.verify = verify

    def apply(self, plan: SyncPlan, cancel: CancelToken | None = None) -> SyncResult:
        if not plan.target_scope.writable:
            raise ScopeViolationError(
                f"Cannot write into read-only scope '{plan.target_scope.value}'"
            )

        result = SyncResult()
        for entry in sorted(plan.entries, key=lambda e: e.skill_name):
            if cancel is not None and cancel.cancelled:
                raise CancelledError("Sync cancelled", partial=result)
            entry_result = EntryResult(entry)
            result.entries.append(entry_result)

            if not entry.action.writes:
                entry_result.transition(EntryState.SKIPPED)
                continue

            try:
                self._apply_entry(plan, entry_result)
            except (ScopeViolationError, InvariantViolationError, CancelledError):
                raise
            except (OSError, SkillsyncError) as e:
                entry_result.error = e
                entry_result.transition(EntryState.FAILED)
                logger.error(
                    "Failed to sync {name} to {path}: {error}",
                    name=entry.skill_name,
                    path=entry.target_path,
                    error=e,
                )
                if self.abort_on_error:
                    break
                continue

            if self.verify:
                self._verify(entry_result)

        logger.info("Sync finished: {summary}", summary=result.summary())
        return result

    def _apply_entry(self, plan: SyncPlan, entry_result: EntryResult) -> None:
        entry = entry_result.entry
        if entry.resolved_content is None:
            raise InvariantViolationError(f"Entry '{entry.skill_name}' writes but has no content")
        target_dir = entry.target_path.parent
        source_dir = entry.source.root_path

        if entry.backup_required and entry.target_path.exists():
            entry_result.transition(EntryState.SNAPSHOTTING)
            if self.backup_store is None:
                raise InvariantViolationError(
                    f"Entry '{entry.skill_name}' requires a backup but no backup store is set"
                )
            entry_result.backup = self.backup_store.put(entry.target_path, plan.target_platform)
            for relative in entry.assets:
                existing = target_dir / relative
                incoming = source_dir / relative
                if existing.is_file() and existing.read_bytes() != incoming.read_bytes():
                    entry_result.asset_backups.append(
                        self.backup_store.put(existing, plan.target_platform)
                    )

        entry_result.transition(EntryState.WRITING)
        files: list[tuple[Path, bytes | Path]] = [(entry.target_path, entry.resolved_content)]
        files.extend((target_dir / relative, source_dir / relative) for relative in entry.assets)
        try:
            atomic_write_all(files)
        except OSError as e:
            raise SkillIOError(
                f"Failed to write {entry.target_path}: {e}", path=entry.target_path, cause=e
            ) from e
        entry_result.transition(EntryState.COMMITTED)
        logger.debug(
            "Committed {action} for {name} with {count} asset(s)",
            action=entry.action.value,
            name=entry.skill_name,
            count=len(entry.assets),
        )

    def _verify(self, entry_result: EntryResult) -> None:
        entry = entry_result.entry
        if entry.resolved_content is None:
            raise InvariantViolationError(f"Entry '{entry.skill_name}' has no content to verify")
        try:
            written = entry.target_path.read_bytes()
        except OSError as e:
            entry_result.error = SkillIOError(
                f"Failed to verify {entry.target_path}: {e}", path=entry.target_path, cause=e
            )
            entry_result.transition(EntryState.FAILED_POST_COMMIT)
            return
        if checksum(written) != checksum(entry.resolved_content):
            entry_result.error = SkillIOError(
                f"Checksum mismatch after writing {entry.target_path}", path=entry.target_path
            )
            entry_result.transition(EntryState.FAILED_POST_COMMIT)
            logger.warning("Post-write verification failed for {name}", name=entry.skill_name)

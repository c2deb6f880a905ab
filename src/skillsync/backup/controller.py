from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

from loguru import logger

from skillsync.backup.store import BackupStore
from skillsync.exception import BackupNotFoundError, ConfigError, SkillIOError
from skillsync.model import BackupRecord, Platform
from skillsync.utils.path import atomic_write_bytes


class BackupController:
    """Backup policy on top of a :class:`BackupStore`.

    Retention is advisory: records are only removed by :meth:`delete` and
    :meth:`prune`, and a failed verification never deletes anything.
    """

    def __init__(self, store: BackupStore) -> None:
        self.store = store

    def snapshot(self, path: Path, platform: Platform) -> BackupRecord:
        return self.store.put(path, platform)

    def list(self, platform: Platform | None = None) -> list[BackupRecord]:
        records = self.store.list()
        if platform is not None:
            records = [r for r in records if r.platform is platform]
        return records

    def record(self, backup_id: str) -> BackupRecord:
        for record in self.store.list():
            if record.id == backup_id:
                return record
        raise BackupNotFoundError(f"Backup not found: {backup_id}")

    def restore(self, backup_id: str, target: Path | None = None) -> Path:
        """Atomically write a backup back to ``target``, or to where it was taken from."""
        record = self.record(backup_id)
        data = self.store.get(backup_id)
        destination = target if target is not None else record.source_path
        try:
            atomic_write_bytes(destination, data)
        except OSError as e:
            raise SkillIOError(
                f"Failed to restore backup {backup_id} to {destination}: {e}",
                path=destination,
                cause=e,
            ) from e
        logger.info("Restored backup {id} to {path}", id=backup_id, path=destination)
        return destination

    def verify(self, backup_id: str) -> bool:
        return self.store.verify(backup_id)

    def verify_all(self, platform: Platform | None = None) -> dict[str, bool]:
        return {record.id: self.store.verify(record.id) for record in self.list(platform)}

    def delete(self, backup_id: str) -> None:
        self.store.delete(backup_id)

    def prune(
        self,
        retention_days: int,
        now: datetime | None = None,
        dry_run: bool = False,
    ) -> list[BackupRecord]:
        """Remove backups older than ``retention_days``; returns the affected records."""
        if retention_days < 0:
            raise ConfigError(f"Retention days must be >= 0, got {retention_days}")
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(days=retention_days)
        expired = [r for r in self.store.list() if r.created_at < cutoff]
        if not dry_run:
            for record in expired:
                self.store.delete(record.id)
        logger.info(
            "Pruned {count} backup(s) older than {days} days{suffix}",
            count=len(expired),
            days=retention_days,
            suffix=" (dry run)" if dry_run else "",
        )
        return expired

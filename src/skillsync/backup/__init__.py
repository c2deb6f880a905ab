from __future__ import annotations

from skillsync.backup.controller import BackupController
from skillsync.backup.store import (
    BackupStore,
    FileBackupStore,
    MemoryBackupStore,
    checksum,
    new_backup_id,
)

__all__ = [
    "BackupController",
    "BackupStore",
    "FileBackupStore",
    "MemoryBackupStore",
    "checksum",
    "new_backup_id",
]

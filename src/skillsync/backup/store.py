"""Backup storage port and its file-system and in-memory implementations."""

from __future__ import annotations

import hashlib
import secrets
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from skillsync.exception import BackupNotFoundError, SkillIOError
from skillsync.model import BackupRecord, Platform
from skillsync.utils.path import atomic_write_bytes

INDEX_VERSION = 1


@runtime_checkable
class BackupStore(Protocol):
    """Stores point-in-time copies of skill files.

    ``get(put(path, platform).id)`` returns exactly the bytes ``path`` held when it
    was snapshotted. Implementations serialize their own operations.
    """

    def put(self, source_path: Path, platform: Platform) -> BackupRecord: ...

    def list(self) -> list[BackupRecord]: ...

    def get(self, backup_id: str) -> bytes: ...

    def delete(self, backup_id: str) -> None: ...

    def verify(self, backup_id: str) -> bool: ...


def checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def new_backup_id(now: datetime | None = None) -> str:
    """``YYYYMMDD-HHMMSS-<8 hex>``; sorts by creation time to the second."""
    now = now or datetime.now(UTC)
    return f"{now:%Y%m%d-%H%M%S}-{secrets.token_hex(4)}"


def _read_source(source_path: Path) -> bytes:
    try:
        return source_path.read_bytes()
    except OSError as e:
        raise SkillIOError(
            f"Failed to read {source_path} for backup: {e}", path=source_path, cause=e
        ) from e


def _not_found(backup_id: str) -> BackupNotFoundError:
    return BackupNotFoundError(f"Backup not found: {backup_id}")


class BackupIndex(BaseModel):
    version: int = INDEX_VERSION
    backups: list[BackupRecord] = Field(default_factory=list)


class FileBackupStore:
    """
    Backups kept under a root directory::

        <root>/backups/<platform>/<id><ext>
        <root>/metadata/index.json
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.backups_dir = root / "backups"
        self.index_file = root / "metadata" / "index.json"
        self._lock = threading.RLock()

    def _blob_path(self, record: BackupRecord) -> Path:
        suffix = record.source_path.suffix or ".bak"
        return self.backups_dir / record.platform.value / f"{record.id}{suffix}"

    def _load_index(self) -> BackupIndex:
        if not self.index_file.exists():
            return BackupIndex()
        try:
            return BackupIndex.model_validate_json(self.index_file.read_text(encoding="utf-8"))
        except OSError as e:
            raise SkillIOError(
                f"Failed to read backup index: {e}", path=self.index_file, cause=e
            ) from e
        except ValidationError as e:
            raise SkillIOError(
                f"Backup index is corrupted: {e}", path=self.index_file, cause=e
            ) from e

    def _save_index(self, index: BackupIndex) -> None:
        try:
            atomic_write_bytes(self.index_file, index.model_dump_json(indent=2).encode("utf-8"))
        except OSError as e:
            raise SkillIOError(
                f"Failed to write backup index: {e}", path=self.index_file, cause=e
            ) from e

    def _find(self, index: BackupIndex, backup_id: str) -> BackupRecord:
        for record in index.backups:
            if record.id == backup_id:
                return record
        raise _not_found(backup_id)

    def put(self, source_path: Path, platform: Platform) -> BackupRecord:
        data = _read_source(source_path)
        with self._lock:
            index = self._load_index()
            existing = {r.id for r in index.backups}
            now = datetime.now(UTC)
            backup_id = new_backup_id(now)
            while backup_id in existing:
                backup_id = new_backup_id(now)
            record = BackupRecord(
                id=backup_id,
                platform=platform,
                source_path=source_path.absolute(),
                created_at=now,
                size=len(data),
                checksum=checksum(data),
            )
            blob = self._blob_path(record)
            try:
                atomic_write_bytes(blob, data)
            except OSError as e:
                raise SkillIOError(f"Failed to store backup: {e}", path=blob, cause=e) from e
            index.backups.append(record)
            self._save_index(index)
        logger.info(
            "Backed up {path} as {id} ({size} bytes)",
            path=source_path,
            id=record.id,
            size=record.size,
        )
        return record

    def list(self) -> list[BackupRecord]:
        with self._lock:
            records = self._load_index().backups
        return sorted(records, key=lambda r: (r.created_at, r.id))

    def get(self, backup_id: str) -> bytes:
        with self._lock:
            record = self._find(self._load_index(), backup_id)
            blob = self._blob_path(record)
            try:
                return blob.read_bytes()
            except OSError as e:
                raise SkillIOError(
                    f"Failed to read backup {backup_id}: {e}", path=blob, cause=e
                ) from e

    def delete(self, backup_id: str) -> None:
        with self._lock:
            index = self._load_index()
            record = self._find(index, backup_id)
            blob = self._blob_path(record)
            try:
                blob.unlink(missing_ok=True)
            except OSError as e:
                raise SkillIOError(
                    f"Failed to delete backup {backup_id}: {e}", path=blob, cause=e
                ) from e
            index.backups = [r for r in index.backups if r.id != backup_id]
            self._save_index(index)
        logger.info("Deleted backup {id}", id=backup_id)

    def verify(self, backup_id: str) -> bool:
        with self._lock:
            record = self._find(self._load_index(), backup_id)
            blob = self._blob_path(record)
            try:
                data = blob.read_bytes()
            except FileNotFoundError:
                logger.warning("Backup blob missing for {id}: {path}", id=backup_id, path=blob)
                return False
            except OSError as e:
                raise SkillIOError(
                    f"Failed to read backup {backup_id}: {e}", path=blob, cause=e
                ) from e
        ok = checksum(data) == record.checksum
        if not ok:
            logger.warning("Checksum mismatch for backup {id}", id=backup_id)
        return ok


class MemoryBackupStore:
    """Keeps backups in process memory."""

    def __init__(self) -> None:
        self._records: dict[str, BackupRecord] = {}
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.RLock()

    def put(self, source_path: Path, platform: Platform) -> BackupRecord:
        data = _read_source(source_path)
        with self._lock:
            now = datetime.now(UTC)
            backup_id = new_backup_id(now)
            while backup_id in self._records:
                backup_id = new_backup_id(now)
            record = BackupRecord(
                id=backup_id,
                platform=platform,
                source_path=source_path.absolute(),
                created_at=now,
                size=len(data),
                checksum=checksum(data),
            )
            self._records[backup_id] = record
            self._blobs[backup_id] = data
        return record

    def list(self) -> list[BackupRecord]:
        with self._lock:
            return sorted(self._records.values(), key=lambda r: (r.created_at, r.id))

    def get(self, backup_id: str) -> bytes:
        with self._lock:
            if backup_id not in self._blobs:
                raise _not_found(backup_id)
            return self._blobs[backup_id]

    def delete(self, backup_id: str) -> None:
        with self._lock:
            if backup_id not in self._records:
                raise _not_found(backup_id)
            del self._records[backup_id]
            del self._blobs[backup_id]

    def verify(self, backup_id: str) -> bool:
        with self._lock:
            if backup_id not in self._records:
                raise _not_found(backup_id)
            return checksum(self._blobs[backup_id]) == self._records[backup_id].checksum

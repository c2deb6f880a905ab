from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from skillsync.backup import BackupController, FileBackupStore, MemoryBackupStore
from skillsync.backup.store import BackupStore, checksum, new_backup_id
from skillsync.exception import BackupNotFoundError, ConfigError, SkillIOError
from skillsync.model import Platform


@pytest.fixture(params=["file", "memory"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> BackupStore:
    if request.param == "file":
        return FileBackupStore(tmp_path / "store")
    return MemoryBackupStore()


@pytest.fixture
def skill_file(tmp_path: Path) -> Path:
    path = tmp_path / "skills" / "alpha" / "SKILL.md"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"OLD\r\n")
    return path


def test_new_backup_id_format():
    backup_id = new_backup_id(datetime(2024, 3, 9, 8, 7, 6, tzinfo=UTC))
    prefix, token = backup_id.rsplit("-", 1)
    assert prefix == "20240309-080706"
    assert len(token) == 8


class TestStore:
    def test_satisfies_protocol(self, store: BackupStore):
        assert isinstance(store, BackupStore)

    def test_put_get_round_trip(self, store: BackupStore, skill_file: Path):
        record = store.put(skill_file, Platform.CLAUDE_CODE)
        skill_file.write_bytes(b"NEW")
        assert store.get(record.id) == b"OLD\r\n"
        assert record.size == 5
        assert record.checksum == checksum(b"OLD\r\n")
        assert record.source_path == skill_file.absolute()

    def test_list_and_delete(self, store: BackupStore, skill_file: Path):
        first = store.put(skill_file, Platform.CLAUDE_CODE)
        second = store.put(skill_file, Platform.CURSOR)
        assert first.id != second.id
        assert {r.id for r in store.list()} == {first.id, second.id}
        store.delete(first.id)
        assert [r.id for r in store.list()] == [second.id]
        with pytest.raises(BackupNotFoundError):
            store.get(first.id)

    def test_verify(self, store: BackupStore, skill_file: Path):
        record = store.put(skill_file, Platform.CODEX)
        assert store.verify(record.id)

    def test_unknown_id(self, store: BackupStore):
        with pytest.raises(BackupNotFoundError, match="Backup not found: nope"):
            store.verify("nope")
        with pytest.raises(BackupNotFoundError):
            store.delete("nope")

    def test_missing_source(self, store: BackupStore, tmp_path: Path):
        with pytest.raises(SkillIOError):
            store.put(tmp_path / "missing.md", Platform.CODEX)


class TestFileBackupStore:
    def test_layout(self, tmp_path: Path, skill_file: Path):
        store = FileBackupStore(tmp_path / "store")
        record = store.put(skill_file, Platform.CURSOR)
        blob = tmp_path / "store" / "backups" / "cursor" / f"{record.id}.md"
        assert blob.read_bytes() == b"OLD\r\n"
        assert (tmp_path / "store" / "metadata" / "index.json").is_file()

    def test_index_survives_new_instance(self, tmp_path: Path, skill_file: Path):
        record = FileBackupStore(tmp_path / "store").put(skill_file, Platform.CURSOR)
        reopened = FileBackupStore(tmp_path / "store")
        assert reopened.list() == [record]

    def test_verify_detects_corruption(self, tmp_path: Path, skill_file: Path):
        store = FileBackupStore(tmp_path / "store")
        record = store.put(skill_file, Platform.CURSOR)
        blob = tmp_path / "store" / "backups" / "cursor" / f"{record.id}.md"
        blob.write_bytes(b"tampered")
        assert not store.verify(record.id)
        blob.unlink()
        assert not store.verify(record.id)
        assert store.list() == [record]

    def test_corrupted_index(self, tmp_path: Path):
        index = tmp_path / "store" / "metadata" / "index.json"
        index.parent.mkdir(parents=True)
        index.write_text("{not json")
        with pytest.raises(SkillIOError, match="corrupted"):
            FileBackupStore(tmp_path / "store").list()


class TestController:
    def test_restore_in_place(self, skill_file: Path):
        controller = BackupController(MemoryBackupStore())
        record = controller.snapshot(skill_file, Platform.CLAUDE_CODE)
        skill_file.write_bytes(b"NEW")
        assert controller.restore(record.id) == skill_file.absolute()
        assert skill_file.read_bytes() == b"OLD\r\n"

    def test_restore_elsewhere(self, skill_file: Path, tmp_path: Path):
        controller = BackupController(MemoryBackupStore())
        record = controller.snapshot(skill_file, Platform.CLAUDE_CODE)
        target = tmp_path / "restored" / "SKILL.md"
        controller.restore(record.id, target)
        assert target.read_bytes() == b"OLD\r\n"

    def test_restore_unknown(self):
        with pytest.raises(BackupNotFoundError):
            BackupController(MemoryBackupStore()).restore("missing")

    def test_list_by_platform(self, skill_file: Path):
        controller = BackupController(MemoryBackupStore())
        controller.snapshot(skill_file, Platform.CLAUDE_CODE)
        cursor = controller.snapshot(skill_file, Platform.CURSOR)
        assert controller.list(Platform.CURSOR) == [cursor]
        assert len(controller.list()) == 2

    def test_verify_all(self, skill_file: Path):
        controller = BackupController(MemoryBackupStore())
        record = controller.snapshot(skill_file, Platform.CLAUDE_CODE)
        assert controller.verify_all() == {record.id: True}

    def test_prune(self, skill_file: Path):
        controller = BackupController(MemoryBackupStore())
        record = controller.snapshot(skill_file, Platform.CLAUDE_CODE)
        later = record.created_at + timedelta(days=31)

        assert controller.prune(30, now=record.created_at) == []
        assert controller.prune(30, now=later, dry_run=True) == [record]
        assert controller.list() == [record]
        assert controller.prune(30, now=later) == [record]
        assert controller.list() == []

    def test_prune_rejects_negative_retention(self):
        with pytest.raises(ConfigError, match="Retention days"):
            BackupController(MemoryBackupStore()).prune(-1)

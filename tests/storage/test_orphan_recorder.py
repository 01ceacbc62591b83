"""Unit tests for record_orphaned_file."""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.storage.models.orphaned_file import OrphanedFile, StorageKind
from app.storage.services.orphan_recorder import record_orphaned_file


class TestRecordOrphanedFile:
    def test_persists_unresolved_record(self, db_session):
        record = record_orphaned_file(
            db_session,
            file_id="attachments/abc.pdf",
            storage_kind=StorageKind.CONTENT_STORE,
            entity_type="news-attachment",
            reason="delete failed: timeout",
        )

        assert record is not None
        stored = db_session.query(OrphanedFile).one()
        assert stored.id == record.id
        assert stored.file_id == "attachments/abc.pdf"
        assert stored.storage_kind == StorageKind.CONTENT_STORE
        assert stored.entity_type == "news-attachment"
        assert stored.reason == "delete failed: timeout"
        assert stored.resolved is False
        assert stored.resolved_at is None
        assert stored.details == {}
        assert stored.created_at is not None

    def test_keeps_metadata(self, db_session):
        record = record_orphaned_file(
            db_session,
            file_id="photo.jpg",
            storage_kind=StorageKind.FILESYSTEM,
            entity_type="gallery-image",
            reason="delete failed: permission denied",
            metadata={"path": "gallery/photo.jpg", "entity_id": "album-7"},
        )

        assert record is not None
        assert record.details == {"path": "gallery/photo.jpg", "entity_id": "album-7"}
        assert record.path == "gallery/photo.jpg"

    def test_does_not_deduplicate(self, db_session):
        for _ in range(3):
            record_orphaned_file(
                db_session,
                file_id="same.pdf",
                storage_kind=StorageKind.CONTENT_STORE,
                entity_type="news-attachment",
                reason="delete failed",
            )

        query = db_session.query(OrphanedFile).filter(OrphanedFile.file_id == "same.pdf")
        assert query.count() == 3

    def test_persistence_failure_is_swallowed(self, db_session):
        with patch(
            "app.storage.services.orphan_recorder.OrphanedFileRepository.add",
            side_effect=OperationalError("INSERT", {}, Exception("database is locked")),
        ):
            record = record_orphaned_file(
                db_session,
                file_id="attachments/abc.pdf",
                storage_kind=StorageKind.CONTENT_STORE,
                entity_type="news-attachment",
                reason="delete failed",
            )

        assert record is None
        assert db_session.query(OrphanedFile).count() == 0

    def test_accepts_plain_string_storage_kind(self, db_session):
        record = record_orphaned_file(
            db_session,
            file_id="photo.jpg",
            storage_kind="filesystem",
            entity_type="gallery-image",
            reason="delete failed",
        )

        assert record is not None
        assert db_session.query(OrphanedFile).one().storage_kind == StorageKind.FILESYSTEM

    def test_failure_with_plain_string_storage_kind_is_swallowed(self, db_session):
        with patch(
            "app.storage.services.orphan_recorder.OrphanedFileRepository.add",
            side_effect=OperationalError("INSERT", {}, Exception("database is locked")),
        ):
            record = record_orphaned_file(
                db_session,
                file_id="photo.jpg",
                storage_kind="filesystem",
                entity_type="gallery-image",
                reason="delete failed",
            )

        assert record is None


class TestCallerTransaction:
    """The recorder never commits or discards work pending on the caller's session."""

    def test_caller_pending_change_survives_recorder_failure(self, db_session):
        pending = OrphanedFile(
            file_id="caller-pending",
            storage_kind=StorageKind.CONTENT_STORE,
            entity_type="news-attachment",
            reason="caller work",
        )
        db_session.add(pending)

        with patch(
            "app.storage.services.orphan_recorder.OrphanedFileRepository.add",
            side_effect=OperationalError("INSERT", {}, Exception("database is locked")),
        ):
            record = record_orphaned_file(
                db_session,
                file_id="attachments/abc.pdf",
                storage_kind=StorageKind.CONTENT_STORE,
                entity_type="news-attachment",
                reason="delete failed",
            )

        assert record is None
        assert pending in db_session
        db_session.commit()
        assert [r.file_id for r in db_session.query(OrphanedFile).all()] == ["caller-pending"]

    def test_caller_rollback_discards_only_caller_work(self, db_session):
        db_session.add(
            OrphanedFile(
                file_id="caller-pending",
                storage_kind=StorageKind.CONTENT_STORE,
                entity_type="news-attachment",
                reason="caller work",
            )
        )

        record = record_orphaned_file(
            db_session,
            file_id="attachments/abc.pdf",
            storage_kind=StorageKind.CONTENT_STORE,
            entity_type="news-attachment",
            reason="delete failed",
        )
        db_session.rollback()

        assert record is not None
        file_ids = [r.file_id for r in db_session.query(OrphanedFile).all()]
        assert file_ids == ["attachments/abc.pdf"]

"""Tests for sketchctl.uploaders.registry module."""

from __future__ import annotations

import pytest

from sketchctl.core.exceptions import InvalidTransitionError
from sketchctl.models.upload import FileStatus, SourceFile
from sketchctl.uploaders.registry import UploadRegistry


def _file(name: str = "photo.png", size: int = 2048) -> SourceFile:
    return SourceFile.from_bytes(name, b"\0" * size)


@pytest.fixture
def registry() -> UploadRegistry:
    return UploadRegistry()


# =============================================================================
# Registration
# =============================================================================


class TestRegister:
    """Tests for UploadRegistry.register."""

    def test_new_entries_are_pending(self, registry: UploadRegistry):
        registry.register([_file("a.png"), _file("b.png")])

        entries = registry.all()
        assert [e.name for e in entries] == ["a.png", "b.png"]
        assert all(e.status is FileStatus.PENDING for e in entries)
        assert all(e.progress == 0 for e in entries)
        assert len({e.id for e in entries}) == 2

    def test_duplicate_identity_is_skipped(self, registry: UploadRegistry):
        registry.register([_file(), _file()])
        registry.register([_file()])

        assert len(registry) == 1

    def test_same_name_different_size_is_distinct(self, registry: UploadRegistry):
        registry.register([_file(size=10), _file(size=20)])
        assert len(registry) == 2

    def test_find(self, registry: UploadRegistry):
        registry.register([_file()])
        entry = registry.find("photo.png", 2048)
        assert entry is not None
        assert entry.id in registry
        assert registry.find("photo.png", 1) is None


# =============================================================================
# Progress
# =============================================================================


class TestSetProgress:
    """Tests for UploadRegistry.set_progress."""

    def test_clamps(self, registry: UploadRegistry):
        registry.register([_file()])
        file_id = registry.all()[0].id

        registry.set_progress(file_id, 150)
        assert registry.get(file_id).progress == 100
        registry.set_progress(file_id, -5)
        assert registry.get(file_id).progress == 0

    def test_unknown_id_is_noop(self, registry: UploadRegistry):
        registry.set_progress("missing", 50)
        assert len(registry) == 0

    def test_never_decreases_while_uploading(self, registry: UploadRegistry):
        registry.register([_file()])
        file_id = registry.all()[0].id
        registry.set_status(file_id, FileStatus.UPLOADING)

        registry.set_progress(file_id, 40)
        registry.set_progress(file_id, 30)

        assert registry.get(file_id).progress == 40


# =============================================================================
# Status
# =============================================================================


class TestSetStatus:
    """Tests for UploadRegistry.set_status."""

    def _uploading(self, registry: UploadRegistry) -> str:
        registry.register([_file()])
        file_id = registry.all()[0].id
        registry.set_status(file_id, FileStatus.UPLOADING)
        return file_id

    def test_success_sets_key_token_and_progress(self, registry: UploadRegistry):
        file_id = self._uploading(registry)

        registry.set_status(file_id, FileStatus.SUCCESS, remote_key="x", integrity_token="abc123")

        entry = registry.get(file_id)
        assert entry.status is FileStatus.SUCCESS
        assert entry.progress == 100
        assert entry.remote_key == "x"
        assert entry.integrity_token == "abc123"

    def test_error_keeps_progress(self, registry: UploadRegistry):
        file_id = self._uploading(registry)
        registry.set_progress(file_id, 37)

        registry.set_status(file_id, FileStatus.ERROR, error_message="Upload failed: HTTP 500")

        entry = registry.get(file_id)
        assert entry.error_message == "Upload failed: HTTP 500"
        assert entry.progress == 37
        assert entry.remote_key is None

    def test_error_default_message(self, registry: UploadRegistry):
        file_id = self._uploading(registry)
        registry.set_status(file_id, FileStatus.ERROR)
        assert registry.get(file_id).error_message == "Unknown error occurred"

    def test_retry_resets_progress_and_error(self, registry: UploadRegistry):
        file_id = self._uploading(registry)
        registry.set_progress(file_id, 60)
        registry.set_status(file_id, FileStatus.ERROR, error_message="boom")

        registry.set_status(file_id, FileStatus.UPLOADING)

        entry = registry.get(file_id)
        assert entry.progress == 0
        assert entry.error_message is None

    def test_pending_can_be_cancelled(self, registry: UploadRegistry):
        registry.register([_file()])
        file_id = registry.all()[0].id
        registry.set_status(file_id, FileStatus.ERROR, error_message="Upload cancelled")
        assert registry.get(file_id).status is FileStatus.ERROR

    @pytest.mark.parametrize(
        "path",
        [
            [FileStatus.SUCCESS],
            [FileStatus.UPLOADING, FileStatus.SUCCESS, FileStatus.UPLOADING],
            [FileStatus.UPLOADING, FileStatus.ERROR, FileStatus.SUCCESS],
        ],
    )
    def test_illegal_transitions(self, registry: UploadRegistry, path):
        registry.register([_file()])
        file_id = registry.all()[0].id
        with pytest.raises(InvalidTransitionError):
            for status in path:
                registry.set_status(file_id, status, remote_key="x")

    def test_unknown_id_is_noop(self, registry: UploadRegistry):
        registry.set_status("missing", FileStatus.SUCCESS)
        assert "missing" not in registry


# =============================================================================
# Removal and Reads
# =============================================================================


class TestRemoveAndReads:
    """Tests for removal, clear and read copies."""

    def test_remove_frees_identity(self, registry: UploadRegistry):
        registry.register([_file()])
        file_id = registry.all()[0].id

        assert registry.remove(file_id) is True
        assert registry.remove(file_id) is False

        registry.register([_file()])
        assert len(registry) == 1
        assert registry.all()[0].id != file_id

    def test_clear(self, registry: UploadRegistry):
        registry.register([_file("a.png"), _file("b.png")])
        registry.clear()
        assert len(registry) == 0
        assert registry.find("a.png", 2048) is None

    def test_get_returns_copy(self, registry: UploadRegistry):
        registry.register([_file()])
        file_id = registry.all()[0].id

        snapshot = registry.get(file_id)
        snapshot.progress = 99

        assert registry.get(file_id).progress == 0

    def test_count(self, registry: UploadRegistry):
        registry.register([_file("a.png"), _file("b.png")])
        registry.set_status(registry.all()[0].id, FileStatus.UPLOADING)
        assert registry.count(FileStatus.UPLOADING) == 1
        assert registry.count(FileStatus.PENDING) == 1

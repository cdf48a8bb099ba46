import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from evidence_verifier.storage.exceptions import (
    BlobNotFoundError,
    InvalidStorageKeyError,
    StorageError,
    StorageFullError,
)
from evidence_verifier.storage.local_blob_store import LocalBlobStore, blob_file_path


class TestBlobFilePath:
    def test_joins_key_under_root(self) -> None:
        path = blob_file_path(Path("/app/files"), "ID_Card/abc.pdf")
        assert path == Path("/app/files/ID_Card/abc.pdf")

    def test_rejects_parent_traversal(self) -> None:
        with pytest.raises(InvalidStorageKeyError):
            blob_file_path(Path("/app/files"), "../etc/passwd")

    def test_rejects_absolute_key(self) -> None:
        with pytest.raises(InvalidStorageKeyError):
            blob_file_path(Path("/app/files"), "/etc/passwd")


class TestPut:
    def test_stores_bytes_under_partition(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        key = store.put(b"evidence", ".JPG", partition="Evidence_Photo")

        assert key.startswith("Evidence_Photo/")
        assert key.endswith(".jpg")
        assert (tmp_path / key).read_bytes() == b"evidence"

    def test_keys_are_unique_for_identical_content(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        first = store.put(b"same", ".pdf", partition="Legal_Document")
        second = store.put(b"same", ".pdf", partition="Legal_Document")

        assert first != second

    def test_drops_unusable_extension(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        key = store.put(b"x", "../../evil", partition="ID_Card")

        assert "/" not in key.split("/", 1)[1]
        assert "." not in key.split("/", 1)[1]

    def test_leaves_no_temp_file(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        key = store.put(b"data", ".png", partition="Evidence_Photo")

        assert [p.name for p in (tmp_path / "Evidence_Photo").iterdir()] == [Path(key).name]

    def test_no_space_raises_storage_full(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        with patch(
            "evidence_verifier.storage.local_blob_store.os.fsync",
            side_effect=OSError(errno.ENOSPC, "No space left on device"),
        ):
            with pytest.raises(StorageFullError):
                store.put(b"data", ".pdf", partition="ID_Card")

        assert list((tmp_path / "ID_Card").iterdir()) == []

    def test_other_os_error_raises_storage_error(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        with patch(
            "evidence_verifier.storage.local_blob_store.os.replace",
            side_effect=OSError(errno.EIO, "I/O error"),
        ):
            with pytest.raises(StorageError) as exc_info:
                store.put(b"data", ".pdf", partition="ID_Card")

        assert not isinstance(exc_info.value, StorageFullError)


class TestOpenForRead:
    def test_reads_back_stored_bytes(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)
        key = store.put(b"payload", ".mp4", partition="Evidence_Video")

        with store.open_for_read(key) as stream:
            assert stream.read() == b"payload"

    def test_missing_blob_raises_not_found(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        with pytest.raises(BlobNotFoundError, match="Blob not found"):
            store.open_for_read("ID_Card/missing.pdf")


class TestDelete:
    def test_removes_blob(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)
        key = store.put(b"payload", ".pdf", partition="ID_Card")

        assert store.delete(key) is True
        assert not (tmp_path / key).exists()

    def test_missing_blob_returns_false(self, tmp_path: Path) -> None:
        store = LocalBlobStore(tmp_path)

        assert store.delete("ID_Card/missing.pdf") is False

import errno
import os
import re
import uuid
from pathlib import Path
from typing import BinaryIO

from evidence_verifier.logging.logger import Log
from evidence_verifier.storage.base import BaseBlobStore
from evidence_verifier.storage.exceptions import (
    BlobNotFoundError,
    InvalidStorageKeyError,
    StorageError,
    StorageFullError,
)

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,8}$")
_NO_SPACE_ERRNOS = frozenset({errno.ENOSPC, errno.EDQUOT})


def blob_file_path(root: Path, storage_key: str) -> Path:
    """Build path to blob file: {root}/{partition}/{uuid}{ext}"""
    key_path = Path(storage_key)
    if key_path.is_absolute() or ".." in key_path.parts or not key_path.parts:
        raise InvalidStorageKeyError(f"Invalid storage key: {storage_key!r}")
    return root / key_path


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as files on the local filesystem, one directory per partition."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def put(self, data: bytes, suggested_extension: str, partition: str) -> str:
        storage_key = f"{partition}/{uuid.uuid4().hex}{_normalize_extension(suggested_extension)}"
        path = blob_file_path(self._root, storage_key)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("xb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            if exc.errno in _NO_SPACE_ERRNOS:
                raise StorageFullError(f"No space left to store blob: {exc}") from exc
            raise StorageError(f"Failed to store blob: {exc}") from exc

        Log.debug(f"Stored {len(data)} bytes as {storage_key}")
        return storage_key

    def open_for_read(self, storage_key: str) -> BinaryIO:
        path = blob_file_path(self._root, storage_key)
        try:
            return path.open("rb")
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"Blob not found: {storage_key}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to open blob {storage_key}: {exc}") from exc

    def delete(self, storage_key: str) -> bool:
        path = blob_file_path(self._root, storage_key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete blob {storage_key}: {exc}") from exc
        return True


def _normalize_extension(extension: str) -> str:
    ext = extension.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext if _EXTENSION_RE.match(ext) else ""

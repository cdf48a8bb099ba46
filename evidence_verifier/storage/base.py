from abc import ABC, abstractmethod
from typing import BinaryIO


class BaseBlobStore(ABC):
    """Contract for all blob storage adapters."""

    @abstractmethod
    def put(self, data: bytes, suggested_extension: str, partition: str) -> str:
        """Persist bytes under a freshly generated key.

        Args:
            data: File content.
            suggested_extension: Extension to keep on the stored name, e.g. ".jpg".
            partition: Top-level grouping for the key (the document type).

        Returns:
            The storage key of the published blob.

        Raises:
            StorageFullError: if the volume is out of space.
            StorageError: on any other write failure. No partial blob is left readable.
        """

    @abstractmethod
    def open_for_read(self, storage_key: str) -> BinaryIO:
        """Open a published blob for reading. Caller closes the stream.

        Raises:
            BlobNotFoundError: if nothing is stored under the key.
            StorageError: on any other read failure.
        """

    @abstractmethod
    def delete(self, storage_key: str) -> bool:
        """Delete a blob. Returns False if it was already absent.

        Raises:
            StorageError: if the blob exists but cannot be removed.
        """

class StorageError(Exception):
    """Base exception for blob storage failures."""


class StorageFullError(StorageError):
    """Raised when the storage volume has no space left for a write."""


class BlobNotFoundError(StorageError):
    """Raised when no blob exists under the requested storage key."""


class InvalidStorageKeyError(StorageError):
    """Raised when a storage key would resolve outside the storage root."""

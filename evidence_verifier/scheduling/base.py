from abc import ABC, abstractmethod


class BaseScheduler(ABC):
    """Contract for handing a document to the verification orchestrator."""

    @abstractmethod
    def schedule(self, document_id: str, reevaluate: bool = False) -> None:
        """Queue a verification pass and return without waiting for it.

        Args:
            document_id: Document to verify. Its row must already be committed.
            reevaluate: Overwrite an existing verdict instead of skipping
                documents that are no longer Pending.
        """

    def shutdown(self, wait: bool = True) -> None:
        """Release scheduler resources. No-op unless the backend holds any."""

from abc import ABC, abstractmethod

from app.database.models import FileRecord
from app.ledger.models import AnchorReceipt


class BaseFileRecordsRepository(ABC):
    """Contract for the file index.

    Duplicate digests are allowed: every upload gets its own record.
    """

    @abstractmethod
    async def insert_provisional(self, name: str, locator: str, digest: str) -> FileRecord:
        """Create a record for stored bytes that have not been anchored yet.

        Raises:
            MetadataIndexError: if the record cannot be written.
        """

    @abstractmethod
    async def attach_anchor(self, record_id: int, receipt: AnchorReceipt) -> None:
        """Store the receipt on the record, overwriting any earlier receipt.

        Raises:
            RecordNotFoundError: if no record with this id and the receipt's digest exists.
            MetadataIndexError: if the update fails.
        """

    @abstractmethod
    async def find_by_digest(self, digest: str) -> FileRecord | None:
        """Newest record for the digest."""

    @abstractmethod
    async def find_by_name(self, name: str) -> list[FileRecord]:
        """All records for a file name, newest first."""

    @abstractmethod
    async def find_anchored_by_digest(self, digest: str) -> FileRecord | None:
        """Newest record for the digest whose anchor is confirmed."""

    @abstractmethod
    async def find_pending(self, limit: int) -> list[FileRecord]:
        """Pending records, least recently checked first (never-checked records lead)."""

    @abstractmethod
    async def mark_checked(self, record_id: int) -> None:
        """Count one reconciliation attempt that left the record pending.

        Raises:
            RecordNotFoundError: if no record with this id exists.
            MetadataIndexError: if the update fails.
        """

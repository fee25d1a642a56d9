from dataclasses import dataclass
from datetime import datetime

from app.ledger.models import AnchorReceipt, ConfirmationStatus


@dataclass
class FileRecord:
    """Represents a row from the files table.

    A record with a locator means the bytes are retrievable. A missing or
    FAILED anchor means the record is a storage record only, not a proof.
    """

    id: int
    name: str
    locator: str
    digest: str
    anchor: AnchorReceipt | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    reconcile_attempts: int = 0
    last_checked_at: datetime | None = None

    @property
    def is_anchored(self) -> bool:
        return (
            self.anchor is not None
            and self.anchor.confirmation_status == ConfirmationStatus.CONFIRMED
        )

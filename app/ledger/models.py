from dataclasses import dataclass, replace
from enum import Enum


class ConfirmationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class AnchorReceipt:
    """A ledger submission of (digest, signature) and its confirmation state."""

    digest: str
    signature: str
    transaction_reference: str
    confirmation_status: ConfirmationStatus = ConfirmationStatus.PENDING
    block_number: int | None = None

    def with_status(
        self,
        status: ConfirmationStatus,
        block_number: int | None = None,
    ) -> "AnchorReceipt":
        return replace(
            self,
            confirmation_status=status,
            block_number=block_number if block_number is not None else self.block_number,
        )

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

NOT_ANCHORED_SENTINEL = "N/A"


class PipelineState(str, Enum):
    RECEIVED = "received"
    HASHED = "hashed"
    STORED = "stored"
    INDEXED = "indexed"
    SIGNED = "signed"
    ANCHOR_PENDING = "anchor_pending"
    ANCHORED = "anchored"
    REJECTED = "rejected"
    STORAGE_FAILED = "storage_failed"
    INDEX_FAILED = "index_failed"


class AnchorStatus(str, Enum):
    """Outcome of the anchoring half of an upload, as reported to callers."""

    CONFIRMED = "confirmed"
    PENDING = "pending"
    FAILED = "failed"
    NOT_ANCHORED = "not_anchored"
    ALREADY_ANCHORED = "already_anchored"


@dataclass
class UploadRequest:
    """One file submitted for storage and anchoring."""

    name: str
    content: BinaryIO | None
    content_type: str = ""
    submitter_identity: str | None = None
    claimed_digest: str | None = None
    claimed_signature: str | None = None


@dataclass(frozen=True)
class UploadResult:
    """What a successful upload reports back, anchored or degraded."""

    record_id: int
    name: str
    digest: str
    size: int
    locator: str
    anchor_status: AnchorStatus
    transaction_reference: str | None = None
    signature: str | None = None
    anchor_error: str | None = None

    @property
    def transaction_hash(self) -> str:
        """Transaction reference, or "N/A" when this upload has no anchor to show."""
        if self.transaction_reference is None or self.anchor_status in (
            AnchorStatus.FAILED,
            AnchorStatus.NOT_ANCHORED,
        ):
            return NOT_ANCHORED_SENTINEL
        return self.transaction_reference

    @property
    def is_anchored(self) -> bool:
        return self.anchor_status in (AnchorStatus.CONFIRMED, AnchorStatus.ALREADY_ANCHORED)

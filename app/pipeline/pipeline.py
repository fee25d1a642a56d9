from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from app.database.models import FileRecord
from app.ledger.models import AnchorReceipt
from app.pipeline.models import AnchorStatus, PipelineState, UploadRequest, UploadResult


@dataclass(slots=True)
class PipelineContext:
    request: UploadRequest
    state: PipelineState = PipelineState.RECEIVED
    tmp_path: Path | None = None
    digest: str = ""
    size: int = 0
    locator: str = ""
    record: FileRecord | None = None
    signature: str = ""
    receipt: AnchorReceipt | None = None
    anchor_status: AnchorStatus = AnchorStatus.NOT_ANCHORED
    anchor_error: str = ""

    def to_result(self) -> UploadResult:
        if self.record is None:
            raise ValueError("PipelineContext.record must be set before building a result")
        return UploadResult(
            record_id=self.record.id,
            name=self.record.name,
            digest=self.digest,
            size=self.size,
            locator=self.locator,
            anchor_status=self.anchor_status,
            transaction_reference=(
                self.receipt.transaction_reference if self.receipt is not None else None
            ),
            signature=self.signature or None,
            anchor_error=self.anchor_error or None,
        )


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError

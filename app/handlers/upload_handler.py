from app.database.exceptions import MetadataIndexError
from app.handlers.models import HandlerResponse
from app.logging.logger import Log
from app.pipeline.exceptions import ValidationError
from app.pipeline.models import AnchorStatus, UploadRequest, UploadResult
from app.pipeline.orchestrator import PipelineOrchestrator
from app.storage.exceptions import StorageError

SUCCESS_MESSAGE = "File uploaded successfully!"
DEGRADED_MESSAGE = "File uploaded successfully, but it was not anchored on the ledger."
PENDING_MESSAGE = "File uploaded successfully; ledger confirmation is pending."


class UploadHandler:
    """Run one upload and shape the outcome as a response, catching every error."""

    def __init__(self, orchestrator: PipelineOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def handle(self, request: UploadRequest) -> HandlerResponse:
        try:
            result = await self._orchestrator.upload(request)
        except ValidationError as exc:
            return HandlerResponse(400, {"error": str(exc)})
        except (StorageError, MetadataIndexError) as exc:
            return HandlerResponse(500, {"error": str(exc)})
        except Exception as exc:
            Log.exception(f"Upload of {request.name} failed: {exc}")
            return HandlerResponse(500, {"error": str(exc) or "Server error"})
        return HandlerResponse(200, _success_body(result))


def _success_body(result: UploadResult) -> dict[str, object]:
    if result.is_anchored:
        message = SUCCESS_MESSAGE
    elif result.anchor_status == AnchorStatus.PENDING:
        message = PENDING_MESSAGE
    else:
        message = DEGRADED_MESSAGE
    return {
        "message": message,
        "downloadLink": result.locator,
        "transactionHash": result.transaction_hash,
        "anchorStatus": result.anchor_status.value,
        "digest": result.digest,
    }

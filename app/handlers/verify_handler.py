from app.handlers.models import HandlerResponse
from app.ledger.exceptions import LedgerError, LedgerErrorKind
from app.pipeline.exceptions import ValidationError
from app.verification.verification_service import VerificationService


class VerifyHandler:
    """Shape a verification lookup as a response."""

    def __init__(self, service: VerificationService) -> None:
        self._service = service

    async def handle(self, digest: str) -> HandlerResponse:
        try:
            result = await self._service.verify(digest)
        except ValidationError as exc:
            return HandlerResponse(400, {"error": str(exc)})
        except LedgerError as exc:
            status = 503 if exc.kind == LedgerErrorKind.UNREACHABLE else 502
            return HandlerResponse(status, {"error": str(exc)})
        return HandlerResponse(
            200,
            {"exists": result.exists, "owner": result.owner, "signature": result.signature},
        )

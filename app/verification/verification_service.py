from app.hashing.hash_engine import is_valid_digest
from app.ledger.base import BaseLedgerClient
from app.logging.logger import Log
from app.pipeline.exceptions import ValidationError
from app.verification.models import VerificationResult


class VerificationService:
    """Answers whether a digest is anchored, using only the ledger."""

    def __init__(self, ledger: BaseLedgerClient) -> None:
        self._ledger = ledger

    async def verify(self, digest: str) -> VerificationResult:
        """Look up owner and signature for a digest.

        Raises:
            ValidationError: if the digest is not 64 hex characters.
            LedgerError: if the ledger cannot be queried.
        """
        if not is_valid_digest(digest):
            raise ValidationError(f"'{digest}' is not a 64-character hex SHA-256 digest")
        details = await self._ledger.get_file_details(digest.lower())
        if details is None:
            Log.info(f"Digest {digest} is not anchored")
            return VerificationResult(exists=False)
        owner, signature = details
        Log.info(f"Digest {digest} is anchored", owner=owner)
        return VerificationResult(exists=True, owner=owner, signature=signature)

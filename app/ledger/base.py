from abc import ABC, abstractmethod

from app.ledger.models import AnchorReceipt


class BaseLedgerClient(ABC):
    """Contract for all ledger anchoring adapters."""

    @property
    @abstractmethod
    def account(self) -> str:
        """Address that submits anchoring transactions."""

    @abstractmethod
    async def anchor(self, digest: str, signature: str) -> AnchorReceipt:
        """Submit (digest, signature) and return once the ledger accepted it.

        Returns:
            Receipt in PENDING state carrying the transaction reference.

        Raises:
            LedgerError: with kind INSUFFICIENT_FUNDS, REJECTED or UNREACHABLE.
        """

    @abstractmethod
    async def await_confirmation(
        self,
        receipt: AnchorReceipt,
        timeout: float,
    ) -> AnchorReceipt:
        """Wait up to `timeout` seconds for the receipt's transaction to be mined.

        Never raises on timeout: returns the receipt with the best-known status
        (CONFIRMED, FAILED, or still PENDING).
        """

    @abstractmethod
    async def verify_file(self, digest: str) -> tuple[str, bool]:
        """Return (owner, exists) for the digest.

        Raises:
            LedgerError: if the ledger cannot be queried.
        """

    async def get_file_details(self, digest: str) -> tuple[str, str] | None:
        """Return (owner, hex signature), or None when the digest was never anchored."""
        _owner, exists = await self.verify_file(digest)
        if not exists:
            return None
        return await self._fetch_file_details(digest)

    @abstractmethod
    async def _fetch_file_details(self, digest: str) -> tuple[str, str]:
        """Read (owner, hex signature) for a digest known to exist."""

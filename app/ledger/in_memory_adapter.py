"""In-process ledger.

Mimics the FileStorage contract: one entry per digest, per-account nonce
ordering, and pending transactions that are mined on confirmation. No network
calls; used for local development (ledger_backend=memory) and tests.
"""

import hashlib

from app.ledger.base import BaseLedgerClient
from app.ledger.exceptions import LedgerError, LedgerErrorKind
from app.ledger.models import AnchorReceipt, ConfirmationStatus
from app.ledger.nonce_manager import NonceManager


class InMemoryLedgerClient(BaseLedgerClient):
    """Dict-backed stand-in for the anchoring contract."""

    def __init__(
        self,
        account: str,
        *,
        nonce_manager: NonceManager | None = None,
        auto_mine: bool = True,
    ) -> None:
        self._account = account
        self._nonces = nonce_manager if nonce_manager is not None else NonceManager()
        self.auto_mine = auto_mine
        self._entries: dict[str, tuple[str, str]] = {}
        self._pending: dict[str, AnchorReceipt] = {}
        self._mined: dict[str, AnchorReceipt] = {}
        self._account_nonces: dict[str, int] = {}
        self._block_number = 0

    @property
    def account(self) -> str:
        return self._account

    @property
    def submitted_transactions(self) -> list[str]:
        return [*self._mined, *self._pending]

    async def anchor(self, digest: str, signature: str) -> AnchorReceipt:
        async with self._nonces.reserve(self._account, self._pending_nonce) as nonce:
            return self._accept(digest, signature, nonce)

    async def await_confirmation(
        self,
        receipt: AnchorReceipt,
        timeout: float,
    ) -> AnchorReceipt:
        tx = receipt.transaction_reference
        if tx in self._mined:
            return self._mined[tx]
        if tx not in self._pending or not self.auto_mine:
            return receipt
        return self._mine(tx)

    async def verify_file(self, digest: str) -> tuple[str, bool]:
        entry = self._entries.get(digest)
        if entry is None:
            return "0x" + "0" * 40, False
        return entry[0], True

    async def _fetch_file_details(self, digest: str) -> tuple[str, str]:
        if digest not in self._entries:
            raise LedgerError(LedgerErrorKind.REJECTED, "File not found")
        return self._entries[digest]

    async def _pending_nonce(self, identity: str) -> int:
        return self._account_nonces.get(identity.lower(), 0)

    def _accept(self, digest: str, signature: str, nonce: int) -> AnchorReceipt:
        expected = self._account_nonces.get(self._account.lower(), 0)
        if nonce != expected:
            raise LedgerError(
                LedgerErrorKind.REJECTED,
                f"nonce {nonce} out of order, expected {expected}",
            )
        pending_digests = {receipt.digest for receipt in self._pending.values()}
        if digest in self._entries or digest in pending_digests:
            raise LedgerError(
                LedgerErrorKind.REJECTED, "File already registered", duplicate=True
            )
        self._account_nonces[self._account.lower()] = nonce + 1
        tx = "0x" + hashlib.sha256(f"{self._account}:{nonce}:{digest}".encode()).hexdigest()
        receipt = AnchorReceipt(digest=digest, signature=signature, transaction_reference=tx)
        self._pending[tx] = receipt
        return receipt

    def _mine(self, tx: str) -> AnchorReceipt:
        pending = self._pending.pop(tx)
        self._block_number += 1
        self._entries[pending.digest] = (self._account, pending.signature)
        mined = pending.with_status(ConfirmationStatus.CONFIRMED, self._block_number)
        self._mined[tx] = mined
        return mined

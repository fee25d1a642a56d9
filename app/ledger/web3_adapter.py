import asyncio
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import (
    ContractLogicError,
    ProviderConnectionError,
    TimeExhausted,
)

from app.ledger.base import BaseLedgerClient
from app.ledger.exceptions import LedgerError, LedgerErrorKind
from app.ledger.models import AnchorReceipt, ConfirmationStatus
from app.ledger.nonce_manager import NonceManager
from app.logging.logger import Log


class Web3LedgerClient(BaseLedgerClient):
    """Anchors digests through the FileStorage contract over JSON-RPC."""

    def __init__(
        self,
        *,
        w3: AsyncWeb3,
        contract: Any,
        account: LocalAccount,
        nonce_manager: NonceManager,
        chain_id: int | None = None,
        poll_interval_seconds: float = 2.0,
    ) -> None:
        self._w3 = w3
        self._contract = contract
        self._account = account
        self._nonces = nonce_manager
        self._chain_id = chain_id
        self._poll_interval = poll_interval_seconds

    @property
    def account(self) -> str:
        return self._account.address

    async def anchor(self, digest: str, signature: str) -> AnchorReceipt:
        try:
            async with self._nonces.reserve(self.account, self._pending_nonce) as nonce:
                tx_hash = await self._submit(digest, signature, nonce)
        except LedgerError:
            raise
        except Exception as exc:
            raise classify_ledger_error(exc) from exc
        Log.info(f"Anchor transaction sent: {tx_hash}", digest=digest, nonce=nonce)
        return AnchorReceipt(
            digest=digest,
            signature=signature,
            transaction_reference=tx_hash,
        )

    async def await_confirmation(
        self,
        receipt: AnchorReceipt,
        timeout: float,
    ) -> AnchorReceipt:
        try:
            tx_receipt = await self._w3.eth.wait_for_transaction_receipt(
                receipt.transaction_reference,
                timeout=timeout,
                poll_latency=self._poll_interval,
            )
        except TimeExhausted:
            Log.warning(
                f"Transaction {receipt.transaction_reference} not mined within {timeout}s"
            )
            return receipt
        except Exception as exc:
            Log.warning(
                f"Could not poll transaction {receipt.transaction_reference}: {exc}"
            )
            return receipt

        status = (
            ConfirmationStatus.CONFIRMED
            if tx_receipt["status"] == 1
            else ConfirmationStatus.FAILED
        )
        return receipt.with_status(status, tx_receipt["blockNumber"])

    async def verify_file(self, digest: str) -> tuple[str, bool]:
        try:
            owner, exists = await self._contract.functions.verifyFile(digest).call()
        except Exception as exc:
            raise classify_ledger_error(exc) from exc
        return owner, bool(exists)

    async def _fetch_file_details(self, digest: str) -> tuple[str, str]:
        try:
            owner, signature = await self._contract.functions.getFileDetails(digest).call()
        except Exception as exc:
            raise classify_ledger_error(exc) from exc
        return owner, "0x" + bytes(signature).hex()

    async def _pending_nonce(self, identity: str) -> int:
        return await self._w3.eth.get_transaction_count(identity, "pending")

    async def _submit(self, digest: str, signature: str, nonce: int) -> str:
        params: dict[str, Any] = {"from": self.account, "nonce": nonce}
        if self._chain_id is not None:
            params["chainId"] = self._chain_id
        tx = await self._contract.functions.storeFileHash(
            digest,
            Web3.to_bytes(hexstr=signature),
        ).build_transaction(params)
        signed = self._account.sign_transaction(tx)
        tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)


def classify_ledger_error(exc: Exception) -> LedgerError:
    """Map a web3/transport exception onto the ledger error taxonomy."""
    message = str(exc) or exc.__class__.__name__
    if "insufficient funds" in message.lower():
        return LedgerError(LedgerErrorKind.INSUFFICIENT_FUNDS, message)
    if isinstance(exc, (ProviderConnectionError, TimeExhausted, OSError, asyncio.TimeoutError)):
        return LedgerError(LedgerErrorKind.UNREACHABLE, message)
    if isinstance(exc, ContractLogicError):
        return LedgerError(
            LedgerErrorKind.REJECTED,
            f"Contract reverted: {message}",
            duplicate="already" in message.lower(),
        )
    return LedgerError(LedgerErrorKind.REJECTED, message)

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from app.config.settings import Settings
from app.ledger.abi_loader import load_contract_abi
from app.ledger.base import BaseLedgerClient
from app.ledger.in_memory_adapter import InMemoryLedgerClient
from app.ledger.nonce_manager import NonceManager
from app.ledger.web3_adapter import Web3LedgerClient


class LedgerClientFactory:
    """Creates the ledger adapter selected in settings."""

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        memory_account: str | None = None,
        nonce_manager: NonceManager | None = None,
    ) -> BaseLedgerClient:
        """Create a ledger client.

        Args:
            settings: Application settings.
            memory_account: Account recorded as owner by the memory backend.
            nonce_manager: Shared nonce manager; one is created when omitted.
        """
        nonces = nonce_manager if nonce_manager is not None else NonceManager()
        backend = settings.ledger_backend.lower()
        if backend == "memory":
            return InMemoryLedgerClient(
                memory_account or "0x" + "0" * 39 + "1",
                nonce_manager=nonces,
            )
        if backend == "web3":
            return cls._create_web3(settings, nonces)
        raise ValueError(
            f"Unknown ledger backend '{backend}'. Choose from: ['memory', 'web3']"
        )

    @staticmethod
    def _create_web3(settings: Settings, nonces: NonceManager) -> Web3LedgerClient:
        for field in ("ledger_rpc_url", "ledger_private_key", "ledger_contract_address"):
            if not getattr(settings, field):
                raise ValueError(f"{field} is required for ledger_backend=web3")
        w3 = AsyncWeb3(AsyncHTTPProvider(settings.ledger_rpc_url))
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(settings.ledger_contract_address),
            abi=load_contract_abi(),
        )
        return Web3LedgerClient(
            w3=w3,
            contract=contract,
            account=Account.from_key(settings.ledger_private_key),
            nonce_manager=nonces,
            chain_id=settings.ledger_chain_id,
            poll_interval_seconds=settings.ledger_poll_interval_seconds,
        )

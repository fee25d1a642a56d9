from eth_account import Account

from app.config.settings import Settings
from app.logging.logger import Log
from app.signing.eth_signer import EthSigner


class SignerFactory:
    """Creates the signer holding the service identity and any extra identities."""

    @classmethod
    def create(cls, settings: Settings) -> EthSigner:
        keys = [key for key in cls._configured_keys(settings) if key]
        if keys:
            return EthSigner.from_private_keys(keys)
        if settings.ledger_backend.lower() == "memory":
            Log.warning("No signing key configured; using an ephemeral key for the memory ledger")
            return EthSigner([Account.create()])
        raise ValueError("ledger_private_key is required to sign anchors")

    @staticmethod
    def _configured_keys(settings: Settings) -> list[str]:
        extra = [key.strip() for key in settings.signing_private_keys.split(",")]
        return [settings.ledger_private_key.strip(), *extra]

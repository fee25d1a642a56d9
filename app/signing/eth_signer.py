from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from app.signing.base import BaseSigner
from app.signing.exceptions import SigningError


class EthSigner(BaseSigner):
    """Signs digests as EIP-191 personal messages with local secp256k1 keys.

    Identities are account addresses; lookups are case-insensitive.
    """

    def __init__(
        self,
        accounts: list[LocalAccount],
        default_identity: str | None = None,
    ) -> None:
        if not accounts:
            raise SigningError("EthSigner requires at least one account")
        self._accounts = {account.address.lower(): account for account in accounts}
        default = default_identity or accounts[0].address
        if default.lower() not in self._accounts:
            raise SigningError(f"No key material for default identity {default}")
        self._default_identity = self._accounts[default.lower()].address

    @classmethod
    def from_private_keys(cls, private_keys: list[str]) -> "EthSigner":
        """Build a signer from hex private keys; the first one is the default identity."""
        accounts: list[LocalAccount] = []
        for index, key in enumerate(private_keys):
            try:
                accounts.append(Account.from_key(key))
            except (ValueError, TypeError) as exc:
                raise SigningError(f"Private key at index {index} is not usable: {exc}") from exc
        return cls(accounts)

    @property
    def default_identity(self) -> str:
        return self._default_identity

    @property
    def identities(self) -> list[str]:
        return [account.address for account in self._accounts.values()]

    async def sign(self, digest: str, identity: str | None = None) -> str:
        account = self._account_for(identity or self._default_identity)
        try:
            signed = account.sign_message(encode_defunct(text=digest))
        except (ValueError, TypeError) as exc:
            raise SigningError(f"Signing failed for {account.address}: {exc}") from exc
        return "0x" + bytes(signed.signature).hex()

    def recover(self, digest: str, signature: str) -> str:
        try:
            return Account.recover_message(encode_defunct(text=digest), signature=signature)
        except Exception as exc:
            raise SigningError(f"Signature could not be recovered: {exc}") from exc

    def _account_for(self, identity: str) -> LocalAccount:
        account = self._accounts.get(identity.lower())
        if account is None:
            raise SigningError(f"No key material for identity {identity}")
        return account

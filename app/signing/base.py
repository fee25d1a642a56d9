from abc import ABC, abstractmethod


class BaseSigner(ABC):
    """Contract for all signing adapters."""

    @property
    @abstractmethod
    def default_identity(self) -> str:
        """Identity used when the caller does not name one."""

    @abstractmethod
    async def sign(self, digest: str, identity: str | None = None) -> str:
        """Sign the digest string itself, never the file bytes.

        Args:
            digest: Hex content digest.
            identity: Signing identity; None selects the service identity.

        Returns:
            Hex-encoded signature.

        Raises:
            SigningError: if the identity has no usable key material.
        """

    @abstractmethod
    def recover(self, digest: str, signature: str) -> str:
        """Return the identity that produced `signature` over `digest`.

        Raises:
            SigningError: if the signature is malformed.
        """

import hashlib
import re
from collections.abc import Iterator
from typing import BinaryIO

DIGEST_HEX_LENGTH = 64
_DIGEST_PATTERN = re.compile(rf"[0-9a-fA-F]{{{DIGEST_HEX_LENGTH}}}")


class HashEngine:
    """Computes SHA-256 content digests as lowercase hex strings."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, chunk_size: int | None = None) -> None:
        self._chunk_size = chunk_size if chunk_size is not None else self.CHUNK_SIZE

    def digest(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    def digest_stream(self, stream: BinaryIO) -> str:
        """Hash a binary stream chunk by chunk without buffering it whole."""
        hasher = hashlib.sha256()
        for chunk in self._chunks(stream):
            hasher.update(chunk)
        return hasher.hexdigest()

    def spool(self, stream: BinaryIO, destination: BinaryIO) -> tuple[str, int]:
        """Copy `stream` into `destination` while hashing it in a single pass.

        Returns:
            Tuple of (hex digest, number of bytes copied).
        """
        hasher = hashlib.sha256()
        size = 0
        for chunk in self._chunks(stream):
            hasher.update(chunk)
            destination.write(chunk)
            size += len(chunk)
        destination.flush()
        return hasher.hexdigest(), size

    def _chunks(self, stream: BinaryIO) -> Iterator[bytes]:
        while True:
            chunk = stream.read(self._chunk_size)
            if not chunk:
                return
            yield chunk


def is_valid_digest(value: str) -> bool:
    """True for a 64-character hex string."""
    return _DIGEST_PATTERN.fullmatch(value) is not None

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager


class NonceManager:
    """Serializes submissions per identity and hands out strictly increasing nonces.

    The nonce for an identity is read from the ledger on first use and after any
    failed submission; otherwise it is advanced locally once a submission succeeds.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._next_nonce: dict[str, int] = {}

    @asynccontextmanager
    async def reserve(
        self,
        identity: str,
        fetch_nonce: Callable[[str], Awaitable[int]],
    ) -> AsyncIterator[int]:
        """Hold the identity's lock and yield the nonce to submit with."""
        key = identity.lower()
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            nonce = self._next_nonce.get(key)
            if nonce is None:
                nonce = await fetch_nonce(identity)
            try:
                yield nonce
            except BaseException:
                self._next_nonce.pop(key, None)
                raise
            self._next_nonce[key] = nonce + 1

    def peek(self, identity: str) -> int | None:
        """Next cached nonce for the identity, if one is cached."""
        return self._next_nonce.get(identity.lower())

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.ledger.nonce_manager import NonceManager


class TestReserve:
    @pytest.mark.asyncio
    async def test_fetches_once_then_advances_locally(self) -> None:
        manager = NonceManager()
        fetch = AsyncMock(return_value=7)

        async with manager.reserve("0xAbc", fetch) as first:
            pass
        async with manager.reserve("0xabc", fetch) as second:
            pass

        assert (first, second) == (7, 8)
        fetch.assert_awaited_once_with("0xAbc")
        assert manager.peek("0xABC") == 9

    @pytest.mark.asyncio
    async def test_failure_forgets_cached_nonce(self) -> None:
        manager = NonceManager()
        fetch = AsyncMock(side_effect=[3, 3])

        with pytest.raises(RuntimeError):
            async with manager.reserve("0xabc", fetch):
                raise RuntimeError("send failed")
        assert manager.peek("0xabc") is None

        async with manager.reserve("0xabc", fetch) as nonce:
            pass
        assert nonce == 3
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_reservations_get_distinct_nonces(self) -> None:
        manager = NonceManager()
        fetch = AsyncMock(return_value=0)
        seen: list[int] = []

        async def submit() -> None:
            async with manager.reserve("0xabc", fetch) as nonce:
                await asyncio.sleep(0)
                seen.append(nonce)

        await asyncio.gather(*(submit() for _ in range(10)))

        assert seen == list(range(10))

    @pytest.mark.asyncio
    async def test_identities_are_independent(self) -> None:
        manager = NonceManager()

        async with manager.reserve("0xaaa", AsyncMock(return_value=5)) as a:
            pass
        async with manager.reserve("0xbbb", AsyncMock(return_value=0)) as b:
            pass

        assert (a, b) == (5, 0)

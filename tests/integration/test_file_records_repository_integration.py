import uuid

import pytest

from app.database.exceptions import RecordNotFoundError
from app.database.repositories.file_records_repository import FileRecordsRepository
from app.ledger.models import AnchorReceipt, ConfirmationStatus


def _unique_digest() -> str:
    return uuid.uuid4().hex * 2


def _make_receipt(digest: str, status: ConfirmationStatus, tx: str = "0xtx") -> AnchorReceipt:
    return AnchorReceipt(
        digest=digest,
        signature="0xsig",
        transaction_reference=tx,
        confirmation_status=status,
        block_number=7 if status != ConfirmationStatus.PENDING else None,
    )


@pytest.mark.integration
class TestFileRecordsRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_insert_then_find_by_digest(self, integration_cleanup: list[int]) -> None:
        repo = FileRecordsRepository()
        digest = _unique_digest()

        record = await repo.insert_provisional("report.pdf", "loc-1", digest)
        integration_cleanup.append(record.id)
        found = await repo.find_by_digest(digest)

        assert found is not None
        assert found.id == record.id
        assert found.locator == "loc-1"
        assert found.anchor is None
        assert found.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_digests_are_separate_rows(
        self, integration_cleanup: list[int]
    ) -> None:
        repo = FileRecordsRepository()
        digest = _unique_digest()

        first = await repo.insert_provisional("a.pdf", "loc-1", digest)
        second = await repo.insert_provisional("b.pdf", "loc-2", digest)
        integration_cleanup.extend([first.id, second.id])

        assert first.id != second.id
        newest = await repo.find_by_digest(digest)
        assert newest is not None and newest.id == second.id

    @pytest.mark.asyncio
    async def test_attach_anchor_and_pending_lifecycle(
        self, integration_cleanup: list[int]
    ) -> None:
        repo = FileRecordsRepository()
        digest = _unique_digest()
        record = await repo.insert_provisional("a.pdf", "loc-1", digest)
        integration_cleanup.append(record.id)

        await repo.attach_anchor(record.id, _make_receipt(digest, ConfirmationStatus.PENDING))
        assert record.id in [r.id for r in await repo.find_pending(limit=1000)]
        assert await repo.find_anchored_by_digest(digest) is None

        await repo.attach_anchor(record.id, _make_receipt(digest, ConfirmationStatus.CONFIRMED))
        anchored = await repo.find_anchored_by_digest(digest)
        assert anchored is not None
        assert anchored.anchor is not None
        assert anchored.anchor.block_number == 7
        assert record.id not in [r.id for r in await repo.find_pending(limit=1000)]

    @pytest.mark.asyncio
    async def test_attach_to_wrong_digest_raises(self, integration_cleanup: list[int]) -> None:
        repo = FileRecordsRepository()
        record = await repo.insert_provisional("a.pdf", "loc-1", _unique_digest())
        integration_cleanup.append(record.id)

        with pytest.raises(RecordNotFoundError):
            await repo.attach_anchor(
                record.id, _make_receipt(_unique_digest(), ConfirmationStatus.CONFIRMED)
            )

    @pytest.mark.asyncio
    async def test_mark_checked_counts_attempts(self, integration_cleanup: list[int]) -> None:
        repo = FileRecordsRepository()
        digest = _unique_digest()
        record = await repo.insert_provisional("a.pdf", "loc-1", digest)
        integration_cleanup.append(record.id)
        await repo.attach_anchor(record.id, _make_receipt(digest, ConfirmationStatus.PENDING))

        await repo.mark_checked(record.id)
        await repo.mark_checked(record.id)

        found = await repo.find_by_digest(digest)
        assert found is not None
        assert found.reconcile_attempts == 2
        assert found.last_checked_at is not None

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from itertools import count

from app.database.exceptions import RecordNotFoundError
from app.database.models import FileRecord
from app.database.repositories.base import BaseFileRecordsRepository
from app.ledger.models import AnchorReceipt, ConfirmationStatus

_NEVER_CHECKED = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryFileRecordsRepository(BaseFileRecordsRepository):
    """File index kept in process memory (index_backend=memory)."""

    def __init__(self) -> None:
        self._records: dict[int, FileRecord] = {}
        self._ids = count(1)

    async def insert_provisional(self, name: str, locator: str, digest: str) -> FileRecord:
        now = datetime.now(timezone.utc)
        record = FileRecord(
            id=next(self._ids),
            name=name,
            locator=locator,
            digest=digest,
            created_at=now,
            updated_at=now,
        )
        self._records[record.id] = record
        return replace(record)

    async def attach_anchor(self, record_id: int, receipt: AnchorReceipt) -> None:
        record = self._records.get(record_id)
        if record is None or record.digest != receipt.digest:
            raise RecordNotFoundError(
                f"File record {record_id} with digest {receipt.digest} not found"
            )
        record.anchor = receipt
        record.updated_at = datetime.now(timezone.utc)

    async def find_by_digest(self, digest: str) -> FileRecord | None:
        matches = self._newest_first(r for r in self._records.values() if r.digest == digest)
        return matches[0] if matches else None

    async def find_by_name(self, name: str) -> list[FileRecord]:
        return self._newest_first(r for r in self._records.values() if r.name == name)

    async def find_anchored_by_digest(self, digest: str) -> FileRecord | None:
        matches = self._newest_first(
            r for r in self._records.values() if r.digest == digest and r.is_anchored
        )
        return matches[0] if matches else None

    async def find_pending(self, limit: int) -> list[FileRecord]:
        pending = [
            r
            for r in self._records.values()
            if r.anchor is not None
            and r.anchor.confirmation_status == ConfirmationStatus.PENDING
        ]
        pending.sort(key=lambda r: (r.last_checked_at or _NEVER_CHECKED, r.id))
        return [replace(r) for r in pending[:limit]]

    async def mark_checked(self, record_id: int) -> None:
        record = self._records.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"File record {record_id} not found")
        record.reconcile_attempts += 1
        record.last_checked_at = datetime.now(timezone.utc)

    @staticmethod
    def _newest_first(records: Iterable[FileRecord]) -> list[FileRecord]:
        return [replace(r) for r in sorted(records, key=lambda r: r.id, reverse=True)]

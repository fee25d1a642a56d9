from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.exceptions import MetadataIndexError, RecordNotFoundError
from app.database.models import FileRecord
from app.database.repositories.base import BaseFileRecordsRepository
from app.ledger.models import AnchorReceipt, ConfirmationStatus

_COLUMNS = """
    id, filename, file_url, file_hash, signature, tx_hash, anchor_status,
    block_number, created_at, updated_at, reconcile_attempts, last_checked_at
"""


class FileRecordsRepository(BaseFileRecordsRepository):
    """Database operations for the files table."""

    async def insert_provisional(self, name: str, locator: str, digest: str) -> FileRecord:
        try:
            async with get_connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        f"""
                        INSERT INTO files (filename, file_url, file_hash)
                        VALUES (%s, %s, %s)
                        RETURNING {_COLUMNS}
                        """,
                        (name, locator, digest),
                    )
                    row = await cur.fetchone()
                await conn.commit()
        except psycopg.Error as exc:
            raise MetadataIndexError(f"Failed to index {name}: {exc}") from exc

        if row is None:
            raise MetadataIndexError(f"Insert for {name} returned no row")
        return _to_record(row)

    async def attach_anchor(self, record_id: int, receipt: AnchorReceipt) -> None:
        try:
            async with get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        UPDATE files
                        SET signature = %s, tx_hash = %s, anchor_status = %s,
                            block_number = %s, updated_at = NOW()
                        WHERE id = %s AND file_hash = %s
                        """,
                        (
                            receipt.signature,
                            receipt.transaction_reference,
                            receipt.confirmation_status.value,
                            receipt.block_number,
                            record_id,
                            receipt.digest,
                        ),
                    )
                    if cur.rowcount == 0:
                        raise RecordNotFoundError(
                            f"File record {record_id} with digest {receipt.digest} not found"
                        )
                await conn.commit()
        except psycopg.Error as exc:
            raise MetadataIndexError(
                f"Failed to attach anchor to record {record_id}: {exc}"
            ) from exc

    async def find_by_digest(self, digest: str) -> FileRecord | None:
        rows = await self._select(
            "WHERE file_hash = %s ORDER BY created_at DESC, id DESC LIMIT 1",
            (digest,),
        )
        return rows[0] if rows else None

    async def find_by_name(self, name: str) -> list[FileRecord]:
        return await self._select(
            "WHERE filename = %s ORDER BY created_at DESC, id DESC",
            (name,),
        )

    async def find_anchored_by_digest(self, digest: str) -> FileRecord | None:
        rows = await self._select(
            """
            WHERE file_hash = %s AND anchor_status = 'confirmed'
            ORDER BY created_at DESC, id DESC LIMIT 1
            """,
            (digest,),
        )
        return rows[0] if rows else None

    async def find_pending(self, limit: int) -> list[FileRecord]:
        return await self._select(
            """
            WHERE anchor_status = 'pending'
            ORDER BY last_checked_at NULLS FIRST, created_at, id LIMIT %s
            """,
            (limit,),
        )

    async def mark_checked(self, record_id: int) -> None:
        try:
            async with get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        UPDATE files
                        SET reconcile_attempts = reconcile_attempts + 1,
                            last_checked_at = NOW()
                        WHERE id = %s
                        """,
                        (record_id,),
                    )
                    if cur.rowcount == 0:
                        raise RecordNotFoundError(f"File record {record_id} not found")
                await conn.commit()
        except psycopg.Error as exc:
            raise MetadataIndexError(
                f"Failed to record reconcile attempt for record {record_id}: {exc}"
            ) from exc

    async def _select(self, clause: str, params: tuple[Any, ...]) -> list[FileRecord]:
        try:
            async with get_connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(f"SELECT {_COLUMNS} FROM files {clause}", params)
                    rows = await cur.fetchall()
        except psycopg.Error as exc:
            raise MetadataIndexError(f"File index query failed: {exc}") from exc
        return [_to_record(row) for row in rows]


def _to_record(row: dict[str, Any]) -> FileRecord:
    anchor = None
    if row["tx_hash"] is not None and row["anchor_status"] is not None:
        anchor = AnchorReceipt(
            digest=row["file_hash"],
            signature=row["signature"] or "",
            transaction_reference=row["tx_hash"],
            confirmation_status=ConfirmationStatus(row["anchor_status"]),
            block_number=row["block_number"],
        )
    return FileRecord(
        id=row["id"],
        name=row["filename"],
        locator=row["file_url"],
        digest=row["file_hash"],
        anchor=anchor,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        reconcile_attempts=row["reconcile_attempts"],
        last_checked_at=row["last_checked_at"],
    )

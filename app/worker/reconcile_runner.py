from app.config.settings import Settings
from app.database.models import FileRecord
from app.database.repositories.base import BaseFileRecordsRepository
from app.ledger.base import BaseLedgerClient
from app.ledger.models import AnchorReceipt, ConfirmationStatus
from app.logging.logger import Log


class ReconcileRunner:
    """Re-check one pending anchor, persist its final status, and give up after max attempts."""

    def __init__(
        self,
        ledger: BaseLedgerClient,
        index: BaseFileRecordsRepository,
        settings: Settings,
    ) -> None:
        self._ledger = ledger
        self._index = index
        self._settings = settings

    async def run(self, record: FileRecord) -> bool:
        """Reconcile a single record. Returns True when its status changed."""
        if record.anchor is None:
            return False
        tx = record.anchor.transaction_reference
        Log.debug(
            f"Reconciling record {record.id} (attempt {record.reconcile_attempts + 1})",
            transaction=tx,
        )
        try:
            receipt = await self._ledger.await_confirmation(
                record.anchor,
                self._settings.reconcile_confirmation_timeout_seconds,
            )
            if receipt.confirmation_status == ConfirmationStatus.PENDING:
                return await self._handle_still_pending(record, receipt)
            await self._index.attach_anchor(record.id, receipt)
        except Exception as exc:
            Log.error(f"Reconciling record {record.id} failed: {exc}", transaction=tx)
            return False
        Log.info(
            f"Record {record.id} anchor is now {receipt.confirmation_status.value}",
            transaction=tx,
            block=receipt.block_number,
        )
        return True

    async def _handle_still_pending(self, record: FileRecord, receipt: AnchorReceipt) -> bool:
        """Count the attempt; mark failed if at max, otherwise leave pending."""
        attempts = record.reconcile_attempts + 1
        if attempts >= self._settings.reconcile_max_attempts:
            await self._index.attach_anchor(
                record.id, receipt.with_status(ConfirmationStatus.FAILED)
            )
            Log.error(
                f"Record {record.id} anchor marked failed after {attempts} checks; "
                "transaction was never mined",
                transaction=receipt.transaction_reference,
            )
            return True
        await self._index.mark_checked(record.id)
        return False

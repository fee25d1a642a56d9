import asyncio

from app.config.settings import Settings
from app.database.models import FileRecord
from app.database.repositories.base import BaseFileRecordsRepository
from app.logging.logger import Log
from app.worker.reconcile_runner import ReconcileRunner


class ReconcileWorker:
    """Poll loop: fetch pending anchors -> reconcile each -> sleep."""

    def __init__(
        self,
        index: BaseFileRecordsRepository,
        runner: ReconcileRunner,
        settings: Settings,
    ) -> None:
        self._index = index
        self._runner = runner
        self._settings = settings

    async def run(self, max_iterations: int | None = None) -> int:
        """Main poll loop. Runs until cancelled.

        If max_iterations is set, stop after that many polls (for testing).

        Returns:
            Number of records whose anchor status changed.
        """
        Log.info("Reconcile worker started, polling for pending anchors")
        iterations = 0
        updated = 0
        while max_iterations is None or iterations < max_iterations:
            iterations += 1
            batch = await self._try_fetch_pending()
            changed = 0
            for record in batch:
                if await self._runner.run(record):
                    changed += 1
            updated += changed
            # A full batch that made progress may have more behind it.
            if changed == 0 or len(batch) < self._settings.reconcile_batch_size:
                if max_iterations is not None and iterations >= max_iterations:
                    break
                Log.debug("No more pending anchors, sleeping")
                await asyncio.sleep(self._settings.reconcile_poll_interval_seconds)
        return updated

    async def _try_fetch_pending(self) -> list[FileRecord]:
        """Fetch the next batch of pending records. Gracefully handle index errors."""
        try:
            return await self._index.find_pending(self._settings.reconcile_batch_size)
        except Exception as exc:
            Log.warning(f"Index error, will retry: {exc}")
            return []

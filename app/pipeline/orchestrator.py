from app.config.settings import Settings
from app.database.repositories.base import BaseFileRecordsRepository
from app.database.repositories.factory import FileRecordsRepositoryFactory
from app.hashing.hash_engine import HashEngine
from app.ledger.base import BaseLedgerClient
from app.ledger.exceptions import LedgerError, LedgerErrorKind
from app.ledger.factory import LedgerClientFactory
from app.logging.logger import Log
from app.pipeline.exceptions import OrphanedObjectError, ValidationError
from app.pipeline.models import AnchorStatus, PipelineState, UploadRequest, UploadResult
from app.pipeline.pipeline import PipelineContext, PipelineStep
from app.pipeline.steps import (
    AnchorStep,
    ConfirmStep,
    IndexProvisionalStep,
    ReanchorCheckStep,
    SignStep,
    SpoolAndHashStep,
    StoreStep,
    ValidateRequestStep,
    VerifyClaimsStep,
)
from app.signing.base import BaseSigner
from app.signing.exceptions import SigningError
from app.signing.factory import SignerFactory
from app.storage.base import BaseObjectStore
from app.storage.exceptions import StorageError
from app.storage.factory import ObjectStoreFactory


class PipelineOrchestrator:
    """Turns one upload into a stored, indexed and (ideally) anchored file.

    Pipeline: validate -> hash -> store -> index -> sign -> anchor -> confirm.

    Any error in the ingest steps (up to the provisional index write) fails the
    upload. Signing and ledger errors in the anchor steps only degrade the
    result: the file is stored and indexed, its anchor status says what happened.
    """

    def __init__(
        self,
        *,
        ingest_steps: list[PipelineStep],
        anchor_steps: list[PipelineStep],
    ) -> None:
        self._ingest_steps = ingest_steps
        self._anchor_steps = anchor_steps

    async def upload(self, request: UploadRequest) -> UploadResult:
        """Run the pipeline for one upload.

        Raises:
            ValidationError: bad input; nothing was stored.
            StorageError: the object store failed; nothing was indexed.
            MetadataIndexError: the index write failed (OrphanedObjectError if bytes were stored).
        """
        context = PipelineContext(request=request)
        Log.info(f"Upload received: {request.name}")
        try:
            await self._run_ingest(context)
        finally:
            _discard_temporary_bytes(context)

        await self._run_anchor(context)
        result = context.to_result()
        Log.info(
            f"Upload of {result.name} finished with anchor status {result.anchor_status.value}",
            record_id=result.record_id,
            digest=result.digest,
        )
        return result

    async def _run_ingest(self, context: PipelineContext) -> None:
        try:
            for step in self._ingest_steps:
                context = await step.run(context)
        except ValidationError as exc:
            context.state = PipelineState.REJECTED
            Log.warning(f"Upload rejected: {exc}")
            raise
        except StorageError as exc:
            context.state = PipelineState.STORAGE_FAILED
            Log.error(f"Storage failed for {context.request.name}: {exc}", digest=context.digest)
            raise
        except OrphanedObjectError:
            context.state = PipelineState.INDEX_FAILED
            raise

    async def _run_anchor(self, context: PipelineContext) -> None:
        try:
            for step in self._anchor_steps:
                context = await step.run(context)
        except SigningError as exc:
            context.anchor_status = AnchorStatus.NOT_ANCHORED
            context.anchor_error = str(exc)
            Log.error(f"Signing failed; file shared without anchor: {exc}", digest=context.digest)
        except LedgerError as exc:
            if context.receipt is None:
                context.anchor_status = AnchorStatus.NOT_ANCHORED
            context.anchor_error = str(exc)
            if exc.kind == LedgerErrorKind.INSUFFICIENT_FUNDS:
                Log.error(
                    "Ledger account has insufficient funds; file shared without anchor",
                    digest=context.digest,
                )
            else:
                Log.error(f"Ledger error; file shared without anchor: {exc}", digest=context.digest)
        except Exception as exc:
            if context.receipt is None:
                context.anchor_status = AnchorStatus.NOT_ANCHORED
            context.anchor_error = str(exc)
            Log.exception(f"Unexpected anchoring failure; file shared without anchor: {exc}")


def _discard_temporary_bytes(context: PipelineContext) -> None:
    if context.tmp_path is None:
        return
    try:
        context.tmp_path.unlink(missing_ok=True)
    except OSError as exc:
        Log.warning(f"Could not delete temporary file {context.tmp_path}: {exc}")
    context.tmp_path = None


def build_orchestrator(
    settings: Settings,
    *,
    object_store: BaseObjectStore | None = None,
    index: BaseFileRecordsRepository | None = None,
    signer: BaseSigner | None = None,
    ledger: BaseLedgerClient | None = None,
    hash_engine: HashEngine | None = None,
) -> PipelineOrchestrator:
    """Build a PipelineOrchestrator; collaborators not passed in come from settings."""
    if hash_engine is None:
        hash_engine = HashEngine()
    if object_store is None:
        object_store = ObjectStoreFactory.create(settings)
    if index is None:
        index = FileRecordsRepositoryFactory.create(settings)
    if signer is None:
        signer = SignerFactory.create(settings)
    if ledger is None:
        ledger = LedgerClientFactory.create(settings, memory_account=signer.default_identity)
    anchor_steps: list[PipelineStep] = [
        ReanchorCheckStep(ledger, index),
        SignStep(signer),
        AnchorStep(ledger, index),
    ]
    if settings.await_ledger_confirmation:
        anchor_steps.append(
            ConfirmStep(
                ledger, index, timeout_seconds=settings.ledger_confirmation_timeout_seconds
            )
        )
    return PipelineOrchestrator(
        ingest_steps=[
            ValidateRequestStep(),
            SpoolAndHashStep(hash_engine, tmp_dir=settings.upload_tmp_dir),
            VerifyClaimsStep(signer),
            StoreStep(object_store),
            IndexProvisionalStep(index),
        ],
        anchor_steps=anchor_steps,
    )

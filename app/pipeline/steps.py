import asyncio
import tempfile
from pathlib import Path, PurePosixPath

from app.database.exceptions import MetadataIndexError
from app.database.repositories.base import BaseFileRecordsRepository
from app.hashing.hash_engine import HashEngine, is_valid_digest
from app.ledger.base import BaseLedgerClient
from app.ledger.exceptions import LedgerError
from app.ledger.models import AnchorReceipt, ConfirmationStatus
from app.logging.logger import Log
from app.pipeline.exceptions import OrphanedObjectError, ValidationError
from app.pipeline.models import AnchorStatus, PipelineState
from app.pipeline.pipeline import PipelineContext, PipelineStep
from app.signing.base import BaseSigner
from app.signing.exceptions import SigningError
from app.storage.base import BaseObjectStore

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_RECEIPT_TO_ANCHOR_STATUS = {
    ConfirmationStatus.PENDING: AnchorStatus.PENDING,
    ConfirmationStatus.CONFIRMED: AnchorStatus.CONFIRMED,
    ConfirmationStatus.FAILED: AnchorStatus.FAILED,
}


class ValidateRequestStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        if request.content is None:
            raise ValidationError("No file uploaded")
        name = PurePosixPath(request.name.replace("\\", "/")).name.strip()
        if not name:
            raise ValidationError("File name is required")
        request.name = name
        request.content_type = request.content_type.strip() or DEFAULT_CONTENT_TYPE
        if request.claimed_digest is not None and not is_valid_digest(request.claimed_digest):
            raise ValidationError("Supplied digest is not a 64-character hex SHA-256 digest")
        if request.claimed_signature is not None and not request.claimed_signature.strip():
            raise ValidationError("Supplied signature is empty")
        return context


class SpoolAndHashStep(PipelineStep):
    """Copies the upload stream to a local temporary file while hashing it."""

    def __init__(self, hash_engine: HashEngine, tmp_dir: str | None = None) -> None:
        self._hash_engine = hash_engine
        self._tmp_dir = tmp_dir or None

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.request.content is None:
            raise ValueError("PipelineContext.request.content must be set before hashing")
        handle = tempfile.NamedTemporaryFile(
            prefix="upload-", dir=self._tmp_dir, delete=False
        )
        context.tmp_path = Path(handle.name)
        with handle:
            digest, size = await asyncio.to_thread(
                self._hash_engine.spool, context.request.content, handle
            )
        context.digest = digest
        context.size = size
        context.state = PipelineState.HASHED
        Log.info(f"Hashed {size} bytes of {context.request.name}", digest=digest)
        return context


class VerifyClaimsStep(PipelineStep):
    """Checks a caller-supplied digest and signature against the recomputed digest."""

    def __init__(self, signer: BaseSigner) -> None:
        self._signer = signer

    async def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        if request.claimed_digest is not None and request.claimed_digest.lower() != context.digest:
            raise ValidationError(
                f"Supplied digest {request.claimed_digest} does not match content "
                f"digest {context.digest}"
            )
        if request.claimed_signature is not None:
            try:
                signer_identity = self._signer.recover(context.digest, request.claimed_signature)
            except SigningError as exc:
                raise ValidationError(f"Supplied signature is invalid: {exc}") from exc
            expected = request.submitter_identity
            if expected is not None and signer_identity.lower() != expected.lower():
                raise ValidationError(
                    f"Supplied signature was made by {signer_identity}, not {expected}"
                )
            context.signature = request.claimed_signature
        return context


class StoreStep(PipelineStep):
    def __init__(self, object_store: BaseObjectStore) -> None:
        self._object_store = object_store

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.tmp_path is None:
            raise ValueError("PipelineContext.tmp_path must be set before storing")
        with context.tmp_path.open("rb") as content:
            context.locator = await self._object_store.store(
                context.request.name,
                context.request.content_type,
                content,
            )
        context.state = PipelineState.STORED
        Log.info(f"Stored {context.request.name}", locator=context.locator)
        return context


class IndexProvisionalStep(PipelineStep):
    def __init__(self, index: BaseFileRecordsRepository) -> None:
        self._index = index

    async def run(self, context: PipelineContext) -> PipelineContext:
        try:
            context.record = await self._index.insert_provisional(
                context.request.name,
                context.locator,
                context.digest,
            )
        except MetadataIndexError as exc:
            Log.error(
                f"Stored object has no index record: {exc}",
                orphaned_locator=context.locator,
                digest=context.digest,
            )
            raise OrphanedObjectError(
                f"File was stored at {context.locator} but could not be indexed: {exc}",
                locator=context.locator,
                digest=context.digest,
            ) from exc
        context.state = PipelineState.INDEXED
        Log.info(f"Indexed {context.request.name} as record {context.record.id}")
        return context


class ReanchorCheckStep(PipelineStep):
    """Skips submission for digests the ledger already holds.

    The new record reuses the newest confirmed receipt for the digest, if any.
    """

    def __init__(self, ledger: BaseLedgerClient, index: BaseFileRecordsRepository) -> None:
        self._ledger = ledger
        self._index = index

    async def run(self, context: PipelineContext) -> PipelineContext:
        _owner, exists = await self._ledger.verify_file(context.digest)
        if not exists:
            return context
        context.anchor_status = AnchorStatus.ALREADY_ANCHORED
        context.state = PipelineState.ANCHORED
        prior = await _find_prior_anchor(self._index, context.digest)
        if prior is not None:
            context.receipt = prior
            context.signature = prior.signature
            await _persist_receipt(self._index, context)
        Log.info(
            f"Digest {context.digest} is already anchored; no transaction sent",
            transaction=prior.transaction_reference if prior is not None else None,
        )
        return context


class SignStep(PipelineStep):
    def __init__(self, signer: BaseSigner) -> None:
        self._signer = signer

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.anchor_status == AnchorStatus.ALREADY_ANCHORED:
            return context
        if not context.signature:
            context.signature = await self._signer.sign(
                context.digest,
                context.request.submitter_identity,
            )
        context.state = PipelineState.SIGNED
        return context


class AnchorStep(PipelineStep):
    def __init__(self, ledger: BaseLedgerClient, index: BaseFileRecordsRepository) -> None:
        self._ledger = ledger
        self._index = index

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.anchor_status == AnchorStatus.ALREADY_ANCHORED:
            return context
        if not context.signature:
            raise ValueError("PipelineContext.signature must be set before anchoring")
        try:
            context.receipt = await self._ledger.anchor(context.digest, context.signature)
        except LedgerError as exc:
            if not exc.duplicate:
                raise
            context.anchor_status = AnchorStatus.ALREADY_ANCHORED
            context.state = PipelineState.ANCHORED
            Log.info(
                f"Digest {context.digest} was registered by another upload; "
                "no transaction sent"
            )
            return context
        context.anchor_status = AnchorStatus.PENDING
        context.state = PipelineState.ANCHOR_PENDING
        await _persist_receipt(self._index, context)
        return context


class ConfirmStep(PipelineStep):
    """Waits a bounded time for the anchor transaction to be mined."""

    def __init__(
        self,
        ledger: BaseLedgerClient,
        index: BaseFileRecordsRepository,
        timeout_seconds: float,
    ) -> None:
        self._ledger = ledger
        self._index = index
        self._timeout = timeout_seconds

    async def run(self, context: PipelineContext) -> PipelineContext:
        receipt = context.receipt
        if receipt is None or context.anchor_status != AnchorStatus.PENDING:
            return context
        confirmed = await self._ledger.await_confirmation(receipt, self._timeout)
        if confirmed.confirmation_status == ConfirmationStatus.PENDING:
            Log.info(f"Anchor {receipt.transaction_reference} still pending; left for reconciliation")
            return context
        context.receipt = confirmed
        context.anchor_status = _RECEIPT_TO_ANCHOR_STATUS[confirmed.confirmation_status]
        context.state = PipelineState.ANCHORED
        await _persist_receipt(self._index, context)
        Log.info(
            f"Anchor {confirmed.transaction_reference} {confirmed.confirmation_status.value}",
            block=confirmed.block_number,
        )
        return context


async def _find_prior_anchor(
    index: BaseFileRecordsRepository,
    digest: str,
) -> AnchorReceipt | None:
    try:
        record = await index.find_anchored_by_digest(digest)
    except MetadataIndexError as exc:
        Log.warning(f"Could not look up prior anchor for {digest}: {exc}")
        return None
    return record.anchor if record is not None else None


async def _persist_receipt(index: BaseFileRecordsRepository, context: PipelineContext) -> None:
    """Write the receipt to this flow's record; failures are logged, not raised."""
    if context.record is None or context.receipt is None:
        return
    try:
        await index.attach_anchor(context.record.id, context.receipt)
    except MetadataIndexError as exc:
        Log.error(
            f"Anchor status for record {context.record.id} was not saved: {exc}",
            transaction=context.receipt.transaction_reference,
        )

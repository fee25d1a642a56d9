import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

from app.config.settings import Settings
from app.config.validation import validate_settings
from app.database.connection import apply_schema, close_pool, init_pool
from app.database.repositories.factory import FileRecordsRepositoryFactory
from app.handlers.models import HandlerResponse
from app.handlers.upload_handler import UploadHandler
from app.handlers.verify_handler import VerifyHandler
from app.ledger.factory import LedgerClientFactory
from app.logging.logger import Log
from app.pipeline import UploadRequest, build_orchestrator
from app.signing.factory import SignerFactory
from app.verification.verification_service import VerificationService
from app.worker.reconcile_runner import ReconcileRunner
from app.worker.worker import ReconcileWorker


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="proofshare")
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Store a file and anchor its digest")
    upload.add_argument("path", type=Path)
    upload.add_argument("--content-type", default="")
    upload.add_argument("--identity", help="Submitter address to sign with")
    upload.add_argument("--digest", help="Digest the caller computed, checked before storing")
    upload.add_argument("--signature", help="Signature the caller made over the digest")

    verify = commands.add_parser("verify", help="Look up a digest on the ledger")
    verify.add_argument("digest")

    commands.add_parser("reconcile", help="Resolve pending anchors until interrupted")
    commands.add_parser("init-db", help="Create the files table")
    return parser


async def run_upload(settings: Settings, args: argparse.Namespace) -> HandlerResponse:
    content_type = args.content_type or mimetypes.guess_type(args.path.name)[0] or ""
    handler = UploadHandler(build_orchestrator(settings))
    if not args.path.is_file():
        return await handler.handle(UploadRequest(name=args.path.name, content=None))
    with args.path.open("rb") as content:
        return await handler.handle(
            UploadRequest(
                name=args.path.name,
                content=content,
                content_type=content_type,
                submitter_identity=args.identity,
                claimed_digest=args.digest,
                claimed_signature=args.signature,
            )
        )


async def run_verify(settings: Settings, digest: str) -> HandlerResponse:
    signer = SignerFactory.create(settings)
    ledger = LedgerClientFactory.create(settings, memory_account=signer.default_identity)
    return await VerifyHandler(VerificationService(ledger)).handle(digest)


async def run_reconcile(settings: Settings) -> int:
    signer = SignerFactory.create(settings)
    ledger = LedgerClientFactory.create(settings, memory_account=signer.default_identity)
    index = FileRecordsRepositoryFactory.create(settings)
    worker = ReconcileWorker(index, ReconcileRunner(ledger, index, settings), settings)
    await worker.run()
    return 0


async def run_command(settings: Settings, args: argparse.Namespace) -> int:
    uses_postgres = settings.index_backend.lower() == "postgres"
    if args.command == "init-db" and not uses_postgres:
        Log.error("init-db requires index_backend=postgres")
        return 2
    if uses_postgres:
        await init_pool(settings)
    try:
        if args.command == "init-db":
            await apply_schema()
            Log.info("Schema applied")
            return 0
        if args.command == "reconcile":
            return await run_reconcile(settings)
        if args.command == "upload":
            response = await run_upload(settings, args)
        else:
            response = await run_verify(settings, args.digest)
        print(json.dumps(response.body, indent=2))
        return 0 if response.ok else 1
    finally:
        await close_pool()


def main(argv: list[str] | None = None) -> int:
    """Entry point: settings -> logging -> config check -> run one command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    errors = validate_settings(settings)
    if errors:
        for error in errors:
            Log.error(f"Invalid configuration: {error}")
        return 2

    try:
        return asyncio.run(run_command(settings, args))
    except KeyboardInterrupt:
        Log.info("Shutting down gracefully")
        return 130


if __name__ == "__main__":
    sys.exit(main())

import hashlib

import pytest
from eth_account import Account

from app.config.settings import Settings
from app.database.repositories.in_memory_file_records_repository import (
    InMemoryFileRecordsRepository,
)
from app.ledger.in_memory_adapter import InMemoryLedgerClient
from app.signing.eth_signer import EthSigner
from app.storage.in_memory_adapter import InMemoryObjectStore

# Well-known development keys (Hardhat accounts #0 and #1); never fund them.
SERVICE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SERVICE_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
SUBMITTER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
SUBMITTER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


@pytest.fixture()
def sample_bytes() -> bytes:
    return b"%PDF-1.4 quarterly report\n" * 64


@pytest.fixture()
def sample_digest(sample_bytes: bytes) -> str:
    return hashlib.sha256(sample_bytes).hexdigest()


@pytest.fixture()
def memory_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        index_backend="memory",
        storage_backend="memory",
        ledger_backend="memory",
        ledger_private_key=SERVICE_KEY,
        signing_private_keys=SUBMITTER_KEY,
        upload_tmp_dir=str(tmp_path),
        ledger_confirmation_timeout_seconds=1,
    )


@pytest.fixture()
def signer() -> EthSigner:
    return EthSigner([Account.from_key(SERVICE_KEY), Account.from_key(SUBMITTER_KEY)])


@pytest.fixture()
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture()
def index() -> InMemoryFileRecordsRepository:
    return InMemoryFileRecordsRepository()


@pytest.fixture()
def ledger() -> InMemoryLedgerClient:
    return InMemoryLedgerClient(SERVICE_ADDRESS)


@pytest.fixture()
def service_address() -> str:
    return SERVICE_ADDRESS


@pytest.fixture()
def submitter_address() -> str:
    return SUBMITTER_ADDRESS


@pytest.fixture()
def submitter_key() -> str:
    return SUBMITTER_KEY

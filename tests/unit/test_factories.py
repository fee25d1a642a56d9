from unittest.mock import patch

import pytest

from app.config.settings import Settings
from app.database.repositories.factory import FileRecordsRepositoryFactory
from app.database.repositories.file_records_repository import FileRecordsRepository
from app.database.repositories.in_memory_file_records_repository import (
    InMemoryFileRecordsRepository,
)
from app.ledger.factory import LedgerClientFactory
from app.ledger.in_memory_adapter import InMemoryLedgerClient
from app.ledger.web3_adapter import Web3LedgerClient
from app.signing.eth_signer import EthSigner
from app.signing.factory import SignerFactory
from app.storage.factory import ObjectStoreFactory
from app.storage.in_memory_adapter import InMemoryObjectStore
from app.storage.s3_adapter import S3ObjectStore


class TestObjectStoreFactory:
    def test_creates_memory_store(self) -> None:
        store = ObjectStoreFactory.create(Settings(_env_file=None, storage_backend="memory"))
        assert isinstance(store, InMemoryObjectStore)

    def test_creates_s3_store(self) -> None:
        settings = Settings(_env_file=None, storage_backend="s3", s3_bucket="files")
        with patch("app.storage.s3_adapter.boto3.client") as mock_client:
            store = ObjectStoreFactory.create(settings)
        assert isinstance(store, S3ObjectStore)
        assert mock_client.call_args.kwargs["region_name"] == "us-east-1"

    def test_s3_without_bucket_raises(self) -> None:
        with pytest.raises(ValueError, match="s3_bucket"):
            ObjectStoreFactory.create(Settings(_env_file=None, storage_backend="s3"))

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown storage backend 'gcs'"):
            ObjectStoreFactory.create(Settings(_env_file=None, storage_backend="gcs"))


class TestFileRecordsRepositoryFactory:
    def test_creates_postgres_repository(self) -> None:
        repo = FileRecordsRepositoryFactory.create(Settings(_env_file=None))
        assert isinstance(repo, FileRecordsRepository)

    def test_creates_memory_repository_case_insensitively(self) -> None:
        repo = FileRecordsRepositoryFactory.create(
            Settings(_env_file=None, index_backend="MEMORY")
        )
        assert isinstance(repo, InMemoryFileRecordsRepository)

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ValueError, match="Choose from"):
            FileRecordsRepositoryFactory.create(Settings(_env_file=None, index_backend="mysql"))


class TestSignerFactory:
    def test_uses_ledger_key_as_default_identity(
        self, memory_settings: Settings, service_address: str, submitter_address: str
    ) -> None:
        signer = SignerFactory.create(memory_settings)

        assert isinstance(signer, EthSigner)
        assert signer.default_identity == service_address
        assert signer.identities == [service_address, submitter_address]

    def test_memory_ledger_without_keys_gets_ephemeral_key(self) -> None:
        signer = SignerFactory.create(Settings(_env_file=None, ledger_backend="memory"))
        assert signer.default_identity.startswith("0x")

    def test_web3_ledger_without_keys_raises(self) -> None:
        with pytest.raises(ValueError, match="ledger_private_key"):
            SignerFactory.create(Settings(_env_file=None, ledger_backend="web3"))


class TestLedgerClientFactory:
    def test_memory_ledger_uses_given_account(self, service_address: str) -> None:
        ledger = LedgerClientFactory.create(
            Settings(_env_file=None, ledger_backend="memory"), memory_account=service_address
        )
        assert isinstance(ledger, InMemoryLedgerClient)
        assert ledger.account == service_address

    def test_creates_web3_client(self, service_address: str) -> None:
        settings = Settings(
            _env_file=None,
            ledger_backend="web3",
            ledger_rpc_url="http://127.0.0.1:8545",
            ledger_private_key="0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
            ledger_contract_address="0x5fbdb2315678afecb367f032d93f642f64180aa3",
        )

        ledger = LedgerClientFactory.create(settings)

        assert isinstance(ledger, Web3LedgerClient)
        assert ledger.account == service_address

    def test_web3_without_rpc_url_raises(self) -> None:
        with pytest.raises(ValueError, match="ledger_rpc_url"):
            LedgerClientFactory.create(Settings(_env_file=None, ledger_backend="web3"))

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown ledger backend"):
            LedgerClientFactory.create(Settings(_env_file=None, ledger_backend="fabric"))

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "proofshare"
    db_username: str = "proofshare"
    db_password: str = "secret"

    index_backend: str = "postgres"
    storage_backend: str = "s3"
    ledger_backend: str = "web3"

    s3_bucket: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_key_prefix: str = "uploads/"
    s3_public_base_url: str = ""

    ledger_rpc_url: str = ""
    ledger_private_key: str = ""
    ledger_contract_address: str = ""
    ledger_chain_id: int | None = None
    ledger_confirmation_timeout_seconds: int = 120
    ledger_poll_interval_seconds: float = 2.0
    await_ledger_confirmation: bool = True

    # Comma-separated private keys for submitter identities besides the ledger account.
    signing_private_keys: str = ""

    upload_tmp_dir: str = ""

    reconcile_poll_interval_seconds: int = 30
    reconcile_batch_size: int = 50
    reconcile_confirmation_timeout_seconds: int = 5
    # Checks a receipt may stay pending before it is marked failed.
    reconcile_max_attempts: int = 20

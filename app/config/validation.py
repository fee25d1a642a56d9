from app.config.settings import Settings

_INDEX_BACKENDS = ("postgres", "memory")
_STORAGE_BACKENDS = ("s3", "memory")
_LEDGER_BACKENDS = ("web3", "memory")


def validate_settings(settings: Settings) -> list[str]:
    """Check that the selected backends have the configuration they need.

    Returns:
        A list of human-readable problems. Empty when the settings are usable.
    """
    errors: list[str] = []

    if settings.index_backend.lower() not in _INDEX_BACKENDS:
        errors.append(
            f"Unknown index backend '{settings.index_backend}'. Choose from: {list(_INDEX_BACKENDS)}"
        )

    storage = settings.storage_backend.lower()
    if storage not in _STORAGE_BACKENDS:
        errors.append(
            f"Unknown storage backend '{settings.storage_backend}'. "
            f"Choose from: {list(_STORAGE_BACKENDS)}"
        )
    elif storage == "s3" and not settings.s3_bucket:
        errors.append("s3_bucket is required for storage_backend=s3")

    ledger = settings.ledger_backend.lower()
    if ledger not in _LEDGER_BACKENDS:
        errors.append(
            f"Unknown ledger backend '{settings.ledger_backend}'. "
            f"Choose from: {list(_LEDGER_BACKENDS)}"
        )
    elif ledger == "web3":
        for field in ("ledger_rpc_url", "ledger_private_key", "ledger_contract_address"):
            if not getattr(settings, field):
                errors.append(f"{field} is required for ledger_backend=web3")

    if settings.ledger_confirmation_timeout_seconds < 0:
        errors.append("ledger_confirmation_timeout_seconds must not be negative")
    if settings.reconcile_batch_size < 1:
        errors.append("reconcile_batch_size must be at least 1")
    if settings.reconcile_max_attempts < 1:
        errors.append("reconcile_max_attempts must be at least 1")

    return errors

from dataclasses import dataclass


@dataclass(frozen=True)
class VerificationResult:
    """Ledger view of a digest; computed on demand, never persisted."""

    exists: bool
    owner: str | None = None
    signature: str | None = None

from enum import Enum


class LedgerErrorKind(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"


class LedgerError(Exception):
    """Raised when the ledger refuses or cannot receive a request.

    `duplicate` marks a REJECTED submission whose digest is already registered.
    """

    def __init__(
        self,
        kind: LedgerErrorKind,
        message: str,
        *,
        duplicate: bool = False,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.duplicate = duplicate

    def __str__(self) -> str:
        return f"[{self.kind.value}] {super().__str__()}"


class ContractAbiError(Exception):
    """Raised when the bundled contract ABI cannot be loaded."""

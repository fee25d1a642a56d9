import json
from pathlib import Path
from typing import Any

from app.ledger.exceptions import ContractAbiError

_DEFAULT_ABI_DIR = Path(__file__).parent / "abi"


def load_contract_abi(path: Path | None = None) -> list[dict[str, Any]]:
    """Load the anchoring contract ABI from a JSON file.

    Args:
        path: Path to the ABI file.
              Defaults to the bundled FileStorage.json.

    Returns:
        The ABI as a list of entries.

    Raises:
        ContractAbiError: if the file cannot be read or is not an ABI list.
    """
    if path is None:
        path = _DEFAULT_ABI_DIR / "FileStorage.json"
    try:
        abi = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ContractAbiError(f"Failed to load contract ABI: {exc}") from exc
    if not isinstance(abi, list):
        raise ContractAbiError("Contract ABI must be a JSON list")
    return abi

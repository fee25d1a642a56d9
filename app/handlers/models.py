from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class HandlerResponse:
    """Transport-agnostic response: a status code and a JSON-ready body."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

"""In-process object store.

No network calls. Used for local development (storage_backend=memory) and tests.
"""

import uuid
from pathlib import PurePosixPath
from typing import BinaryIO

from app.storage.base import BaseObjectStore
from app.storage.exceptions import StorageError


class InMemoryObjectStore(BaseObjectStore):
    """Keeps stored objects in a dict keyed by locator."""

    LOCATOR_PREFIX = "memory://objects/"

    def __init__(self) -> None:
        self._objects: dict[str, tuple[str, bytes]] = {}

    async def store(self, name: str, content_type: str, content: BinaryIO) -> str:
        filename = PurePosixPath(name).name or "file"
        locator = f"{self.LOCATOR_PREFIX}{uuid.uuid4().hex}/{filename}"
        self._objects[locator] = (content_type, content.read())
        return locator

    def fetch(self, locator: str) -> bytes:
        """Return the bytes stored under `locator`.

        Raises:
            StorageError: if no object exists at the locator.
        """
        try:
            return self._objects[locator][1]
        except KeyError:
            raise StorageError(f"No object at {locator}") from None

    def content_type(self, locator: str) -> str:
        return self._objects[locator][0]

    def __len__(self) -> int:
        return len(self._objects)

from abc import ABC, abstractmethod
from typing import BinaryIO


class BaseObjectStore(ABC):
    """Contract for all object store adapters."""

    @abstractmethod
    async def store(self, name: str, content_type: str, content: BinaryIO) -> str:
        """Upload bytes as a new public object.

        Every call creates a distinct object, even for identical content.

        Args:
            name: Original file name, used as the last key segment.
            content_type: MIME type recorded on the object.
            content: Readable binary stream positioned at the start.

        Returns:
            Public locator (URL) of the object.

        Raises:
            StorageError: on transport, quota, credential or visibility failure.
        """

from app.database.exceptions import MetadataIndexError


class ValidationError(Exception):
    """Raised when an upload request is missing or contradicts required input."""


class OrphanedObjectError(MetadataIndexError):
    """Raised when bytes were stored but the index write failed.

    The object at `locator` exists remotely with no index record and must be
    reconciled out of band.
    """

    def __init__(self, message: str, *, locator: str, digest: str) -> None:
        super().__init__(message)
        self.locator = locator
        self.digest = digest

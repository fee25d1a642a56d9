class MetadataIndexError(Exception):
    """Raised when the file index cannot be read or written."""


class RecordNotFoundError(MetadataIndexError):
    """Raised when a file record to update does not exist."""

class StorageError(Exception):
    """Raised when bytes cannot be stored and made publicly retrievable."""

    def __init__(self, message: str, *, object_key: str | None = None) -> None:
        super().__init__(message)
        self.object_key = object_key

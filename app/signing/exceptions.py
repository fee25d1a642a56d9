class SigningError(Exception):
    """Raised when a digest cannot be signed or a signature cannot be read."""

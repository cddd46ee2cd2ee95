"""Custom exceptions for structdigest."""


class StructDigestError(Exception):
    """Base exception for all structdigest errors."""

    pass


class SchemaError(StructDigestError):
    """Raised when a record type declares a shape that cannot be canonically encoded."""

    pass


class EncodingError(StructDigestError):
    """Raised when a record value does not match its declared shape."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)

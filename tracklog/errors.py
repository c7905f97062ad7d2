from typing import Optional

class TrackLogError(Exception):
    """
    Base class for errors surfaced to API callers.

    Attributes:
        message (str): Human-readable message returned as the `error` field.
        status_code (int): HTTP status used by the API layer.
        details (str): Underlying error text for server-side failures.
    """
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

class InvalidInput(TrackLogError):
    """Missing or empty required field, or an empty payload after filtering."""
    status_code = 400

class NotFound(TrackLogError):
    """Read of a track that holds no entries."""
    status_code = 404

class StorageCorruption(TrackLogError):
    """A stored entry could not be decoded back into a JSON value."""
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None, key: Optional[str] = None, index: Optional[int] = None):
        super().__init__(message, details)
        self.key = key
        self.index = index

class StoreUnavailable(TrackLogError):
    """Connection or transport failure talking to Valkey."""
    status_code = 500

"""Errors raised by the durable store layer."""


class QuizStoreError(Exception):
    """Base class for durable store failures."""


class StoreUnavailableError(QuizStoreError):
    """Reading from or writing to the durable store failed."""


class CorruptStoreError(QuizStoreError):
    """A stored collection could not be decoded.

    Raised for invalid JSON or records that no longer match the models.
    Callers use it to tell a broken store apart from an empty one.
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored value for {key!r} is corrupt: {reason}")

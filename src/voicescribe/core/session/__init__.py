from .errors import (
    BackendError,
    ErrorKind,
    FailureReason,
    Notice,
    PolishError,
    TranscriptionError,
    is_retryable,
)
from .state import (
    PunctuationStyle,
    Session,
    SessionStatus,
    TranscriptionLanguage,
    TranscriptionMode,
)

__all__ = [
    "BackendError",
    "ErrorKind",
    "FailureReason",
    "Notice",
    "PolishError",
    "TranscriptionError",
    "is_retryable",
    "PunctuationStyle",
    "Session",
    "SessionStatus",
    "TranscriptionLanguage",
    "TranscriptionMode",
]

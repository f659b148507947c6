"""
Error taxonomy for the recording pipeline.

Kinds and reasons are structured data only. Turning them into user-facing
text is the presentation layer's job (see ``voicescribe.ui.messages``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    PERMISSION_DENIED = "permission_denied"
    RECORDING_TOO_SHORT = "recording_too_short"
    NO_NETWORK_CONNECTION = "no_network_connection"
    CREDENTIAL_MISSING = "credential_missing"
    TRANSCRIPTION_FAILED = "transcription_failed"
    POLISH_FAILED = "polish_failed"
    PROCESSING_TIMEOUT = "processing_timeout"


class FailureReason(Enum):
    NETWORK = "network"
    INVALID_RESPONSE = "invalid_response"
    API_REJECTED = "api_rejected"
    MODEL_UNAVAILABLE = "model_unavailable"
    INVALID_AUDIO = "invalid_audio"
    CANCELLED = "cancelled"


RETRYABLE_REASONS = frozenset({FailureReason.NETWORK, FailureReason.INVALID_RESPONSE})


def is_retryable(reason: Optional[FailureReason]) -> bool:
    return reason in RETRYABLE_REASONS


class BackendError(Exception):
    """Raised by a backend when a call cannot produce text."""

    def __init__(self, reason: FailureReason, detail: str = ""):
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reason.value!r}, {self.detail!r})"


class TranscriptionError(BackendError):
    pass


class PolishError(BackendError):
    pass


@dataclass(frozen=True)
class Notice:
    """A user-visible condition raised by the coordinator."""

    kind: ErrorKind
    reason: Optional[FailureReason] = None
    detail: str = ""

    @classmethod
    def from_error(cls, kind: ErrorKind, error: BackendError) -> "Notice":
        return cls(kind=kind, reason=error.reason, detail=error.detail)

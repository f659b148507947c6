"""User-facing text for coordinator notices."""

from typing import Tuple

from ..core.session.errors import ErrorKind, FailureReason, Notice

REASON_TEXT = {
    FailureReason.NETWORK: "Network error",
    FailureReason.INVALID_RESPONSE: "The service returned an invalid response",
    FailureReason.API_REJECTED: "The request was rejected",
    FailureReason.MODEL_UNAVAILABLE: "The speech model is not available",
    FailureReason.INVALID_AUDIO: "The recording could not be read",
    FailureReason.CANCELLED: "Cancelled",
}

TITLES = {
    ErrorKind.PERMISSION_DENIED: "Microphone unavailable",
    ErrorKind.RECORDING_TOO_SHORT: "Recording too short",
    ErrorKind.NO_NETWORK_CONNECTION: "No network connection",
    ErrorKind.CREDENTIAL_MISSING: "API key missing",
    ErrorKind.TRANSCRIPTION_FAILED: "Transcription failed",
    ErrorKind.POLISH_FAILED: "Polish failed",
    ErrorKind.PROCESSING_TIMEOUT: "Processing timeout",
}


def describe_reason(notice: Notice) -> str:
    if notice.reason is None:
        return notice.detail
    text = REASON_TEXT[notice.reason]
    if notice.detail:
        return f"{text}: {notice.detail}"
    return text


def render_notice(notice: Notice) -> Tuple[str, str]:
    """Return ``(title, body)`` for a notice."""
    title = TITLES[notice.kind]

    if notice.kind is ErrorKind.PERMISSION_DENIED:
        body = "Grant microphone access to record."
        if notice.detail:
            body = f"{body} ({notice.detail})"
    elif notice.kind is ErrorKind.RECORDING_TOO_SHORT:
        body = "Hold the hotkey a little longer while speaking."
    elif notice.kind is ErrorKind.NO_NETWORK_CONNECTION:
        body = "Cloud transcription needs an internet connection."
    elif notice.kind is ErrorKind.CREDENTIAL_MISSING:
        body = "Add your OpenAI API key in the settings file."
    elif notice.kind is ErrorKind.TRANSCRIPTION_FAILED:
        body = describe_reason(notice) or "Unknown error"
    elif notice.kind is ErrorKind.POLISH_FAILED:
        body = f"Using original text: {describe_reason(notice) or 'unknown error'}"
    else:
        body = "Processing took too long and was stopped."

    return title, body

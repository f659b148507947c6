"""Collaborator contracts consumed by the session coordinator.

Backends are plain blocking callables; the coordinator runs them on worker
threads through ``TaskRunner`` and receives the outcome on its own serial
context. Nothing here owns session state.
"""

from typing import Optional, Protocol, runtime_checkable

from .errors import Notice
from .state import PunctuationStyle, SessionStatus


@runtime_checkable
class AudioAssetLike(Protocol):
    """A finished recording handed over by the recording source."""

    @property
    def size_bytes(self) -> int: ...

    def delete(self) -> None: ...


@runtime_checkable
class RecordingSource(Protocol):
    def start(self) -> bool:
        """Begin capture. Returns False when no recording can be produced."""

    def stop(self) -> Optional[AudioAssetLike]:
        """End capture and return the finished asset, if any."""


@runtime_checkable
class TranscriptionBackend(Protocol):
    def transcribe(self, asset: AudioAssetLike, language: Optional[str]) -> str:
        """Return the transcript or raise ``TranscriptionError``."""


@runtime_checkable
class PolishBackend(Protocol):
    def polish(self, text: str, prompt: str, style: PunctuationStyle) -> str:
        """Return the polished text or raise ``PolishError``."""


@runtime_checkable
class InputSource(Protocol):
    def restart_monitoring(self) -> None: ...


@runtime_checkable
class PresentationSink(Protocol):
    def set_status(self, status: SessionStatus) -> None: ...

    def paste(self, text: str) -> None: ...

    def notify(self, notice: Notice) -> None: ...

    def open_settings(self) -> None: ...

"""
Session coordinator.

Drives one push-to-talk session at a time through
record -> validate -> transcribe -> polish -> normalize -> paste.

All state lives on the Qt main thread. Backend calls run on the task runner's
worker pool and their outcomes come back through the runner's serial
executor, so every method below executes on the same thread. Every terminal
path deletes the audio asset once, disarms the processing timeout and
returns to IDLE.
"""

from functools import partial
from typing import Callable, Mapping, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ...utils.logger import get_logger
from ..settings.config import (
    HOTKEY_RESTART_DELAY_MS,
    MIN_RECORDING_BYTES,
    PROCESSING_TIMEOUT_MS,
)
from ..transcript_processor.llm_processor import resolve_prompt
from ..transcript_processor.normalizer import TextNormalizer
from ..transcript_processor.script_converter import ScriptConverter
from ..transcript_processor.text_cleaner import basic_cleanup
from .errors import (
    BackendError,
    ErrorKind,
    FailureReason,
    Notice,
    PolishError,
    TranscriptionError,
    is_retryable,
)
from .ports import (
    InputSource,
    PolishBackend,
    PresentationSink,
    RecordingSource,
    TranscriptionBackend,
)
from .state import (
    PunctuationStyle,
    Session,
    SessionStatus,
    TranscriptionMode,
)
from .tasks import BackendCall, CallOutcome, TaskRunner

logger = get_logger(__name__)

# Polish output in Cloud mode is always requested in this style; the user's
# style is applied afterwards by the normalizer.
CLOUD_POLISH_STYLE = PunctuationStyle.FULL_WIDTH


class SessionCoordinator(QObject):
    """
    Single-flight state machine for recording sessions.

    Signals:
        status_changed: Emitted with the new ``SessionStatus`` on every transition
        last_transcription_changed: Emitted with the text handed to the paste sink
    """

    status_changed = Signal(object)
    last_transcription_changed = Signal(str)

    def __init__(
        self,
        recorder: RecordingSource,
        transcription_backends: Mapping[TranscriptionMode, TranscriptionBackend],
        polish_backend: PolishBackend,
        sink: PresentationSink,
        input_source: InputSource,
        settings_provider: Callable,
        network_probe: Callable[[], bool],
        normalizer: Optional[TextNormalizer] = None,
        script_converter: Optional[ScriptConverter] = None,
        task_runner: Optional[TaskRunner] = None,
        processing_timeout_ms: int = PROCESSING_TIMEOUT_MS,
        restart_delay_ms: int = HOTKEY_RESTART_DELAY_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)

        self._recorder = recorder
        self._backends = dict(transcription_backends)
        self._polish_backend = polish_backend
        self._sink = sink
        self._input = input_source
        self._settings_provider = settings_provider
        self._network_probe = network_probe
        self._normalizer = normalizer or TextNormalizer()
        self._script_converter = script_converter or ScriptConverter()
        self._tasks = task_runner or TaskRunner()

        self._status = SessionStatus.IDLE
        self._session: Optional[Session] = None
        self._last_transcription = ""
        self._recording_failure_reported = False

        self._timeout_timer = QTimer(self)
        self._timeout_timer.setSingleShot(True)
        self._timeout_timer.setInterval(processing_timeout_ms)
        self._timeout_timer.timeout.connect(self._on_timeout)

        self._restart_timer = QTimer(self)
        self._restart_timer.setSingleShot(True)
        self._restart_timer.setInterval(restart_delay_ms)
        self._restart_timer.timeout.connect(self._restart_monitoring)

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def last_transcription(self) -> str:
        return self._last_transcription

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def timeout_armed(self) -> bool:
        return self._timeout_timer.isActive()

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def handle_press(self) -> None:
        if self._status is not SessionStatus.IDLE:
            logger.debug(f"Ignoring hotkey press while {self._status.value}")
            return

        settings = self._settings_provider()
        session = Session(
            mode=settings.transcription_mode,
            language=settings.transcription_language,
            polish_enabled=settings.enable_ai_polish,
        )
        self._session = session
        self._set_status(SessionStatus.RECORDING)

        if not self._recorder.start():
            error = getattr(self._recorder, "last_error", None) or ""
            logger.error(f"Recording did not start: {error or 'no recording produced'}")
            if not self._recording_failure_reported:
                self._recording_failure_reported = True
                self._notify(Notice(ErrorKind.PERMISSION_DENIED, detail=error))
            self._reset()
            return

        logger.info(
            f"Session {session.id} recording "
            f"(mode={session.mode.value}, language={session.language.value})"
        )

    def handle_release(self) -> None:
        session = self._session
        if self._status is not SessionStatus.RECORDING or session is None:
            logger.debug(f"Ignoring hotkey release while {self._status.value}")
            return

        asset = self._recorder.stop()
        self._set_status(SessionStatus.PROCESSING)

        if asset is None:
            logger.warning(f"Session {session.id}: no audio asset produced")
            self._reset()
            return

        session.audio_asset = asset
        size = asset.size_bytes
        if size < MIN_RECORDING_BYTES:
            logger.info(f"Session {session.id}: recording too short ({size} bytes)")
            self._release_asset(session)
            self._notify(Notice(ErrorKind.RECORDING_TOO_SHORT))
            self._reset()
            return

        logger.info(f"Session {session.id}: captured {size} bytes, processing")
        self._timeout_timer.start()
        self._dispatch_transcription(session)

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    def _dispatch_transcription(self, session: Session) -> None:
        if session.mode is TranscriptionMode.CLOUD:
            if not self._network_probe():
                self._fail_dispatch(session, Notice(ErrorKind.NO_NETWORK_CONNECTION))
                return
            if not self._settings_provider().has_credential():
                self._fail_dispatch(
                    session, Notice(ErrorKind.CREDENTIAL_MISSING), open_settings=True
                )
                return

        backend = self._backends.get(session.mode)
        if backend is None:
            self._fail_dispatch(
                session,
                Notice(
                    ErrorKind.TRANSCRIPTION_FAILED,
                    FailureReason.MODEL_UNAVAILABLE,
                    f"No backend for {session.mode.value}",
                ),
            )
            return

        try:
            session.pending_call = self._tasks.submit(
                f"transcription[{session.mode.value}] #{session.id}",
                backend.transcribe,
                session.audio_asset,
                session.language_code,
                on_done=partial(self._on_transcription_done, session.id),
                error_type=TranscriptionError,
            )
        except RuntimeError as e:
            logger.exception(f"Session {session.id}: transcription dispatch failed")
            self._fail_dispatch(
                session,
                Notice(ErrorKind.TRANSCRIPTION_FAILED, FailureReason.API_REJECTED, str(e)),
            )

    def _fail_dispatch(
        self, session: Session, notice: Notice, open_settings: bool = False
    ) -> None:
        logger.warning(f"Session {session.id}: dispatch failed ({notice.kind.value})")
        self._timeout_timer.stop()
        self._release_asset(session)
        self._notify(notice)
        if open_settings:
            self._sink.open_settings()
        self._restart_monitoring()
        self._reset()

    def _on_transcription_done(
        self, session_id: int, call: BackendCall, outcome: CallOutcome
    ) -> None:
        session = self._claim(session_id, call)
        if session is None:
            return

        if outcome.cancelled:
            self._abandon(session)
            return

        if not outcome.ok:
            error = outcome.error
            logger.error(f"Session {session_id}: transcription failed: {error!r}")
            self._timeout_timer.stop()
            self._notify(Notice.from_error(ErrorKind.TRANSCRIPTION_FAILED, error))
            self._release_asset(session)
            self._restart_timer.start()
            self._reset()
            return

        settings = self._settings_provider()
        text = self._script_converter.convert(outcome.value, settings.chinese_script)
        self._release_asset(session)
        logger.info(f"Session {session_id}: transcribed {len(text)} chars")

        if not session.polish_enabled:
            self._finalize(session, text)
            return

        if session.mode.is_offline and not self._network_probe():
            logger.info(f"Session {session_id}: offline, using basic cleanup")
            self._finalize(session, basic_cleanup(text))
            return

        if not settings.has_credential():
            logger.info(f"Session {session_id}: no credential, skipping polish")
            self._finalize(session, text)
            return

        prompt = resolve_prompt(settings.custom_system_prompt, settings.polish_template)
        if session.mode is TranscriptionMode.CLOUD:
            style = CLOUD_POLISH_STYLE
        else:
            style = settings.punctuation_style
        self._dispatch_polish(session, text, prompt, style, attempt=1)

    # ------------------------------------------------------------------
    # Polish
    # ------------------------------------------------------------------

    def _dispatch_polish(
        self,
        session: Session,
        text: str,
        prompt: str,
        style: PunctuationStyle,
        attempt: int,
    ) -> None:
        try:
            session.pending_call = self._tasks.submit(
                f"polish #{session.id} attempt {attempt}",
                self._polish_backend.polish,
                text,
                prompt,
                style,
                on_done=partial(
                    self._on_polish_done, session.id, text, prompt, style, attempt
                ),
                error_type=PolishError,
            )
        except RuntimeError as e:
            logger.exception(f"Session {session.id}: polish dispatch failed")
            self._polish_fallback(
                session, text, PolishError(FailureReason.API_REJECTED, str(e))
            )

    def _on_polish_done(
        self,
        session_id: int,
        text: str,
        prompt: str,
        style: PunctuationStyle,
        attempt: int,
        call: BackendCall,
        outcome: CallOutcome,
    ) -> None:
        session = self._claim(session_id, call)
        if session is None:
            return

        if outcome.cancelled:
            self._abandon(session)
            return

        if outcome.ok:
            self._finalize(session, outcome.value)
            return

        error = outcome.error
        if attempt == 1 and is_retryable(error.reason):
            logger.warning(
                f"Session {session_id}: polish failed ({error.reason.value}), retrying once"
            )
            self._dispatch_polish(session, text, prompt, style, attempt=2)
            return

        self._polish_fallback(session, text, error)

    def _polish_fallback(self, session: Session, text: str, error: BackendError) -> None:
        logger.warning(f"Session {session.id}: polish failed, using original text: {error!r}")
        self._notify(Notice.from_error(ErrorKind.POLISH_FAILED, error))
        self._finalize(session, text)

    # ------------------------------------------------------------------
    # Terminal paths
    # ------------------------------------------------------------------

    def _finalize(self, session: Session, text: str) -> None:
        self._timeout_timer.stop()
        self._release_asset(session)

        settings = self._settings_provider()
        apply_terms = session.mode.is_offline and not session.polish_enabled
        result = self._normalizer.normalize(text, settings.punctuation_style, apply_terms)

        self._last_transcription = result
        self.last_transcription_changed.emit(result)

        if result:
            self._sink.paste(result)
        else:
            logger.info(f"Session {session.id}: nothing to paste")

        logger.info(f"Session {session.id} complete ({len(result)} chars)")
        self._restart_timer.start()
        self._reset()

    def _on_timeout(self) -> None:
        session = self._session
        if session is None or self._status is not SessionStatus.PROCESSING:
            return

        logger.warning(f"Session {session.id}: processing timed out")
        self._notify(Notice(ErrorKind.PROCESSING_TIMEOUT))

        call, session.pending_call = session.pending_call, None
        if call is not None:
            call.cancel()

        self._restart_monitoring()
        self._release_asset(session)
        self._reset()

    def _abandon(self, session: Session) -> None:
        logger.info(f"Session {session.id}: backend call cancelled")
        self._timeout_timer.stop()
        self._release_asset(session)
        self._restart_timer.start()
        self._reset()

    # ------------------------------------------------------------------
    # Cancellation and shutdown
    # ------------------------------------------------------------------

    def cancel_all(self) -> int:
        """Cancel in-flight backend calls. State changes follow their delivery."""
        return self._tasks.cancel_all()

    def shutdown(self) -> None:
        self.cancel_all()
        self._timeout_timer.stop()
        self._restart_timer.stop()

        session = self._session
        if session is None:
            return

        if self._status is SessionStatus.RECORDING:
            session.audio_asset = self._recorder.stop()
        session.pending_call = None
        self._release_asset(session)
        self._reset()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _claim(self, session_id: int, call: BackendCall) -> Optional[Session]:
        session = self._session
        if (
            session is None
            or session.id != session_id
            or session.pending_call is not call
            or self._status is not SessionStatus.PROCESSING
        ):
            logger.debug(f"Discarding stale result from {call.label}")
            return None

        session.pending_call = None
        return session

    def _release_asset(self, session: Session) -> None:
        asset, session.audio_asset = session.audio_asset, None
        if asset is not None:
            asset.delete()

    def _restart_monitoring(self) -> None:
        self._restart_timer.stop()
        self._input.restart_monitoring()

    def _notify(self, notice: Notice) -> None:
        self._sink.notify(notice)

    def _reset(self) -> None:
        self._session = None
        self._set_status(SessionStatus.IDLE)

    def _set_status(self, status: SessionStatus) -> None:
        if status is self._status:
            return
        logger.debug(f"Status {self._status.value} -> {status.value}")
        self._status = status
        self._sink.set_status(status)
        self.status_changed.emit(status)

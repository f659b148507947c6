"""Application runtime."""

import signal
import sys
from typing import Optional

from PySide6.QtCore import QObject, QTimer
from PySide6.QtWidgets import QApplication

from voicescribe import __app_name__, __version__
from voicescribe.core.asr import create_transcription_backends
from voicescribe.core.audio import AudioRecorder
from voicescribe.core.input import HotkeyListener
from voicescribe.core.output import TextOutputController
from voicescribe.core.session.coordinator import SessionCoordinator
from voicescribe.core.session.tasks import TaskRunner
from voicescribe.core.settings import Settings, get_settings, reload_settings
from voicescribe.core.transcript_processor import (
    LLMProcessor,
    ScriptConverter,
    TextNormalizer,
)
from voicescribe.ui import SystemTray, TrayPresenter
from voicescribe.utils.logger import get_logger, shutdown_logging
from voicescribe.utils.network import is_online

logger = get_logger(__name__)

HOTKEY_START_DELAY_MS = 500


class VoiceScribeApp(QObject):
    """Builds every service once and wires them together."""

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()

        self._settings = settings or get_settings()

        self._tray = SystemTray(__app_name__)
        self._recorder = AudioRecorder(
            sample_rate=self._settings.sample_rate,
            device=self._settings.input_device,
        )
        self._hotkey_listener = HotkeyListener(self._settings.hotkey)
        self._text_output = TextOutputController()
        self._presenter = TrayPresenter(
            self._tray, self._text_output, self._current_settings
        )
        self._task_runner = TaskRunner()
        self._polish_backend = LLMProcessor(
            model=self._settings.llm_model,
            api_key_provider=lambda: self._current_settings().api_key,
        )

        self._coordinator = SessionCoordinator(
            recorder=self._recorder,
            transcription_backends=create_transcription_backends(
                self._current_settings
            ),
            polish_backend=self._polish_backend,
            sink=self._presenter,
            input_source=self._hotkey_listener,
            settings_provider=self._current_settings,
            network_probe=is_online,
            normalizer=TextNormalizer(),
            script_converter=ScriptConverter(self._settings.chinese_script),
            task_runner=self._task_runner,
            parent=self,
        )

        self._hotkey_listener.hotkey_pressed.connect(self._coordinator.handle_press)
        self._hotkey_listener.hotkey_released.connect(self._coordinator.handle_release)
        self._coordinator.last_transcription_changed.connect(
            self._tray.set_last_transcription
        )
        self._tray.copy_last_action.triggered.connect(self._copy_last_transcription)
        self._tray.settings_requested.connect(self._show_settings)
        self._tray.reload_requested.connect(self.reload)
        self._tray.quit_requested.connect(self._quit)

    @property
    def coordinator(self) -> SessionCoordinator:
        return self._coordinator

    def _current_settings(self) -> Settings:
        return self._settings

    def _show_settings(self) -> None:
        self._presenter.open_settings()

    def reload(self) -> None:
        """Pick up edits made to the settings file."""
        self._settings = reload_settings()
        self._recorder.sample_rate = self._settings.sample_rate
        self._recorder.device = self._settings.input_device
        self._polish_backend.model = self._settings.llm_model
        self._hotkey_listener.update_hotkey(self._settings.hotkey)
        logger.info(
            f"Settings reloaded: mode={self._settings.transcription_mode.value}, "
            f"language={self._settings.transcription_language.value}"
        )

    def _copy_last_transcription(self) -> None:
        text = self._coordinator.last_transcription
        if text:
            QApplication.clipboard().setText(text)

    def _quit(self) -> None:
        logger.info("Shutting down application")
        self._coordinator.shutdown()
        self._hotkey_listener.stop()
        self._task_runner.wait_for_done(2000)
        self._tray.hide()
        QApplication.quit()
        logger.info("Application shutdown complete")
        shutdown_logging()

    def run(self) -> None:
        logger.info(f"Starting {__app_name__} v{__version__}")
        logger.info(
            f"Settings: mode={self._settings.transcription_mode.value}, "
            f"polish={self._settings.enable_ai_polish}, "
            f"sample_rate={self._settings.sample_rate}"
        )

        self._tray.show()
        QTimer.singleShot(HOTKEY_START_DELAY_MS, self._hotkey_listener.start)

        logger.info("Application initialization complete")


def main():
    app = QApplication(sys.argv)
    app.setApplicationName(__app_name__)
    app.setQuitOnLastWindowClosed(False)
    signal.signal(signal.SIGINT, lambda *args: QApplication.quit())

    voicescribe_app = VoiceScribeApp()
    voicescribe_app.run()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()

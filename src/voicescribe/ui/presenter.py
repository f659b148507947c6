from typing import Callable, Optional

from ..core.output import TextOutputController
from ..core.session.errors import Notice
from ..core.session.state import SessionStatus
from ..core.settings import Settings, get_config_dir
from ..utils.logger import get_logger
from ..utils.platform import reveal_path
from .messages import render_notice
from .tray import SystemTray

logger = get_logger(__name__)


class TrayPresenter:
    """Presentation sink backed by the system tray and the paste controller."""

    def __init__(
        self,
        tray: SystemTray,
        output: TextOutputController,
        settings_provider: Callable[[], Settings],
        open_path: Optional[Callable] = None,
    ):
        self._tray = tray
        self._output = output
        self._settings_provider = settings_provider
        self._open_path = open_path or reveal_path

    def set_status(self, status: SessionStatus) -> None:
        self._tray.set_status(status)

    def notify(self, notice: Notice) -> None:
        title, body = render_notice(notice)
        logger.info(f"Notice: {title}: {body}")
        self._tray.show_message(title, body)

    def paste(self, text: str) -> None:
        settings = self._settings_provider()
        self._tray.set_last_transcription(text)

        if not settings.auto_paste:
            self._tray.show_message("Transcription", text, error=False)
            return

        self._output.paste(text, restore_clipboard=settings.restore_clipboard)

    def open_settings(self) -> None:
        path = get_config_dir() / "settings.json"
        if not path.exists():
            self._settings_provider().save()
        logger.info(f"Opening settings at {path}")
        self._open_path(path)

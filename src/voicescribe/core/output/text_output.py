"""
Paste-at-cursor output.

Copies text to the system clipboard, sends the platform paste shortcut and
optionally puts the previous clipboard contents back.
"""

import subprocess
import time
from typing import List, Optional, Tuple

from ...utils.logger import get_logger
from ...utils.platform import get_platform, get_subprocess_kwargs

logger = get_logger(__name__)

CLIPBOARD_COMMANDS = {
    "linux": (["xclip", "-selection", "clipboard"], ["xclip", "-selection", "clipboard", "-o"]),
    "macos": (["pbcopy"], ["pbpaste"]),
    "windows": (["clip"], ["powershell", "-command", "Get-Clipboard"]),
}


class TextOutputController:

    def __init__(self, keyboard=None):
        if keyboard is None:
            from pynput.keyboard import Controller

            keyboard = Controller()

        self._keyboard = keyboard
        self._platform = get_platform()

    def paste(self, text: str, restore_clipboard: bool = True) -> None:
        if not text:
            return

        logger.debug(
            f"Pasting text via clipboard: '{text[:50]}{'...' if len(text) > 50 else ''}'"
        )

        commands = self._clipboard_commands()
        if commands is None:
            logger.warning(
                f"Unknown platform {self._platform}, falling back to direct typing"
            )
            self._keyboard.type(text)
            return

        copy_cmd, paste_cmd = commands
        old_clipboard = self._get_clipboard(paste_cmd) if restore_clipboard else ""

        if not self._set_clipboard(copy_cmd, text):
            self._keyboard.type(text)
            return

        time.sleep(0.05)

        from pynput.keyboard import Key

        paste_key = Key.cmd if self._platform == "macos" else Key.ctrl
        with self._keyboard.pressed(paste_key):
            self._keyboard.tap("v")

        time.sleep(0.1)

        if restore_clipboard and old_clipboard:
            self._set_clipboard(copy_cmd, old_clipboard)

    def _clipboard_commands(self) -> Optional[Tuple[List[str], List[str]]]:
        return CLIPBOARD_COMMANDS.get(self._platform)

    def _get_clipboard(self, paste_cmd: list) -> str:
        try:
            result = subprocess.run(
                paste_cmd,
                **get_subprocess_kwargs(capture_output=True, text=True, timeout=1),
            )
            return result.stdout if result.returncode == 0 else ""
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return ""

    def _set_clipboard(self, copy_cmd: list, text: str) -> bool:
        try:
            subprocess.run(
                copy_cmd,
                **get_subprocess_kwargs(input=text, text=True, timeout=1, check=True),
            )
            return True
        except (
            subprocess.TimeoutExpired,
            FileNotFoundError,
            subprocess.CalledProcessError,
        ) as e:
            logger.error(f"Failed to set clipboard: {e}")
            return False

"""
Global push-to-talk hotkey.

Uses pynput on every platform. Key events arrive on pynput's own thread and
are forwarded as Qt signals, so connected slots run on the receiver's thread.
"""

from typing import Optional, Set

from PySide6.QtCore import QObject, Signal

from ...utils.logger import get_logger
from ..settings.settings import HotkeyConfig

logger = get_logger(__name__)

MODIFIER_KEYS = {
    "ctrl": ("ctrl", "ctrl_l", "ctrl_r"),
    "alt": ("alt", "alt_l", "alt_r", "alt_gr"),
    "shift": ("shift", "shift_l", "shift_r"),
    "cmd": ("cmd", "cmd_l", "cmd_r"),
    "meta": ("cmd", "cmd_l", "cmd_r"),
}


class HotkeyListener(QObject):
    """
    Listens for the configured hotkey combination.

    Signals:
        hotkey_pressed: Emitted when the full combination goes down
        hotkey_released: Emitted when any part of it is released
    """

    hotkey_pressed = Signal()
    hotkey_released = Signal()

    def __init__(self, hotkey: HotkeyConfig, parent: Optional[QObject] = None):
        super().__init__(parent)

        self._is_hotkey_active = False
        self._hotkey = hotkey
        self._impl = _PynputHotkeyListenerImpl(self, hotkey.key, set(hotkey.modifiers))

    @property
    def hotkey(self) -> HotkeyConfig:
        return self._hotkey

    @property
    def is_running(self) -> bool:
        return self._impl.is_running

    def update_hotkey(self, hotkey: HotkeyConfig) -> None:
        self._hotkey = hotkey
        self._impl.update_config(hotkey.key, set(hotkey.modifiers))
        logger.info(f"Hotkey changed to {hotkey.to_display_string()}")

    def start(self) -> None:
        logger.info(f"Starting hotkey listener: {self._hotkey.to_display_string()}")
        self._impl.start()

    def stop(self) -> None:
        self._impl.stop()
        self._is_hotkey_active = False

    def restart_monitoring(self) -> None:
        """Restart the OS listener with a clean pressed-key state."""
        logger.debug("Restarting hotkey monitoring")
        self._impl.stop()
        self._impl.reset()
        self._is_hotkey_active = False
        self._impl.start()

    def _on_hotkey_pressed(self) -> None:
        if not self._is_hotkey_active:
            self._is_hotkey_active = True
            self.hotkey_pressed.emit()

    def _on_hotkey_released(self) -> None:
        if self._is_hotkey_active:
            self._is_hotkey_active = False
            self.hotkey_released.emit()


class _PynputHotkeyListenerImpl:

    def __init__(self, listener: HotkeyListener, key_name: str, modifiers: Set[str]):
        self._listener = listener
        self._keyboard_listener = None
        self._pressed_keys: set = set()

        self._required_modifier_types: Set[str] = modifiers
        self._trigger_key = self._resolve_trigger_key(key_name)

    @property
    def is_running(self) -> bool:
        return self._keyboard_listener is not None

    @staticmethod
    def _resolve_trigger_key(key_name: str):
        from pynput import keyboard

        try:
            return getattr(keyboard.Key, key_name)
        except AttributeError:
            return keyboard.KeyCode.from_char(key_name)

    def update_config(self, key_name: str, modifiers: Set[str]) -> None:
        self._required_modifier_types = modifiers
        self._trigger_key = self._resolve_trigger_key(key_name)
        self.reset()

    def reset(self) -> None:
        self._pressed_keys.clear()

    def _modifier_pressed(self, mod_type: str) -> bool:
        from pynput import keyboard

        for name in MODIFIER_KEYS.get(mod_type, ()):
            key = getattr(keyboard.Key, name, None)
            if key is not None and key in self._pressed_keys:
                return True
        return False

    def _check_hotkey(self) -> bool:
        if self._trigger_key not in self._pressed_keys:
            return False

        return all(
            self._modifier_pressed(mod_type)
            for mod_type in self._required_modifier_types
        )

    def _on_press(self, key) -> None:
        self._pressed_keys.add(key)

        if self._check_hotkey():
            self._listener._on_hotkey_pressed()

    def _on_release(self, key) -> None:
        self._pressed_keys.discard(key)

        if not self._check_hotkey():
            self._listener._on_hotkey_released()

    def start(self) -> None:
        from pynput import keyboard

        if self._keyboard_listener is not None:
            return

        self._keyboard_listener = keyboard.Listener(
            on_press=self._on_press, on_release=self._on_release
        )
        self._keyboard_listener.start()

        if hasattr(self._keyboard_listener, "IS_TRUSTED"):
            logger.info(
                f"Keyboard listener IS_TRUSTED: {self._keyboard_listener.IS_TRUSTED}"
            )
            if not self._keyboard_listener.IS_TRUSTED:
                logger.warning(
                    "Hotkey listener is NOT TRUSTED. Accessibility permissions not granted."
                )

    def stop(self) -> None:
        if self._keyboard_listener:
            self._keyboard_listener.stop()
            self._keyboard_listener = None

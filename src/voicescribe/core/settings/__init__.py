from .settings import (
    CHINESE_SCRIPTS,
    HotkeyConfig,
    Settings,
    get_config_dir,
    get_settings,
    reload_settings,
)

__all__ = [
    "CHINESE_SCRIPTS",
    "HotkeyConfig",
    "Settings",
    "get_config_dir",
    "get_settings",
    "reload_settings",
]

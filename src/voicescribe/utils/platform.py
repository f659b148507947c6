"""Platform-specific utilities for cross-platform compatibility."""

import platform
import subprocess
import sys
from pathlib import Path

from .logger import get_logger

logger = get_logger(__name__)


def get_platform() -> str:
    system = platform.system()
    if system == "Darwin":
        return "macos"
    return system.lower()


def get_subprocess_kwargs(**kwargs) -> dict:
    """Extra ``subprocess.run`` arguments so helper commands never flash a console window."""
    if sys.platform == "win32":
        kwargs.setdefault("creationflags", subprocess.CREATE_NO_WINDOW)
    return kwargs


def reveal_path(path: Path) -> bool:
    """Open ``path`` in the platform file manager or default editor."""
    system = get_platform()

    if system == "macos":
        cmd = ["open", str(path)]
    elif system == "windows":
        cmd = ["explorer", str(path)]
    else:
        cmd = ["xdg-open", str(path)]

    try:
        subprocess.Popen(cmd, **get_subprocess_kwargs())
        return True
    except OSError as e:
        logger.error(f"Failed to open {path}: {e}")
        return False

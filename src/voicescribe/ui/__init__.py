from .messages import render_notice
from .presenter import TrayPresenter
from .tray import SystemTray

__all__ = ["render_notice", "TrayPresenter", "SystemTray"]

"""
Pytest configuration for Qt-based tests.

Provides fixtures for proper Qt object cleanup between tests to prevent segfaults.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication


@pytest.fixture(autouse=True)
def cleanup_qt_objects(qtbot, request):
    """
    Auto-cleanup fixture that runs after each test to ensure Qt objects are
    properly destroyed before the next test starts.
    """
    yield

    app = QApplication.instance()
    if app:
        app.processEvents()


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Redirect settings persistence into a temporary directory."""
    directory = tmp_path / "config"
    directory.mkdir()
    monkeypatch.setattr(
        "voicescribe.core.settings.settings.get_config_dir", lambda: directory
    )
    return directory

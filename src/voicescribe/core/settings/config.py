"""
Centralized application configuration.

Edit the variables below to configure development settings.
"""

import logging

# =============================================================================
# DEVELOPMENT SETTINGS - Edit these for local development
# =============================================================================
LOG_LEVEL = "DEBUG"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_TO_CONSOLE = True  # Set to True to output logs to terminal
# =============================================================================

# =============================================================================
# SESSION SETTINGS
# =============================================================================
MIN_RECORDING_BYTES = 1024  # Smaller recordings are rejected as too short
PROCESSING_TIMEOUT_MS = 60_000  # Watchdog for transcription + polish
HOTKEY_RESTART_DELAY_MS = 1_000  # Lets the trailing key release pass first
# =============================================================================


def get_log_level() -> int:
    """Get the logging level as an integer."""
    return getattr(logging, LOG_LEVEL.upper(), logging.INFO)

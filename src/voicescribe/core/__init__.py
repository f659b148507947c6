# Core module - Business logic

"""
Core functionality for VoiceScribe.
Contains settings, audio recording, transcription backends, text processing,
hotkey listener, and the session coordinator that drives them.
"""

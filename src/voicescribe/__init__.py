# VoiceScribe - Push-to-Talk Dictation

"""
Menu-bar push-to-talk dictation utility.
Records while a global hotkey is held, transcribes with a cloud or offline
speech model, optionally polishes the text with an LLM, and pastes it at the cursor.
"""

__version__ = "0.1.0"
__app_name__ = "VoiceScribe"

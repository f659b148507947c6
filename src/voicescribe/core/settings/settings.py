"""
Settings management with JSON persistence.

Handles loading, saving, and validating application settings.
Uses platformdirs for cross-platform directory resolution.
"""

import json
import os
from pathlib import Path
from typing import Optional

from platformdirs import user_config_path
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...utils.logger import get_logger
from ..session.state import PunctuationStyle, TranscriptionLanguage, TranscriptionMode

logger = get_logger(__name__)

APP_NAME = "voicescribe"

CHINESE_SCRIPTS = ("traditional", "simplified", "none")


def get_config_dir() -> Path:
    return user_config_path(APP_NAME, ensure_exists=True)


class HotkeyConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=False)

    modifiers: list[str] = Field(default_factory=lambda: ["ctrl"])
    key: str = "space"

    @field_validator("modifiers")
    @classmethod
    def modifiers_not_empty(cls, v):
        if not v or not all(isinstance(m, str) and m.strip() for m in v):
            raise ValueError("modifiers must be a non-empty list of non-empty strings")
        return v

    @field_validator("key")
    @classmethod
    def key_not_empty(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("key must be a non-empty string")
        return v

    def to_display_string(self) -> str:
        parts = [mod.capitalize() for mod in self.modifiers]
        parts.append(self.key.capitalize())
        return " + ".join(parts)


class Settings(BaseModel):
    model_config = ConfigDict(validate_assignment=False)

    transcription_mode: TranscriptionMode = TranscriptionMode.CLOUD
    transcription_language: TranscriptionLanguage = TranscriptionLanguage.AUTO
    punctuation_style: PunctuationStyle = PunctuationStyle.FULL_WIDTH
    chinese_script: str = "traditional"

    enable_ai_polish: bool = False
    custom_system_prompt: Optional[str] = None
    polish_template: str = "general"

    auto_paste: bool = True
    restore_clipboard: bool = True

    hotkey: HotkeyConfig = Field(default_factory=HotkeyConfig)

    openai_api_key: Optional[str] = None
    llm_model: str = "gpt-5-mini"
    transcription_model: str = "whisper-1"
    whisper_model_id: str = "sherpa-onnx-whisper-small"
    sense_voice_model_id: str = (
        "sherpa-onnx-sense-voice-zh-en-ja-ko-yue-2024-07-17"
    )

    sample_rate: int = Field(default=16000, ge=8000, le=192000)
    input_device: Optional[str] = None

    @field_validator("chinese_script")
    @classmethod
    def chinese_script_known(cls, v):
        if v not in CHINESE_SCRIPTS:
            raise ValueError(f"chinese_script must be one of {CHINESE_SCRIPTS}")
        return v

    @field_validator("llm_model", "transcription_model")
    @classmethod
    def model_not_empty(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("model name must be a non-empty string")
        return v

    def has_credential(self) -> bool:
        if self.openai_api_key and self.openai_api_key.strip():
            return True
        return bool(os.environ.get("OPENAI_API_KEY", "").strip())

    @property
    def api_key(self) -> Optional[str]:
        if self.openai_api_key and self.openai_api_key.strip():
            return self.openai_api_key.strip()
        return os.environ.get("OPENAI_API_KEY") or None

    @classmethod
    def load(cls) -> "Settings":
        config_file = get_config_dir() / "settings.json"

        if not config_file.exists():
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(
                f"Could not load settings: {e}. Using defaults.", exc_info=True
            )
            return cls()

        if not isinstance(data, dict):
            logger.warning("Settings file is not a JSON object. Using defaults.")
            return cls()

        # Filter to valid keys only
        valid_keys = cls.model_fields.keys()
        filtered_data = {k: v for k, v in data.items() if k in valid_keys}

        return cls._load_with_fallbacks(filtered_data)

    @classmethod
    def _load_with_fallbacks(cls, data: dict) -> "Settings":
        """Load settings with field-level fallback to defaults on validation errors."""
        defaults = cls()
        default_data = defaults.model_dump()
        result_data = {}

        for field_name in cls.model_fields:
            if field_name not in data:
                continue
            try:
                cls.model_validate({**default_data, field_name: data[field_name]})
                result_data[field_name] = data[field_name]
            except ValidationError:
                logger.warning(
                    f"Invalid {field_name} {data[field_name]!r}, "
                    f"resetting to {getattr(defaults, field_name)!r}"
                )

        return cls.model_validate(result_data)

    def save(self) -> None:
        config_file = get_config_dir() / "settings.json"

        data = self.model_dump(mode="json")

        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings.load()
    return _settings_instance


def reload_settings() -> Settings:
    global _settings_instance
    _settings_instance = Settings.load()
    return _settings_instance

"""
Session data model.

A Session is the unit of work for one press-and-release cycle. It lives only
in memory and is discarded when the coordinator returns to IDLE.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .ports import AudioAssetLike
    from .tasks import BackendCall


class SessionStatus(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"


class TranscriptionMode(str, Enum):
    CLOUD = "cloud"
    WHISPER_LOCAL = "whisper_local"
    SENSE_VOICE = "sense_voice"

    @property
    def is_offline(self) -> bool:
        return self is not TranscriptionMode.CLOUD


class TranscriptionLanguage(str, Enum):
    AUTO = "auto"
    ZH = "zh"
    EN = "en"
    JA = "ja"
    KO = "ko"

    @property
    def language_code(self) -> Optional[str]:
        if self is TranscriptionLanguage.AUTO:
            return None
        return self.value


class PunctuationStyle(str, Enum):
    FULL_WIDTH = "full_width"
    HALF_WIDTH = "half_width"
    SPACES = "spaces"


_session_ids = itertools.count(1)


@dataclass
class Session:
    """
    State owned by the coordinator for a single recording session.

    ``mode`` and ``language`` are captured at hotkey press and never change.
    ``audio_asset`` is cleared as soon as the asset is deleted, and
    ``pending_call`` holds the only in-flight backend request, if any.
    """

    mode: TranscriptionMode
    language: TranscriptionLanguage
    id: int = field(default_factory=lambda: next(_session_ids))
    audio_asset: Optional["AudioAssetLike"] = None
    pending_call: Optional["BackendCall"] = None
    polish_enabled: bool = False

    @property
    def language_code(self) -> Optional[str]:
        return self.language.language_code

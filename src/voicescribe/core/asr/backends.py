import os
import threading
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional

import litellm
import numpy as np
from scipy.io import wavfile

from ...utils.logger import get_logger
from ...utils.provider_errors import classify_provider_error
from ..session.errors import FailureReason, TranscriptionError
from ..session.state import TranscriptionMode
from .file_utils import (
    find_file_by_suffix,
    find_file_exact,
    is_valid_sense_voice_model,
    is_valid_whisper_model,
    resolve_model_dir,
)

if TYPE_CHECKING:
    from ..settings import Settings

logger = get_logger(__name__)

REQUEST_TIMEOUT_SECONDS = 60


class OfflineModelKind(Enum):
    WHISPER = "whisper"
    SENSE_VOICE = "sense_voice"


def _asset_path(asset) -> Path:
    path = Path(getattr(asset, "path", ""))
    if not path.is_file():
        raise TranscriptionError(
            FailureReason.INVALID_AUDIO, f"Audio file not found: {path}"
        )
    return path


class CloudTranscriptionBackend:
    """Transcribes through the OpenAI-compatible transcription endpoint via litellm."""

    def __init__(
        self,
        model: str = "whisper-1",
        api_key_provider: Optional[Callable[[], Optional[str]]] = None,
        api_base: Optional[str] = None,
    ):
        self.model = model
        self.api_base = api_base
        self._api_key_provider = api_key_provider

    def transcribe(self, asset, language: Optional[str]) -> str:
        path = _asset_path(asset)

        kwargs = {"model": self.model, "timeout": REQUEST_TIMEOUT_SECONDS}
        if language:
            kwargs["language"] = language
        api_key = self._api_key_provider() if self._api_key_provider else None
        if api_key:
            kwargs["api_key"] = api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        logger.info(
            f"Cloud transcription: model={self.model}, language={language or 'auto'}, "
            f"file={path.name}"
        )

        try:
            with open(path, "rb") as audio_file:
                response = litellm.transcription(file=audio_file, **kwargs)
        except OSError as e:
            raise TranscriptionError(FailureReason.INVALID_AUDIO, str(e)) from e
        except Exception as e:
            raise TranscriptionError(classify_provider_error(e), str(e)) from e

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            raise TranscriptionError(
                FailureReason.INVALID_RESPONSE, "Transcription returned empty result"
            )

        return text.strip()


class SherpaOnnxBackend:
    """
    Offline recognizer backed by sherpa-onnx.

    One recognizer is created per language hint, since sherpa-onnx fixes the
    language at construction time. Loading and decoding share a lock so a
    call abandoned by a timed-out session never races the next one.
    """

    def __init__(self, model_id: str, kind: OfflineModelKind, num_threads: int = 4):
        self.model_id = model_id
        self.kind = kind
        self.num_threads = num_threads
        self._recognizers: Dict[str, object] = {}
        self._lock = threading.Lock()

    @property
    def model_path(self) -> str:
        return resolve_model_dir(self.model_id)

    def is_model_cached(self) -> bool:
        model_path = self.model_path
        if not os.path.isdir(model_path):
            return False
        if self.kind == OfflineModelKind.WHISPER:
            return is_valid_whisper_model(model_path)
        return is_valid_sense_voice_model(model_path)

    def transcribe(self, asset, language: Optional[str]) -> str:
        path = _asset_path(asset)
        samples, sample_rate = self._read_wav(path)

        with self._lock:
            recognizer = self._get_recognizer(language)
            stream = recognizer.create_stream()
            stream.accept_waveform(sample_rate, samples)
            recognizer.decode_stream(stream)
            text = stream.result.text

        if not text or not text.strip():
            raise TranscriptionError(
                FailureReason.INVALID_RESPONSE, "Transcription returned empty result"
            )

        return text.strip()

    @staticmethod
    def _read_wav(path: Path) -> tuple[np.ndarray, int]:
        try:
            sample_rate, data = wavfile.read(path)
        except (OSError, ValueError) as e:
            raise TranscriptionError(FailureReason.INVALID_AUDIO, str(e)) from e

        if data.dtype == np.int16:
            samples = data.astype(np.float32) / 32768.0
        elif data.dtype == np.int32:
            samples = data.astype(np.float32) / 2147483648.0
        else:
            samples = data.astype(np.float32)

        if samples.ndim > 1:
            samples = samples[:, 0]

        return samples, int(sample_rate)

    def _get_recognizer(self, language: Optional[str]):
        key = language or "auto"
        recognizer = self._recognizers.get(key)
        if recognizer is not None:
            return recognizer

        if not self.is_model_cached():
            raise TranscriptionError(
                FailureReason.MODEL_UNAVAILABLE,
                f"Model '{self.model_id}' not found in {self.model_path}",
            )

        import sherpa_onnx

        logger.info(f"Loading {self.kind.value} model '{self.model_id}' ({key})")
        try:
            if self.kind == OfflineModelKind.WHISPER:
                recognizer = self._load_whisper(sherpa_onnx, language)
            else:
                recognizer = self._load_sense_voice(sherpa_onnx, language)
        except Exception as e:
            raise TranscriptionError(
                FailureReason.MODEL_UNAVAILABLE,
                f"Failed to load model from '{self.model_path}': {e}",
            ) from e

        self._recognizers[key] = recognizer
        return recognizer

    def _load_whisper(self, sherpa_onnx, language: Optional[str]):
        model_path = self.model_path
        return sherpa_onnx.OfflineRecognizer.from_whisper(
            encoder=find_file_by_suffix(model_path, "-encoder.int8.onnx", "-encoder.onnx"),
            decoder=find_file_by_suffix(model_path, "-decoder.int8.onnx", "-decoder.onnx"),
            tokens=find_file_by_suffix(model_path, "-tokens.txt", "tokens.txt"),
            language=language or "",
            task="transcribe",
            num_threads=self.num_threads,
            provider="cpu",
            debug=False,
            decoding_method="greedy_search",
        )

    def _load_sense_voice(self, sherpa_onnx, language: Optional[str]):
        model_path = self.model_path
        return sherpa_onnx.OfflineRecognizer.from_sense_voice(
            model=find_file_exact(model_path, ["model.int8.onnx", "model.onnx"]),
            tokens=os.path.join(model_path, "tokens.txt"),
            language=language or "auto",
            use_itn=True,
            num_threads=self.num_threads,
            provider="cpu",
            debug=False,
        )


def create_transcription_backends(
    settings_provider: Callable[[], "Settings"],
) -> dict:
    """Build the mode -> backend map once at process start."""
    settings = settings_provider()
    return {
        TranscriptionMode.CLOUD: CloudTranscriptionBackend(
            model=settings.transcription_model,
            api_key_provider=lambda: settings_provider().api_key,
        ),
        TranscriptionMode.WHISPER_LOCAL: SherpaOnnxBackend(
            settings.whisper_model_id, OfflineModelKind.WHISPER
        ),
        TranscriptionMode.SENSE_VOICE: SherpaOnnxBackend(
            settings.sense_voice_model_id, OfflineModelKind.SENSE_VOICE
        ),
    }

import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np
import sounddevice as sd
from scipy.io import wavfile

from ...utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AudioDevice:
    name: str
    index: int
    channels: int
    default_sample_rate: float


@dataclass
class AudioAsset:
    """A finished WAV recording on disk. ``delete()`` is idempotent."""

    path: Path
    sample_rate: int
    _deleted: bool = field(default=False, repr=False)

    @property
    def size_bytes(self) -> int:
        try:
            return self.path.stat().st_size
        except OSError:
            return 0

    @property
    def deleted(self) -> bool:
        return self._deleted

    def delete(self) -> None:
        if self._deleted:
            return
        self._deleted = True
        try:
            self.path.unlink(missing_ok=True)
            logger.debug(f"Deleted recording {self.path.name}")
        except OSError as e:
            logger.warning(f"Failed to delete recording {self.path}: {e}")


def get_recordings_dir() -> Path:
    recordings_dir = Path(tempfile.gettempdir()) / "voicescribe-recordings"
    recordings_dir.mkdir(parents=True, exist_ok=True)
    return recordings_dir


class AudioRecorder:

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        device: Optional[str] = None,
        output_dir: Optional[Path] = None,
    ):

        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.output_dir = output_dir

        self._stream: Optional[sd.InputStream] = None
        self._audio_buffer: List[np.ndarray] = []
        self._is_recording = False
        self._last_error: Optional[str] = None

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def start(self) -> bool:
        if self._is_recording:
            return True

        self._audio_buffer = []
        self._last_error = None

        try:
            self._stream = sd.InputStream(
                samplerate=float(self.sample_rate),
                channels=self.channels,
                dtype="float32",
                device=self._get_device_index(),
                callback=self._audio_callback,
            )
            self._stream.start()
            self._is_recording = True
            return True

        except sd.PortAudioError as e:
            self._last_error = f"Audio device error: {e}"
        except Exception as e:
            self._last_error = f"Failed to start recording: {e}"

        self._stream = None
        self._is_recording = False
        logger.error(self._last_error)
        return False

    def stop(self) -> Optional[AudioAsset]:
        if not self._is_recording:
            return None

        self._is_recording = False

        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None

        if not self._audio_buffer:
            return None

        audio_data = np.concatenate(self._audio_buffer, axis=0)
        self._audio_buffer = []
        return self._write_asset(audio_data)

    def _write_asset(self, audio_data: np.ndarray) -> Optional[AudioAsset]:
        output_dir = self.output_dir or get_recordings_dir()
        path = Path(output_dir) / f"recording-{uuid.uuid4().hex}.wav"

        pcm = np.clip(audio_data, -1.0, 1.0)
        pcm = (pcm * 32767).astype(np.int16)

        try:
            wavfile.write(path, self.sample_rate, pcm)
        except OSError as e:
            self._last_error = f"Failed to write recording: {e}"
            logger.error(self._last_error)
            return None

        logger.debug(f"Wrote {len(pcm)} samples to {path.name}")
        return AudioAsset(path=path, sample_rate=self.sample_rate)

    def _audio_callback(self, indata: np.ndarray, frames: int, time, status) -> None:
        if self._is_recording:
            self._audio_buffer.append(indata.copy())

    def _get_device_index(self) -> Optional[int]:
        if self.device is None:
            return None

        for device in self.list_devices():
            if device.name == self.device:
                return device.index

        return None

    @staticmethod
    def list_devices() -> List[AudioDevice]:
        devices = []

        for i, device in enumerate(sd.query_devices()):
            if device["max_input_channels"] > 0:
                devices.append(
                    AudioDevice(
                        name=device["name"],
                        index=i,
                        channels=device["max_input_channels"],
                        default_sample_rate=device["default_samplerate"],
                    )
                )

        return devices

"""Tests for the cloud and offline transcription backends."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import litellm
import numpy as np
import pytest
from scipy.io import wavfile

from voicescribe.core.asr.backends import (
    CloudTranscriptionBackend,
    OfflineModelKind,
    SherpaOnnxBackend,
    create_transcription_backends,
)
from voicescribe.core.asr.file_utils import (
    find_file_by_suffix,
    is_valid_sense_voice_model,
    is_valid_whisper_model,
)
from voicescribe.core.session.errors import FailureReason, TranscriptionError
from voicescribe.core.session.state import TranscriptionMode
from voicescribe.core.settings import Settings

TRANSCRIPTION = "voicescribe.core.asr.backends.litellm.transcription"


@pytest.fixture
def wav_asset(tmp_path):
    path = tmp_path / "clip.wav"
    samples = (np.sin(np.linspace(0, 100, 16000)) * 8000).astype(np.int16)
    wavfile.write(path, 16000, samples)
    return SimpleNamespace(path=path, size_bytes=path.stat().st_size)


@pytest.fixture
def whisper_dir(tmp_path):
    model_dir = tmp_path / "sherpa-onnx-whisper-tiny"
    model_dir.mkdir()
    for name in ("tiny-encoder.int8.onnx", "tiny-decoder.int8.onnx", "tiny-tokens.txt"):
        (model_dir / name).write_text("x")
    return model_dir


class TestCloudTranscriptionBackend:
    """Tests for the litellm cloud transcription backend."""

    @patch(TRANSCRIPTION)
    def test_transcribe(self, mock_transcription, wav_asset):
        """Test transcript text and language hint are passed through litellm."""
        mock_transcription.return_value = SimpleNamespace(text=" hello world ")
        backend = CloudTranscriptionBackend(api_key_provider=lambda: "sk-1")

        assert backend.transcribe(wav_asset, "en") == "hello world"

        kwargs = mock_transcription.call_args.kwargs
        assert kwargs["model"] == "whisper-1"
        assert kwargs["language"] == "en"
        assert kwargs["api_key"] == "sk-1"

    @patch(TRANSCRIPTION)
    def test_auto_language_omits_hint(self, mock_transcription, wav_asset):
        """Test no language is sent when the hint is auto."""
        mock_transcription.return_value = SimpleNamespace(text="hi")
        CloudTranscriptionBackend().transcribe(wav_asset, None)

        assert "language" not in mock_transcription.call_args.kwargs

    @patch(TRANSCRIPTION)
    def test_empty_result(self, mock_transcription, wav_asset):
        """Test an empty transcript raises INVALID_RESPONSE."""
        mock_transcription.return_value = SimpleNamespace(text="  ")

        with pytest.raises(TranscriptionError) as exc_info:
            CloudTranscriptionBackend().transcribe(wav_asset, None)

        assert exc_info.value.reason is FailureReason.INVALID_RESPONSE

    @patch(TRANSCRIPTION)
    def test_provider_error_is_classified(self, mock_transcription, wav_asset):
        """Test provider exceptions map to a failure reason."""
        mock_transcription.side_effect = litellm.Timeout(
            message="slow", model="whisper-1", llm_provider="openai"
        )

        with pytest.raises(TranscriptionError) as exc_info:
            CloudTranscriptionBackend().transcribe(wav_asset, None)

        assert exc_info.value.reason is FailureReason.NETWORK

    def test_missing_file(self, tmp_path):
        """Test a missing audio file raises INVALID_AUDIO."""
        asset = SimpleNamespace(path=tmp_path / "gone.wav", size_bytes=0)

        with pytest.raises(TranscriptionError) as exc_info:
            CloudTranscriptionBackend().transcribe(asset, None)

        assert exc_info.value.reason is FailureReason.INVALID_AUDIO


class TestSherpaOnnxBackend:
    """Tests for the offline sherpa-onnx backend."""

    def test_model_not_cached(self, tmp_path, wav_asset):
        """Test a missing model raises MODEL_UNAVAILABLE."""
        backend = SherpaOnnxBackend(str(tmp_path / "missing"), OfflineModelKind.WHISPER)

        assert backend.is_model_cached() is False
        with pytest.raises(TranscriptionError) as exc_info:
            backend.transcribe(wav_asset, None)

        assert exc_info.value.reason is FailureReason.MODEL_UNAVAILABLE

    def test_transcribe_with_loaded_recognizer(self, whisper_dir, wav_asset):
        """Test decoding through a loaded recognizer returns its text."""
        recognizer = MagicMock()
        stream = recognizer.create_stream.return_value
        stream.result.text = " 你好 "
        fake_sherpa = MagicMock()
        fake_sherpa.OfflineRecognizer.from_whisper.return_value = recognizer

        backend = SherpaOnnxBackend(str(whisper_dir), OfflineModelKind.WHISPER)
        with patch.dict(sys.modules, {"sherpa_onnx": fake_sherpa}):
            assert backend.transcribe(wav_asset, "zh") == "你好"
            assert backend.transcribe(wav_asset, "zh") == "你好"

        fake_sherpa.OfflineRecognizer.from_whisper.assert_called_once()
        kwargs = fake_sherpa.OfflineRecognizer.from_whisper.call_args.kwargs
        assert kwargs["language"] == "zh"
        assert kwargs["encoder"].endswith("tiny-encoder.int8.onnx")

        sample_rate, samples = stream.accept_waveform.call_args.args
        assert sample_rate == 16000
        assert samples.dtype == np.float32
        assert np.abs(samples).max() <= 1.0

    def test_load_failure_is_model_unavailable(self, whisper_dir, wav_asset):
        """Test a recognizer that fails to load raises MODEL_UNAVAILABLE."""
        fake_sherpa = MagicMock()
        fake_sherpa.OfflineRecognizer.from_whisper.side_effect = RuntimeError("bad onnx")

        backend = SherpaOnnxBackend(str(whisper_dir), OfflineModelKind.WHISPER)
        with patch.dict(sys.modules, {"sherpa_onnx": fake_sherpa}):
            with pytest.raises(TranscriptionError) as exc_info:
                backend.transcribe(wav_asset, None)

        assert exc_info.value.reason is FailureReason.MODEL_UNAVAILABLE

    def test_unreadable_wav_is_invalid_audio(self, tmp_path, whisper_dir):
        """Test a corrupt WAV file raises INVALID_AUDIO."""
        path = tmp_path / "broken.wav"
        path.write_bytes(b"not a wav file")
        asset = SimpleNamespace(path=path, size_bytes=14)

        backend = SherpaOnnxBackend(str(whisper_dir), OfflineModelKind.WHISPER)
        with pytest.raises(TranscriptionError) as exc_info:
            backend.transcribe(asset, None)

        assert exc_info.value.reason is FailureReason.INVALID_AUDIO

    def test_empty_result_is_invalid_response(self, whisper_dir, wav_asset):
        """Test an empty decode raises INVALID_RESPONSE."""
        recognizer = MagicMock()
        recognizer.create_stream.return_value.result.text = ""
        fake_sherpa = MagicMock()
        fake_sherpa.OfflineRecognizer.from_whisper.return_value = recognizer

        backend = SherpaOnnxBackend(str(whisper_dir), OfflineModelKind.WHISPER)
        with patch.dict(sys.modules, {"sherpa_onnx": fake_sherpa}):
            with pytest.raises(TranscriptionError) as exc_info:
                backend.transcribe(wav_asset, None)

        assert exc_info.value.reason is FailureReason.INVALID_RESPONSE


class TestModelFiles:
    """Tests for model directory validation."""

    def test_valid_whisper_model(self, whisper_dir):
        """Test a complete Whisper model directory is accepted."""
        assert is_valid_whisper_model(str(whisper_dir)) is True

    def test_incomplete_whisper_model(self, whisper_dir):
        """Test a Whisper directory without a decoder is rejected."""
        (whisper_dir / "tiny-decoder.int8.onnx").unlink()
        assert is_valid_whisper_model(str(whisper_dir)) is False

    def test_valid_sense_voice_model(self, tmp_path):
        """Test a complete SenseVoice model directory is accepted."""
        (tmp_path / "model.int8.onnx").write_text("x")
        (tmp_path / "tokens.txt").write_text("x")
        assert is_valid_sense_voice_model(str(tmp_path)) is True

    def test_find_file_in_missing_dir(self, tmp_path):
        """Test searching a missing directory returns None."""
        assert find_file_by_suffix(str(tmp_path / "nope"), ".onnx") is None


def test_create_transcription_backends():
    """Test one backend is built per transcription mode."""
    settings = Settings(whisper_model_id="tiny")
    backends = create_transcription_backends(lambda: settings)

    assert set(backends) == set(TranscriptionMode)
    assert isinstance(backends[TranscriptionMode.CLOUD], CloudTranscriptionBackend)
    assert backends[TranscriptionMode.WHISPER_LOCAL].kind is OfflineModelKind.WHISPER
    assert backends[TranscriptionMode.SENSE_VOICE].kind is OfflineModelKind.SENSE_VOICE
    assert backends[TranscriptionMode.WHISPER_LOCAL].model_id == "tiny"

from .backends import (
    CloudTranscriptionBackend,
    OfflineModelKind,
    SherpaOnnxBackend,
    create_transcription_backends,
)
from .file_utils import get_models_dir

__all__ = [
    "CloudTranscriptionBackend",
    "OfflineModelKind",
    "SherpaOnnxBackend",
    "create_transcription_backends",
    "get_models_dir",
]

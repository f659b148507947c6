from .recorder import AudioAsset, AudioDevice, AudioRecorder, get_recordings_dir

__all__ = ["AudioAsset", "AudioDevice", "AudioRecorder", "get_recordings_dir"]

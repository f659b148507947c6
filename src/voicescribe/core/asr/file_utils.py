import os
from typing import Optional

import platformdirs


def get_models_dir() -> str:
    return os.path.join(
        platformdirs.user_data_dir("voicescribe", appauthor=False), "models"
    )


def resolve_model_dir(model_id: str) -> str:
    if os.path.isabs(model_id):
        return model_id
    return os.path.join(get_models_dir(), model_id)


def find_file_by_suffix(directory: str, *suffixes: str) -> Optional[str]:
    try:
        for filename in sorted(os.listdir(directory)):
            for suffix in suffixes:
                if filename.endswith(suffix):
                    return os.path.join(directory, filename)
    except OSError:
        pass
    return None


def find_file_exact(directory: str, candidates: list[str]) -> Optional[str]:
    for name in candidates:
        path = os.path.join(directory, name)
        if os.path.exists(path):
            return path
    return None


def is_valid_whisper_model(model_path: str) -> bool:
    has_encoder = find_file_by_suffix(
        model_path, "-encoder.int8.onnx", "-encoder.onnx"
    )
    has_decoder = find_file_by_suffix(
        model_path, "-decoder.int8.onnx", "-decoder.onnx"
    )
    has_tokens = find_file_by_suffix(model_path, "-tokens.txt", "tokens.txt")
    return bool(has_encoder and has_decoder and has_tokens)


def is_valid_sense_voice_model(model_path: str) -> bool:
    has_model = find_file_exact(model_path, ["model.int8.onnx", "model.onnx"])
    has_tokens = os.path.exists(os.path.join(model_path, "tokens.txt"))
    return has_model is not None and has_tokens

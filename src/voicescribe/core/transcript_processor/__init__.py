from .llm_processor import (
    LLMProcessor,
    PolishTemplate,
    get_polish_templates,
    resolve_prompt,
)
from .normalizer import TextNormalizer
from .punctuation import convert_punctuation, is_wide_script
from .script_converter import ScriptConverter
from .tech_terms import apply_tech_terms
from .text_cleaner import basic_cleanup

__all__ = [
    "LLMProcessor",
    "PolishTemplate",
    "get_polish_templates",
    "resolve_prompt",
    "TextNormalizer",
    "convert_punctuation",
    "is_wide_script",
    "ScriptConverter",
    "apply_tech_terms",
    "basic_cleanup",
]

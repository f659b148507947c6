"""Rule-based cleanup used when the LLM polish step is unavailable."""

import re

_WHITESPACE = re.compile(r"\s+")
_REPEATED_PUNCTUATION = re.compile(r"([。！？!?,，])\1+")
_REPEATED_WORD = re.compile(r"\b(\w+)(?:\s+\1\b)+")


def basic_cleanup(text: str) -> str:
    """Collapse whitespace, stuttered punctuation and immediately repeated words."""
    result = text.strip()
    result = _WHITESPACE.sub(" ", result)
    result = _REPEATED_PUNCTUATION.sub(r"\1", result)
    result = _REPEATED_WORD.sub(r"\1", result)
    return result

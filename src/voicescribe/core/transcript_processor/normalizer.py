from ..session.state import PunctuationStyle
from .punctuation import convert_punctuation
from .tech_terms import apply_tech_terms


class TextNormalizer:
    """Final, synchronous text transforms applied before pasting."""

    def normalize(self, text: str, style: PunctuationStyle, apply_terms: bool) -> str:
        result = apply_tech_terms(text) if apply_terms else text
        return convert_punctuation(result, style)

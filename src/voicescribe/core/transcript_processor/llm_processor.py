import json
from pathlib import Path
from typing import Callable, List, Optional

import litellm
from litellm import completion
from pydantic import BaseModel, ConfigDict

from ...utils.logger import get_logger
from ...utils.provider_errors import classify_provider_error
from ..session.errors import FailureReason, PolishError
from ..session.state import PunctuationStyle

logger = get_logger(__name__)

DEFAULT_POLISH_MODEL = "gpt-5-mini"
DEFAULT_TEMPLATE_ID = "general"
REQUEST_TIMEOUT_SECONDS = 30

PUNCTUATION_INSTRUCTIONS = {
    PunctuationStyle.FULL_WIDTH: (
        "Use full-width punctuation (，。！？：；「」) inside Chinese, Japanese "
        "and Korean sentences and half-width punctuation inside English sentences."
    ),
    PunctuationStyle.HALF_WIDTH: (
        "Use half-width punctuation (, . ! ? : ;) everywhere, including inside "
        "Chinese, Japanese and Korean sentences."
    ),
    PunctuationStyle.SPACES: (
        "Do not put punctuation marks inside Chinese, Japanese or Korean "
        "sentences; separate clauses with a single space instead."
    ),
}


class PolishTemplate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    prompt: str


def load_polish_templates() -> List[PolishTemplate]:
    json_path = Path(__file__).parent / "polish_prompts.json"

    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [PolishTemplate.model_validate(item) for item in data]


_polish_templates: Optional[List[PolishTemplate]] = None


def get_polish_templates() -> List[PolishTemplate]:
    global _polish_templates
    if _polish_templates is None:
        _polish_templates = load_polish_templates()
    return _polish_templates


def resolve_prompt(
    custom_prompt: Optional[str], template_id: str = DEFAULT_TEMPLATE_ID
) -> str:
    """Custom prompt wins when non-blank, then the chosen template, then the default."""
    if custom_prompt and custom_prompt.strip():
        return custom_prompt.strip()

    templates = {t.id: t for t in get_polish_templates()}
    template = templates.get(template_id) or templates[DEFAULT_TEMPLATE_ID]
    return template.prompt


class LLMProcessor:
    """
    Polishes transcripts through an LLM chat completion.

    Raises ``PolishError`` on failure. Connection problems and timeouts are
    reported as ``NETWORK``, a reply without usable text as
    ``INVALID_RESPONSE`` and everything the provider refuses as
    ``API_REJECTED``.
    """

    def __init__(
        self,
        model: str = DEFAULT_POLISH_MODEL,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        api_key_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.model = model
        self.api_key = api_key
        self.api_base = api_base
        self._api_key_provider = api_key_provider

        model_info = litellm.model_cost.get(model, {})
        self._supports_system_messages = model_info.get(
            "supports_system_messages", True
        )

        logger.info(
            f"LLMProcessor initialized with model: {model}, api_base: {api_base}"
        )

    def _resolve_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        if self._api_key_provider is not None:
            return self._api_key_provider()
        return None

    def build_messages(
        self, text: str, prompt: str, style: PunctuationStyle
    ) -> List[dict]:
        system_prompt = f"{prompt}\n\n{PUNCTUATION_INSTRUCTIONS[style]}"

        if self._supports_system_messages:
            return [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": text},
            ]

        logger.debug(f"Merged system prompt with user prompt for {self.model}")
        return [{"role": "user", "content": f"{system_prompt}\n\n{text}"}]

    def polish(self, text: str, prompt: str, style: PunctuationStyle) -> str:
        if not text or not text.strip():
            return text

        logger.info(f"Polishing text ({len(text)} chars) with {self.model}")

        kwargs = {
            "model": self.model,
            "messages": self.build_messages(text, prompt, style),
            "timeout": REQUEST_TIMEOUT_SECONDS,
        }

        api_key = self._resolve_api_key()
        if api_key:
            kwargs["api_key"] = api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            response = completion(**kwargs)
        except Exception as e:
            raise PolishError(classify_provider_error(e), str(e)) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise PolishError(
                FailureReason.INVALID_RESPONSE, "Response has no message content"
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise PolishError(FailureReason.INVALID_RESPONSE, "Empty polish result")

        result = content.strip()
        logger.info(f"Polish complete: {len(text)} -> {len(result)} chars")
        return result

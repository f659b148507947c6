"""
Tests for the LLM polish backend.

Verifies prompt resolution, message construction, and error mapping.
"""

from unittest.mock import MagicMock, patch

import litellm
import pytest

from voicescribe.core.session.errors import FailureReason, PolishError
from voicescribe.core.session.state import PunctuationStyle
from voicescribe.core.transcript_processor.llm_processor import (
    DEFAULT_TEMPLATE_ID,
    PUNCTUATION_INSTRUCTIONS,
    LLMProcessor,
    PolishTemplate,
    get_polish_templates,
    resolve_prompt,
)
from voicescribe.utils.provider_errors import classify_provider_error

COMPLETION = "voicescribe.core.transcript_processor.llm_processor.completion"


def make_response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestPolishTemplates:
    """Tests for the bundled polish templates."""

    def test_templates_loaded(self):
        """Test templates load with unique ids and non-empty prompts."""
        templates = get_polish_templates()
        ids = [t.id for t in templates]
        assert DEFAULT_TEMPLATE_ID in ids
        assert len(ids) == len(set(ids))
        for template in templates:
            assert isinstance(template, PolishTemplate)
            assert template.title
            assert template.prompt


class TestResolvePrompt:
    """Tests for system prompt selection."""

    def test_custom_prompt_wins(self):
        """Test a custom prompt overrides the template."""
        assert resolve_prompt("  Be brief.  ", "email") == "Be brief."

    def test_blank_custom_prompt_uses_template(self):
        """Test a blank custom prompt falls through to the template."""
        email = next(t for t in get_polish_templates() if t.id == "email")
        assert resolve_prompt("   ", "email") == email.prompt

    def test_unknown_template_falls_back_to_default(self):
        """Test an unknown template id uses the default template."""
        default = next(t for t in get_polish_templates() if t.id == DEFAULT_TEMPLATE_ID)
        assert resolve_prompt(None, "missing") == default.prompt


class TestLLMProcessor:
    """Tests for the LLM polish backend."""

    def test_initialization(self):
        """Test model and key are stored."""
        processor = LLMProcessor(model="gpt-4o-mini", api_key="test-key")
        assert processor.model == "gpt-4o-mini"
        assert processor.api_key == "test-key"

    def test_messages_include_style_instruction(self):
        """Test the system message carries the punctuation instruction."""
        processor = LLMProcessor(model="gpt-4o-mini")
        messages = processor.build_messages("text", "Fix it", PunctuationStyle.SPACES)
        assert messages[0]["role"] == "system"
        assert messages[0]["content"].startswith("Fix it")
        assert PUNCTUATION_INSTRUCTIONS[PunctuationStyle.SPACES] in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "text"}

    @patch(COMPLETION)
    def test_polish_calls_completion(self, mock_completion):
        """Test polish sends the request through litellm completion."""
        mock_completion.return_value = make_response("  Cleaned text.  ")

        processor = LLMProcessor(model="gpt-4o-mini", api_key_provider=lambda: "sk-1")
        result = processor.polish("um cleaned text", "Fix", PunctuationStyle.FULL_WIDTH)

        assert result == "Cleaned text."
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["api_key"] == "sk-1"
        assert kwargs["messages"][1]["content"] == "um cleaned text"

    @patch(COMPLETION)
    def test_blank_text_skips_request(self, mock_completion):
        """Test blank input is returned without a request."""
        processor = LLMProcessor(api_key="test-key")
        assert processor.polish("   ", "Fix", PunctuationStyle.FULL_WIDTH) == "   "
        mock_completion.assert_not_called()

    @pytest.mark.parametrize("content", [None, "", "   "])
    @patch(COMPLETION)
    def test_empty_content_is_invalid_response(self, mock_completion, content):
        """Test an empty reply raises INVALID_RESPONSE."""
        mock_completion.return_value = make_response(content)

        with pytest.raises(PolishError) as exc_info:
            LLMProcessor(api_key="k").polish("text", "Fix", PunctuationStyle.FULL_WIDTH)

        assert exc_info.value.reason is FailureReason.INVALID_RESPONSE

    @patch(COMPLETION)
    def test_missing_choices_is_invalid_response(self, mock_completion):
        """Test a reply without choices raises INVALID_RESPONSE."""
        response = MagicMock()
        response.choices = []
        mock_completion.return_value = response

        with pytest.raises(PolishError) as exc_info:
            LLMProcessor(api_key="k").polish("text", "Fix", PunctuationStyle.FULL_WIDTH)

        assert exc_info.value.reason is FailureReason.INVALID_RESPONSE

    @patch(COMPLETION)
    def test_generic_error_is_rejected(self, mock_completion):
        """Test an unknown provider error raises API_REJECTED."""
        mock_completion.side_effect = Exception("API error")

        with pytest.raises(PolishError) as exc_info:
            LLMProcessor(api_key="k").polish("text", "Fix", PunctuationStyle.FULL_WIDTH)

        assert exc_info.value.reason is FailureReason.API_REJECTED
        assert "API error" in exc_info.value.detail

    @patch(COMPLETION)
    def test_timeout_is_network(self, mock_completion):
        """Test a provider timeout raises NETWORK."""
        mock_completion.side_effect = litellm.Timeout(
            message="timed out", model="gpt-4o-mini", llm_provider="openai"
        )

        with pytest.raises(PolishError) as exc_info:
            LLMProcessor(api_key="k").polish("text", "Fix", PunctuationStyle.FULL_WIDTH)

        assert exc_info.value.reason is FailureReason.NETWORK


class TestClassifyProviderError:
    """Tests for mapping litellm exceptions to failure reasons."""

    @pytest.mark.parametrize(
        "error_type",
        [litellm.Timeout, litellm.APIConnectionError, litellm.ServiceUnavailableError],
    )
    def test_network_errors(self, error_type):
        """Test connection and timeout errors map to NETWORK."""
        assert classify_provider_error(MagicMock(spec=error_type)) is FailureReason.NETWORK

    def test_response_validation_error(self):
        """Test response validation errors map to INVALID_RESPONSE."""
        error = MagicMock(spec=litellm.APIResponseValidationError)
        assert classify_provider_error(error) is FailureReason.INVALID_RESPONSE

    @pytest.mark.parametrize(
        "error_type",
        [litellm.AuthenticationError, litellm.BadRequestError, litellm.RateLimitError],
    )
    def test_rejected_errors(self, error_type):
        """Test authentication and request errors map to API_REJECTED."""
        assert (
            classify_provider_error(MagicMock(spec=error_type))
            is FailureReason.API_REJECTED
        )

    def test_unknown_error(self):
        """Test plain exceptions map to API_REJECTED."""
        assert classify_provider_error(RuntimeError("x")) is FailureReason.API_REJECTED

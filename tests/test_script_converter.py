"""Tests for Chinese script conversion."""

from unittest.mock import patch

from voicescribe.core.transcript_processor.script_converter import ScriptConverter


class TestScriptConverter:
    """Tests for Chinese script conversion."""

    def test_simplified_to_traditional(self):
        """Test simplified text converts to traditional."""
        assert ScriptConverter("traditional").convert("汉语") == "漢語"

    def test_traditional_to_simplified(self):
        """Test traditional text converts to simplified."""
        assert ScriptConverter("simplified").convert("漢語") == "汉语"

    def test_target_override(self):
        """Test a per-call target overrides the default."""
        converter = ScriptConverter("traditional")
        assert converter.convert("漢語", "simplified") == "汉语"

    def test_none_target_is_identity(self):
        """Test the none target leaves text unchanged."""
        assert ScriptConverter("none").convert("汉语") == "汉语"

    def test_text_without_han_untouched(self):
        """Test text without Han characters is unchanged."""
        converter = ScriptConverter("traditional")
        with patch(
            "voicescribe.core.transcript_processor.script_converter.OpenCC"
        ) as mock_opencc:
            assert converter.convert("hello world") == "hello world"
            mock_opencc.assert_not_called()

    def test_conversion_failure_returns_input(self):
        """Test a converter error returns the input."""
        converter = ScriptConverter("traditional")
        with patch(
            "voicescribe.core.transcript_processor.script_converter.OpenCC",
            side_effect=RuntimeError("broken"),
        ):
            assert converter.convert("汉语") == "汉语"

    def test_converter_is_cached(self):
        """Test one converter is created per configuration."""
        converter = ScriptConverter("traditional")
        with patch(
            "voicescribe.core.transcript_processor.script_converter.OpenCC"
        ) as mock_opencc:
            mock_opencc.return_value.convert.side_effect = lambda text: text
            converter.convert("汉")
            converter.convert("语")
            mock_opencc.assert_called_once_with("s2t")

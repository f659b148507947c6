"""Tests for the offline cleanup fallback."""

from voicescribe.core.transcript_processor.text_cleaner import basic_cleanup


def test_trims_and_collapses_whitespace():
    """Test whitespace is trimmed and collapsed."""
    assert basic_cleanup("  hello \n\t world  ") == "hello world"


def test_collapses_repeated_punctuation():
    """Test repeated sentence marks collapse to one."""
    assert basic_cleanup("really??? yes!!") == "really? yes!"
    assert basic_cleanup("好的。。。") == "好的。"


def test_collapses_repeated_words():
    """Test an immediately repeated word is removed."""
    assert basic_cleanup("I I think the the plan works") == "I think the plan works"


def test_keeps_distinct_words():
    """Test different adjacent words are kept."""
    assert basic_cleanup("there is a theory") == "there is a theory"


def test_empty():
    """Test empty text stays empty."""
    assert basic_cleanup("   ") == ""

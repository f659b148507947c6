"""Simplified/Traditional Chinese conversion for raw transcripts."""

import re
from typing import Dict, Optional

from opencc import OpenCC

from ...utils.logger import get_logger

logger = get_logger(__name__)

OPENCC_CONFIGS: Dict[str, str] = {
    "traditional": "s2t",
    "simplified": "t2s",
}

_HAN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")


class ScriptConverter:
    """
    Converts transcripts to the configured Chinese script.

    Never fails: text without Han characters, an unknown or ``none`` target,
    and any converter error all return the input unchanged.
    """

    def __init__(self, target: str = "traditional"):
        self.target = target
        self._converters: Dict[str, OpenCC] = {}

    def convert(self, text: str, target: Optional[str] = None) -> str:
        target = target or self.target
        config = OPENCC_CONFIGS.get(target)

        if not text or config is None or not _HAN.search(text):
            return text

        try:
            converter = self._converters.get(config)
            if converter is None:
                converter = OpenCC(config)
                self._converters[config] = converter
            return converter.convert(text)
        except Exception as e:
            logger.warning(f"Script conversion to {target} failed, keeping input: {e}")
            return text

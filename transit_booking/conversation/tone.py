"""
Keyword tone detection used to colour reply wording.

Tone never changes which step the conversation is in; it only decides
whether a reply gets an apologetic or upbeat opener.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Tone(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class ToneResult:
    tone: Tone
    keyword: Optional[str] = None


class ToneDetector:
    """Classifies a message by the first tone keyword it contains."""

    NEGATIVE_KEYWORDS = [
        "useless", "ridiculous", "terrible", "annoying", "frustrated",
        "frustrating", "angry", "hate", "stupid", "worst", "rubbish",
        "not working", "waste of time", "i already told you",
    ]

    POSITIVE_KEYWORDS = [
        "great", "awesome", "amazing", "excellent", "fantastic",
        "perfect", "wonderful", "love", "thank you", "thanks",
    ]

    def detect(self, text: str) -> ToneResult:
        lower = " ".join(text.lower().split())
        for keyword in self.NEGATIVE_KEYWORDS:
            if self._contains(lower, keyword):
                logger.info("Negative tone keyword detected: '%s'", keyword)
                return ToneResult(Tone.NEGATIVE, keyword)
        for keyword in self.POSITIVE_KEYWORDS:
            if self._contains(lower, keyword):
                logger.debug("Positive tone keyword detected: '%s'", keyword)
                return ToneResult(Tone.POSITIVE, keyword)
        return ToneResult(Tone.NEUTRAL)

    @staticmethod
    def _contains(text: str, phrase: str) -> bool:
        return re.search(rf"\b{re.escape(phrase)}\b", text) is not None

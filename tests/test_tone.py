"""Tests for keyword tone detection."""

import pytest

from transit_booking.conversation.tone import Tone, ToneDetector


class TestToneDetector:
    def setup_method(self):
        self.detector = ToneDetector()

    @pytest.mark.parametrize("text", [
        "This is useless",
        "I'm so FRUSTRATED right now",
        "it's not working",
        "I already told you Lagos",
    ])
    def test_negative(self, text):
        assert self.detector.detect(text).tone == Tone.NEGATIVE

    @pytest.mark.parametrize("text", ["Great, book me in", "thank you!", "Perfect"])
    def test_positive(self, text):
        assert self.detector.detect(text).tone == Tone.POSITIVE

    @pytest.mark.parametrize("text", ["1", "uyo", "tomorrow", "yes", ""])
    def test_neutral(self, text):
        result = self.detector.detect(text)
        assert result.tone == Tone.NEUTRAL
        assert result.keyword is None

    def test_negative_wins_over_positive(self):
        result = self.detector.detect("thanks for nothing, this is the worst")
        assert result.tone == Tone.NEGATIVE
        assert result.keyword == "worst"

    def test_whole_words_only(self):
        # "hate" inside "whatever" must not count
        assert self.detector.detect("whatever works").tone == Tone.NEUTRAL

    def test_phrase_spanning_extra_spaces(self):
        assert self.detector.detect("not   working").tone == Tone.NEGATIVE

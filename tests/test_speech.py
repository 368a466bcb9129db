"""
Tests for splitting responses into speech segments.

Run with: pytest tests/test_speech.py -v
"""

from jansahayak.conversation import segment_for_speech
from jansahayak.conversation.speech import estimate_seconds


class TestSegmentForSpeech:
    """Segments break only at sentence ends and respect the time budget."""

    def test_short_text_is_one_segment(self):
        assert segment_for_speech("Your complaint has been registered.") == ["Your complaint has been registered."]

    def test_empty_text_has_no_segments(self):
        assert segment_for_speech("   ") == []

    def test_long_text_splits_at_sentences(self):
        sentence = "This scheme gives money to small farmers every year."  # 9 words
        text = " ".join([sentence] * 4)

        segments = segment_for_speech(text, max_seconds=5.0, words_per_second=2.5)

        assert len(segments) == 4
        assert all(s == sentence for s in segments)
        assert " ".join(segments) == text

    def test_sentences_are_grouped_up_to_budget(self):
        text = "One two three. Four five six. Seven eight nine. Ten eleven twelve."

        segments = segment_for_speech(text, max_seconds=2.5, words_per_second=2.5)

        assert segments == ["One two three. Four five six.", "Seven eight nine. Ten eleven twelve."]
        assert all(estimate_seconds(s, 2.5) <= 2.5 for s in segments)

    def test_devanagari_danda_is_a_sentence_break(self):
        text = "आपकी शिकायत दर्ज हो गई है। आपका ट्रैकिंग नंबर JS-20250301-00042 है।"

        segments = segment_for_speech(text, max_seconds=3.0, words_per_second=2.5)

        assert segments == ["आपकी शिकायत दर्ज हो गई है।", "आपका ट्रैकिंग नंबर JS-20250301-00042 है।"]

    def test_overlong_sentence_stays_whole(self):
        """A single sentence is never cut mid-way."""
        text = "word " * 60

        assert segment_for_speech(text.strip(), max_seconds=5.0) == [text.strip()]

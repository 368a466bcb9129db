"""
Script-based language detection for English / Hindi / mixed utterances.

Deterministic and total: ambiguous or very short input yields MIXED with low
confidence instead of an error.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..models import DetectedLanguage, Language

logger = logging.getLogger(__name__)

# Common romanized Hindi words; their share separates Hinglish from English
ROMANIZED_HINDI_MARKERS = frozenset({
    "hai", "hain", "ka", "ki", "ke", "ko", "mein", "mera", "meri", "mere", "kya",
    "nahi", "nahin", "aur", "se", "par", "yojana", "kaise", "kahan", "kab", "kitna",
    "mujhe", "humko", "hamare", "hamari", "wala", "wali", "bhi", "sadak", "paani",
    "bijli", "kisan", "shikayat", "chahiye", "batao", "bataiye", "karna", "kripya",
})

_WORD = re.compile(r"[^\W\d_]+", re.UNICODE)

MIN_LETTERS = 3
HINDI_SCRIPT_RATIO = 0.8
ENGLISH_SCRIPT_RATIO = 0.8
ROMANIZED_MARKER_RATIO = 0.15


@dataclass(frozen=True)
class LanguageDetection:
    language: DetectedLanguage
    confidence: float


def _is_devanagari(ch: str) -> bool:
    return "ऀ" <= ch <= "ॿ"


def _is_latin(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


class LanguageDetector:
    """Classifies text as English, Hindi or mixed by script and vocabulary."""

    def detect(self, text: str) -> LanguageDetection:
        text = text or ""
        devanagari = sum(1 for ch in text if _is_devanagari(ch))
        latin = sum(1 for ch in text if _is_latin(ch))
        letters = devanagari + latin

        if letters < MIN_LETTERS:
            return LanguageDetection(DetectedLanguage.MIXED, 0.1)

        hindi_ratio = devanagari / letters
        if hindi_ratio >= HINDI_SCRIPT_RATIO:
            return LanguageDetection(DetectedLanguage.HI, round(min(1.0, 0.5 + hindi_ratio / 2), 3))

        if 1 - hindi_ratio >= ENGLISH_SCRIPT_RATIO:
            words = [w.lower() for w in _WORD.findall(text) if w.isascii()]
            if not words:
                return LanguageDetection(DetectedLanguage.MIXED, 0.2)
            marker_ratio = sum(1 for w in words if w in ROMANIZED_HINDI_MARKERS) / len(words)
            if marker_ratio < ROMANIZED_MARKER_RATIO:
                confidence = min(1.0, 0.5 + (1 - hindi_ratio) / 2) * (1 - marker_ratio)
                if len(words) < 2:
                    confidence = min(confidence, 0.5)
                return LanguageDetection(DetectedLanguage.EN, round(confidence, 3))
            return LanguageDetection(DetectedLanguage.MIXED, 0.6)

        return LanguageDetection(DetectedLanguage.MIXED, 0.6)


def choose_response_language(
    detection: Optional[LanguageDetection],
    preference: Language,
    threshold: float,
) -> Language:
    """Most recent input language wins unless detection is uncertain."""
    if detection is None:
        return preference
    concrete = detection.language.as_language()
    if concrete is None or detection.confidence < threshold:
        return preference
    return concrete

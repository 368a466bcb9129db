"""
Splitting response text into segments for speech synthesis.
"""

import re

_SENTENCE_BREAK = re.compile(r"(?<=[.!?।])\s+")


def estimate_seconds(text: str, words_per_second: float) -> float:
    return len(text.split()) / words_per_second


def segment_for_speech(text: str, max_seconds: float = 12.0, words_per_second: float = 2.5) -> list[str]:
    """Group sentences into segments no longer than `max_seconds` of speech.

    Boundaries fall only at sentence breaks; a single sentence longer than the
    limit becomes its own segment. Short text is returned as one segment.
    """
    text = text.strip()
    if not text:
        return []
    if estimate_seconds(text, words_per_second) <= max_seconds:
        return [text]

    segments: list[str] = []
    current: list[str] = []
    for sentence in _SENTENCE_BREAK.split(text):
        sentence = sentence.strip()
        if not sentence:
            continue
        candidate = " ".join(current + [sentence])
        if current and estimate_seconds(candidate, words_per_second) > max_seconds:
            segments.append(" ".join(current))
            current = [sentence]
        else:
            current.append(sentence)
    if current:
        segments.append(" ".join(current))
    return segments

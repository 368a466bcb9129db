"""
Scheme document chunker.

Splits every (section, language) pair of a scheme version into bounded
chunks. Each chunk is prefixed with the scheme name so it stays meaningful
on its own when retrieved.
"""

import re

from ..models import Chunk, Language, SchemeDocument, SectionKind

_SENTENCE_BREAK = re.compile(r"(?<=[.!?।])\s+|\n+")


class SchemeChunker:
    """Turn a SchemeDocument into retrieval chunks."""

    def __init__(self, max_tokens: int = 120):
        """
        Args:
            max_tokens: Upper bound on whitespace tokens per chunk body.
        """
        if max_tokens < 8:
            raise ValueError("max_tokens must be at least 8")
        self.max_tokens = max_tokens

    def chunk(self, doc: SchemeDocument) -> list[Chunk]:
        chunks: list[Chunk] = []
        for language in Language:
            name = getattr(doc.name, language.value)
            for section, body in self._sections(doc, language).items():
                if not body.strip():
                    continue
                for n, piece in enumerate(self.split(body)):
                    text = f"{name}: {piece}" if name else piece
                    chunks.append(Chunk(
                        chunk_id=f"{doc.scheme_id}:v{doc.version}:{section.value}:{language.value}:{n}",
                        scheme_id=doc.scheme_id,
                        scheme_version=doc.version,
                        section=section,
                        language=language,
                        category=doc.category,
                        text=text,
                    ))
        return chunks

    def _sections(self, doc: SchemeDocument, language: Language) -> dict[SectionKind, str]:
        lang = language.value
        audience = ", ".join(doc.target_audience)
        overview = getattr(doc.description, lang)
        if overview and audience:
            overview = f"{overview}\n{audience}"
        return {
            SectionKind.OVERVIEW: overview,
            SectionKind.ELIGIBILITY: "\n".join(
                getattr(c.text, lang) for c in doc.eligibility if getattr(c.text, lang)
            ),
            SectionKind.BENEFITS: "\n".join(
                getattr(b, lang) for b in doc.benefits if getattr(b, lang)
            ),
            SectionKind.APPLICATION: getattr(doc.application_process, lang),
        }

    def split(self, text: str) -> list[str]:
        """Pack sentences into windows of at most `max_tokens` tokens."""
        pieces: list[str] = []
        current: list[str] = []

        for sentence in (s.strip() for s in _SENTENCE_BREAK.split(text)):
            if not sentence:
                continue
            words = sentence.split()
            # Sentences longer than the budget are cut at word boundaries
            while len(words) > self.max_tokens:
                if current:
                    pieces.append(" ".join(current))
                    current = []
                pieces.append(" ".join(words[:self.max_tokens]))
                words = words[self.max_tokens:]
            if len(current) + len(words) > self.max_tokens:
                pieces.append(" ".join(current))
                current = []
            current.extend(words)

        if current:
            pieces.append(" ".join(current))
        return pieces

"""
Tests for splitting scheme documents into retrieval chunks.

Run with: pytest tests/test_chunker.py -v
"""

import pytest

from jansahayak.indexing import SchemeChunker
from jansahayak.models import Language, SectionKind

from conftest import build_schemes


@pytest.fixture
def documents():
    return {doc.scheme_id: doc for doc in build_schemes()}


class TestSchemeChunker:
    """One set of chunks per (section, language) with stable ids."""

    def test_every_section_in_both_languages(self, documents):
        chunks = SchemeChunker().chunk(documents["pm-kisan"])

        assert len(chunks) == 8
        assert {(c.section, c.language) for c in chunks} == {
            (section, language) for section in SectionKind for language in Language
        }

    def test_chunk_ids_are_stable(self, documents):
        doc = documents["pm-kisan"]

        first = [c.chunk_id for c in SchemeChunker().chunk(doc)]
        second = [c.chunk_id for c in SchemeChunker().chunk(doc)]

        assert first == second
        assert "pm-kisan:v1:overview:en:0" in first
        assert "pm-kisan:v1:benefits:hi:0" in first

    def test_chunks_carry_the_scheme_name(self, documents):
        chunks = SchemeChunker().chunk(documents["pm-kisan"])

        hindi_overview = next(c for c in chunks if c.section is SectionKind.OVERVIEW and c.language is Language.HI)
        assert hindi_overview.text.startswith("पीएम किसान सम्मान निधि: ")
        assert all(c.category == "agriculture" for c in chunks)

    def test_empty_language_content_is_skipped(self, documents):
        """A scheme without Hindi text gets no Hindi chunks."""
        chunks = SchemeChunker().chunk(documents["nsp-scholarship"])

        assert [c.chunk_id for c in chunks] == ["nsp-scholarship:v1:overview:en:0"]

    def test_max_tokens_lower_bound(self):
        with pytest.raises(ValueError):
            SchemeChunker(max_tokens=4)


class TestSplit:
    """Sentence packing within the token budget."""

    def test_sentences_are_packed(self):
        chunker = SchemeChunker(max_tokens=8)

        pieces = chunker.split("one two three four five. six seven eight nine ten.")

        assert pieces == ["one two three four five.", "six seven eight nine ten."]

    def test_long_sentence_is_cut_at_word_boundaries(self):
        chunker = SchemeChunker(max_tokens=8)
        words = [f"w{i}" for i in range(20)]

        pieces = chunker.split(" ".join(words))

        assert [len(p.split()) for p in pieces] == [8, 8, 4]
        assert " ".join(pieces) == " ".join(words)

    def test_danda_ends_a_sentence(self):
        chunker = SchemeChunker(max_tokens=8)

        pieces = chunker.split("यह पहला वाक्य है। यह दूसरा लंबा वाक्य भी यहाँ है।")

        assert pieces == ["यह पहला वाक्य है।", "यह दूसरा लंबा वाक्य भी यहाँ है।"]

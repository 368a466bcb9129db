"""
Scheme answers: grounded generation with templated fallbacks.

Generated answers must use only the retrieved scheme text. Every method has
a deterministic template counterpart, used when no generator is configured
or the generator is unavailable.
"""

import logging
from typing import Optional

from ..llm import Generator
from ..messages import message
from ..models import BilingualText, Language, SchemeDocument, Turn

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {Language.EN: "English", Language.HI: "Hindi (Devanagari script)"}


class SchemeResponder:
    SYSTEM = """
    You are Jan Sahayak, a helpful assistant for Indian citizens, many of whom
    have limited literacy and use a voice interface.
    RULES:
    1. Use ONLY the scheme information provided. Never invent schemes, amounts or dates.
    2. Reply in {language} only. Use short, simple sentences suitable for being read aloud.
    3. No markdown, bullet symbols, tables or URLs.
    4. Keep the answer under 80 words.
    """

    def __init__(self, generator: Optional[Generator] = None):
        self.generator = generator

    @property
    def available(self) -> bool:
        return self.generator is not None

    def _generate(self, language: Language, body: str) -> str:
        prompt = self.SYSTEM.format(language=LANGUAGE_NAMES[language]) + "\n" + body
        return self.generator.generate(prompt).strip()

    # ------------------------------------------------------------------
    # Generated
    # ------------------------------------------------------------------

    def answer_with_context(
        self,
        query: str,
        documents: list[SchemeDocument],
        language: Language,
        history: Optional[list[Turn]] = None,
    ) -> str:
        """Summarize the ranked schemes as an answer to `query`."""
        context = "\n\n".join(self._format_document(doc, language) for doc in documents)
        body = f"""
    Recent conversation:
    {self._format_history(history)}

    Scheme information:
    {context}

    Citizen's question: {query}

    Briefly tell the citizen which of these schemes may help and why, in rank order.
    """
        return self._generate(language, body)

    def describe_scheme(self, query: str, doc: SchemeDocument, language: Language) -> str:
        body = f"""
    Scheme information:
    {self._format_document(doc, language)}

    Citizen's question: {query}

    Answer the question about this scheme.
    """
        return self._generate(language, body)

    def general_reply(self, text: str, language: Language, history: Optional[list[Turn]] = None) -> str:
        body = f"""
    Recent conversation:
    {self._format_history(history)}

    Citizen said: {text}

    Reply politely. You can help with government schemes, reporting civic problems
    and checking complaint status; gently steer the citizen towards these.
    """
        return self._generate(language, body)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    @staticmethod
    def template_results(documents: list[SchemeDocument], language: Language) -> str:
        names = ", ".join(
            f"{i}. {doc.name.get(language)}" for i, doc in enumerate(documents, start=1)
        )
        return message("schemes_found", language, names=names)

    @staticmethod
    def template_detail(doc: SchemeDocument, language: Language) -> str:
        return message(
            "scheme_detail",
            language,
            name=doc.name.get(language),
            description=doc.description.get(language),
            benefits=SchemeResponder._join(doc.benefits, language),
            process=doc.application_process.get(language),
        )

    @staticmethod
    def _format_document(doc: SchemeDocument, language: Language) -> str:
        criteria = "; ".join(c.text.get(language) for c in doc.eligibility)
        return (
            f"SCHEME: {doc.name.get(language)}\n"
            f"ABOUT: {doc.description.get(language)}\n"
            f"ELIGIBILITY: {criteria}\n"
            f"BENEFITS: {SchemeResponder._join(doc.benefits, language)}\n"
            f"HOW TO APPLY: {doc.application_process.get(language)}"
        )

    @staticmethod
    def _join(texts: list[BilingualText], language: Language) -> str:
        return " ".join(t.get(language) for t in texts if t.get(language))

    @staticmethod
    def _format_history(history: Optional[list[Turn]]) -> str:
        if not history:
            return "(none)"
        return "\n".join(f"{turn.role}: {turn.text}" for turn in history)

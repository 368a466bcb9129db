"""
Language tags shared by the whole engine.

Language A is English, language B is Hindi. "mixed" is only ever a detection
outcome; responses are always produced in one concrete language.
"""

from enum import Enum

from pydantic import BaseModel


class Language(str, Enum):
    """Concrete response / content languages."""
    EN = "en"
    HI = "hi"

    @property
    def other(self) -> "Language":
        return Language.HI if self is Language.EN else Language.EN


class DetectedLanguage(str, Enum):
    """Outcome of utterance language detection."""
    EN = "en"
    HI = "hi"
    MIXED = "mixed"

    def as_language(self) -> "Language | None":
        if self is DetectedLanguage.MIXED:
            return None
        return Language(self.value)


class BilingualText(BaseModel):
    """Text carried in both supported languages."""
    en: str = ""
    hi: str = ""

    def get(self, language: Language) -> str:
        """Return the text in `language`, falling back to the other one."""
        primary = self.en if language is Language.EN else self.hi
        return primary or (self.hi if language is Language.EN else self.en)

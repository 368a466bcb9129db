"""
Scheme document and retrieval-unit models.

- SchemeDocument: one immutable version of a government scheme (bilingual)
- EligibilityCriterion / EligibilityRule: structured or free-text criteria
- UserProfile: transient citizen profile used for eligibility checks
- Chunk: bounded-length section of a scheme version carrying one embedding
- EligibilityResult: derived, never persisted
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .language import BilingualText, Language


class SectionKind(str, Enum):
    """Scheme document sections that are chunked separately."""
    OVERVIEW = "overview"
    ELIGIBILITY = "eligibility"
    BENEFITS = "benefits"
    APPLICATION = "application"


class RuleOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NOT_IN = "not_in"


class UserProfile(BaseModel):
    """Citizen attributes that eligibility rules can compare against."""
    model_config = ConfigDict(validate_assignment=True)

    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[str] = None
    annual_income: Optional[float] = Field(None, ge=0)
    occupation: Optional[str] = None
    state: Optional[str] = None
    social_category: Optional[str] = None
    is_bpl: Optional[bool] = None
    land_holding_acres: Optional[float] = Field(None, ge=0)
    has_disability: Optional[bool] = None

    def merged_with(self, other: "UserProfile") -> "UserProfile":
        """Return a copy where fields set on `other` override this profile."""
        updates = other.model_dump(exclude_none=True)
        return self.model_copy(update=updates)


PROFILE_FIELDS = frozenset(UserProfile.model_fields)


class EligibilityRule(BaseModel):
    """A structured comparison against one UserProfile field."""
    profile_field: str
    operator: RuleOperator
    value: Any

    @field_validator("profile_field")
    @classmethod
    def _known_profile_field(cls, value: str) -> str:
        if value not in PROFILE_FIELDS:
            raise ValueError(f"Unknown profile field in eligibility rule: {value}")
        return value


class EligibilityCriterion(BaseModel):
    """One line of a scheme's eligibility list."""
    text: BilingualText
    rule: Optional[EligibilityRule] = None


class SchemeDocument(BaseModel):
    """One immutable version of a scheme, as curated externally."""
    model_config = ConfigDict(frozen=True)

    scheme_id: str
    version: int = Field(..., ge=1)
    name: BilingualText
    description: BilingualText
    eligibility: list[EligibilityCriterion] = Field(default_factory=list)
    benefits: list[BilingualText] = Field(default_factory=list)
    application_process: BilingualText = Field(default_factory=BilingualText)
    category: str = "general"
    target_audience: list[str] = Field(default_factory=list)
    updated_at: datetime
    verified_at: datetime


class EligibilityResult(BaseModel):
    """Outcome of checking a profile against a scheme's eligibility list."""
    scheme_id: str
    eligible: bool
    matched: list[str] = Field(default_factory=list)
    unmatched: list[str] = Field(default_factory=list)
    missing_information: list[str] = Field(default_factory=list)
    explanation: str = ""


@dataclass
class Chunk:
    """Retrieval unit derived from one section of one scheme version."""
    chunk_id: str
    scheme_id: str
    scheme_version: int
    section: SectionKind
    language: Language
    category: str
    text: str
    embedding: Optional[list[float]] = None

    def to_dict(self) -> dict:
        return {
            "chunk_id": self.chunk_id,
            "scheme_id": self.scheme_id,
            "scheme_version": self.scheme_version,
            "section": self.section.value,
            "language": self.language.value,
            "category": self.category,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Chunk":
        return cls(
            chunk_id=data["chunk_id"],
            scheme_id=data["scheme_id"],
            scheme_version=int(data["scheme_version"]),
            section=SectionKind(data["section"]),
            language=Language(data["language"]),
            category=data.get("category", "general"),
            text=data["text"],
        )


@dataclass
class SearchHit:
    """A chunk returned by search with its scores."""
    chunk: Chunk
    score: float
    vector_score: float = 0.0
    keyword_score: float = 0.0
    rerank_score: Optional[float] = None
    verified_at: Optional[datetime] = None

    @property
    def scheme_id(self) -> str:
        return self.chunk.scheme_id


@dataclass
class RetrievalResult:
    """Ranked hits for one query plus how the search was scoped."""
    query: str
    language: Optional[Language]
    hits: list[SearchHit] = field(default_factory=list)
    category: Optional[str] = None
    cross_language: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.hits

    def scheme_ids(self) -> list[str]:
        """Distinct scheme ids in rank order."""
        seen: list[str] = []
        for hit in self.hits:
            if hit.scheme_id not in seen:
                seen.append(hit.scheme_id)
        return seen

"""
Schema-constrained extraction of structured records from citizen text.

The generation collaborator is asked for JSON matching a fixed schema; the
reply is validated with pydantic before use. A reply that fails validation
gets exactly one stricter re-prompt, after which ValidationError is raised
so the orchestrator can ask the citizen a targeted question instead.
"""

import logging
import re
from typing import Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ValidationError
from ..llm import Generator, extract_json_block
from ..models import IssueDetails, IssueType, Location, Severity, UserProfile
from ..retrieval.intent import detect_issue_type

logger = logging.getLogger(__name__)

ISSUE_TYPE_VALUES = [t.value for t in IssueType]
SEVERITY_VALUES = [s.value for s in Severity]

HEURISTIC_CONFIDENCE = 0.3

_URGENT_WORDS = ["urgent", "dangerous", "accident", "emergency", "खतरनाक", "दुर्घटना", "तुरंत", "jaldi"]


class _LocationPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str = ""
    landmark: Optional[str] = None
    city: str = ""
    state: str = ""


class _IssuePayload(BaseModel):
    """Exact shape the model must return."""
    model_config = ConfigDict(extra="forbid")

    issue_type: Optional[IssueType] = None
    description: str = ""
    location: _LocationPayload = Field(default_factory=_LocationPayload)
    severity: Severity = Severity.MEDIUM
    confidence: float = Field(0.5, ge=0.0, le=1.0)

    @field_validator("issue_type", mode="before")
    @classmethod
    def _blank_type_is_none(cls, value):
        return None if value in ("", "null", "unknown") else value


class _ProfilePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[str] = None
    annual_income: Optional[float] = Field(None, ge=0)
    occupation: Optional[str] = None
    state: Optional[str] = None
    social_category: Optional[str] = None
    is_bpl: Optional[bool] = None
    land_holding_acres: Optional[float] = Field(None, ge=0)
    has_disability: Optional[bool] = None


class _SchemaExtractor:
    """Prompt, validate, re-prompt once."""

    STRICT_SUFFIX = """
    IMPORTANT: Your previous reply was not valid. Return ONLY one JSON object,
    with exactly the keys shown, no extra keys, no comments and no markdown.
    Use null for anything the text does not say.
    """

    payload_model: type[BaseModel]

    def __init__(self, generator: Optional[Generator] = None):
        self.generator = generator

    def _extract_payload(self, prompt: str) -> BaseModel:
        last_error = None
        for attempt, text in enumerate((prompt, prompt + self.STRICT_SUFFIX), start=1):
            raw = self.generator.generate(text)
            try:
                return self.payload_model.model_validate_json(extract_json_block(raw))
            except pydantic.ValidationError as e:
                logger.warning(f"{type(self).__name__} attempt {attempt} returned invalid JSON: {e.error_count()} errors")
                last_error = e
        raise ValidationError(f"{type(self).__name__} output failed schema validation") from last_error


class IssueExtractor(_SchemaExtractor):
    PROMPT = """
    Extract a civic issue report from the citizen's message. The message may be
    in English, Hindi or a mix of both; write the description in the same language.

    Allowed issue_type values: {types}
    Allowed severity values: {severities}

    Message: "{text}"

    Return strictly in JSON format with these EXACT keys:
    {{"issue_type": <one allowed value or null>,
      "description": "<one sentence describing the problem>",
      "location": {{"address": "", "landmark": null, "city": "", "state": ""}},
      "severity": <one allowed value>,
      "confidence": <float between 0 and 1>}}
    Leave city or state empty if the message does not say them. Do not guess.
    """

    payload_model = _IssuePayload

    def extract(self, text: str) -> IssueDetails:
        """Turn a free-text issue description into IssueDetails.

        Without a generator, a keyword heuristic produces a low-confidence result.

        Raises:
            ValidationError: the reply failed validation twice.
        """
        if self.generator is None:
            return self.heuristic(text)

        prompt = self.PROMPT.format(
            types=", ".join(ISSUE_TYPE_VALUES),
            severities=", ".join(SEVERITY_VALUES),
            text=text,
        )
        payload = self._extract_payload(prompt)
        return IssueDetails(
            issue_type=payload.issue_type,
            description=payload.description.strip(),
            location=Location(**payload.location.model_dump()),
            severity=payload.severity,
            confidence=payload.confidence,
        )

    @staticmethod
    def heuristic(text: str) -> IssueDetails:
        lowered = text.lower()
        severity = Severity.HIGH if any(w in lowered for w in _URGENT_WORDS) else Severity.MEDIUM
        return IssueDetails(
            issue_type=detect_issue_type(text),
            description=text.strip(),
            severity=severity,
            confidence=HEURISTIC_CONFIDENCE,
        )


class ProfileExtractor(_SchemaExtractor):
    PROMPT = """
    Extract facts about the citizen from their message for a government scheme
    eligibility check. The message may be in English, Hindi or a mix.

    Message: "{text}"

    Return strictly in JSON format with these EXACT keys (null when not stated):
    {{"age": int, "gender": "male"|"female"|"other", "annual_income": number (rupees per year),
      "occupation": string (e.g. "farmer", "student"), "state": string,
      "social_category": "general"|"obc"|"sc"|"st", "is_bpl": bool,
      "land_holding_acres": number, "has_disability": bool}}
    """

    payload_model = _ProfilePayload

    _AGE = re.compile(r"\b(\d{1,3})\s*(?:years?|yrs?|साल|वर्ष|saal)", re.IGNORECASE)
    _ACRES = re.compile(r"\b(\d+(?:\.\d+)?)\s*(?:acres?|एकड़|ekad)", re.IGNORECASE)
    _OCCUPATIONS = {
        "farmer": ["farmer", "kisan", "किसान", "खेती"],
        "student": ["student", "छात्र", "छात्रा", "padhai"],
        "labourer": ["labourer", "laborer", "mazdoor", "मजदूर"],
    }

    def extract(self, text: str) -> UserProfile:
        """Profile facts stated in `text`; unknown fields stay None."""
        if self.generator is None:
            return self.heuristic(text)
        payload = self._extract_payload(self.PROMPT.format(text=text))
        return UserProfile(**payload.model_dump())

    @classmethod
    def heuristic(cls, text: str) -> UserProfile:
        lowered = text.lower()
        values = {}
        match = cls._AGE.search(lowered)
        if match:
            values["age"] = int(match.group(1))
        match = cls._ACRES.search(lowered)
        if match:
            values["land_holding_acres"] = float(match.group(1))
        for occupation, words in cls._OCCUPATIONS.items():
            if any(w in lowered for w in words):
                values["occupation"] = occupation
                break
        if "bpl" in lowered or "बीपीएल" in lowered:
            values["is_bpl"] = True
        return UserProfile(**values)

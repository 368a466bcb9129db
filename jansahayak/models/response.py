"""
Orchestrator response model.

`data` is a tagged union so downstream renderers can pattern-match on `kind`.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .issue import IssueReport
from .language import Language
from .scheme import EligibilityResult


class SchemeMatch(BaseModel):
    scheme_id: str
    name: str
    category: str
    score: float


class SchemeResultSet(BaseModel):
    kind: Literal["scheme_results"] = "scheme_results"
    items: list[SchemeMatch] = Field(default_factory=list)
    cross_language: bool = False


class IssueReportData(BaseModel):
    kind: Literal["issue_report"] = "issue_report"
    report: IssueReport


class EligibilityData(BaseModel):
    kind: Literal["eligibility"] = "eligibility"
    result: EligibilityResult


ResponseData = Annotated[
    Union[SchemeResultSet, IssueReportData, EligibilityData],
    Field(discriminator="kind"),
]


class Response(BaseModel):
    """What one conversational turn returns to the transport layer."""
    text: str
    language: Language
    suggestions: list[str] = Field(default_factory=list)
    data: Optional[ResponseData] = None
    speech_segments: list[str] = Field(default_factory=list)
    degraded: bool = False

"""
Civic issue report models.

The status history of a report is append-only and the current status is
always the status of its last history entry.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class IssueType(str, Enum):
    """Closed set of reportable civic issues."""
    POTHOLE = "pothole"
    ROAD_DAMAGE = "road_damage"
    STREETLIGHT = "streetlight"
    GARBAGE = "garbage"
    WATER_SUPPLY = "water_supply"
    SEWAGE_DRAINAGE = "sewage_drainage"
    ELECTRICITY = "electricity"
    ENCROACHMENT = "encroachment"
    NOISE = "noise"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueStatus(str, Enum):
    """Server-authoritative issue lifecycle."""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CLOSED = "closed"


# Legal transitions; CLOSED is terminal.
ALLOWED_TRANSITIONS: dict[IssueStatus, frozenset[IssueStatus]] = {
    IssueStatus.SUBMITTED: frozenset({IssueStatus.UNDER_REVIEW}),
    IssueStatus.UNDER_REVIEW: frozenset({IssueStatus.IN_PROGRESS}),
    IssueStatus.IN_PROGRESS: frozenset({IssueStatus.RESOLVED, IssueStatus.REJECTED}),
    IssueStatus.RESOLVED: frozenset({IssueStatus.CLOSED}),
    IssueStatus.REJECTED: frozenset({IssueStatus.CLOSED}),
    IssueStatus.CLOSED: frozenset(),
}

REQUIRED_ISSUE_FIELDS = ("issue_type", "description", "city", "state")


class Location(BaseModel):
    """Where the issue is. City and state are required on a filed report."""
    address: str = ""
    landmark: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    city: str = ""
    state: str = ""


class IssueDetails(BaseModel):
    """Structured record extracted from a free-text issue description."""
    issue_type: Optional[IssueType] = None
    description: str = ""
    location: Location = Field(default_factory=Location)
    severity: Severity = Severity.MEDIUM
    confidence: float = Field(0.0, ge=0.0, le=1.0)

    def missing_fields(self) -> list[str]:
        """Required fields that are still empty, in asking order."""
        missing = []
        if self.issue_type is None:
            missing.append("issue_type")
        if not self.description.strip():
            missing.append("description")
        if not self.location.city.strip():
            missing.append("city")
        if not self.location.state.strip():
            missing.append("state")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


class StatusHistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: IssueStatus
    timestamp: datetime
    notes: str = ""


class FollowUpComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    timestamp: datetime
    author: str = "citizen"


class IssueReport(BaseModel):
    """A filed civic issue, retained for tracking and never deleted."""
    tracking_id: str
    issue_type: IssueType
    description: str
    location: Location
    severity: Severity = Severity.MEDIUM
    status_history: list[StatusHistoryEntry] = Field(..., min_length=1)
    follow_ups: list[FollowUpComment] = Field(default_factory=list)
    created_at: datetime

    @computed_field
    @property
    def status(self) -> IssueStatus:
        return self.status_history[-1].status

    @property
    def last_updated_at(self) -> datetime:
        return self.status_history[-1].timestamp

"""
Civic issue reports: creation, lookup, follow-ups and the status webhook.

Status changes come only from the external case-management system through
`apply_status_update`; the conversation only reads status and appends
follow-up comments, which never change it.
"""

import logging
import secrets
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from ..errors import IllegalTransitionError, NotFoundError, ValidationError
from ..models import (
    ALLOWED_TRANSITIONS,
    FollowUpComment,
    IssueDetails,
    IssueReport,
    IssueStatus,
    IssueType,
    StatusHistoryEntry,
)

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "JS"
_MAX_ID_ATTEMPTS = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_tracking_id(created_at: datetime, suffix: int) -> str:
    """JS-YYYYMMDD-NNNNN from the UTC creation date and a 5-digit suffix."""
    day = created_at.astimezone(timezone.utc) if created_at.tzinfo else created_at
    return f"{TRACKING_PREFIX}-{day:%Y%m%d}-{suffix:05d}"


class InMemoryIssueRepository:
    """Issue report storage keyed by tracking id. Reports are never deleted."""

    def __init__(self):
        self._reports: dict[str, IssueReport] = {}
        self._lock = threading.Lock()

    def exists(self, tracking_id: str) -> bool:
        with self._lock:
            return tracking_id in self._reports

    def insert(self, report: IssueReport) -> bool:
        """Store a new report; False if the tracking id is taken."""
        with self._lock:
            if report.tracking_id in self._reports:
                return False
            self._reports[report.tracking_id] = report.model_copy(deep=True)
            return True

    def get(self, tracking_id: str) -> IssueReport:
        with self._lock:
            report = self._reports.get(tracking_id)
            if report is None:
                raise NotFoundError("issue", tracking_id)
            return report.model_copy(deep=True)

    def update(self, tracking_id: str, mutate: Callable[[IssueReport], IssueReport]) -> IssueReport:
        """Apply `mutate` to the stored report under the lock."""
        with self._lock:
            report = self._reports.get(tracking_id)
            if report is None:
                raise NotFoundError("issue", tracking_id)
            updated = mutate(report.model_copy(deep=True))
            self._reports[tracking_id] = updated
            return updated.model_copy(deep=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)


class IssueTracker:
    """Issue lifecycle operations over a repository."""

    def __init__(
        self,
        repository: Optional[InMemoryIssueRepository] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository or InMemoryIssueRepository()
        self.clock = clock

    def new_tracking_id(self, created_at: datetime) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = format_tracking_id(created_at, secrets.randbelow(100_000))
            if not self.repository.exists(candidate):
                return candidate
        raise ValidationError(f"Could not allocate a tracking id for {created_at:%Y-%m-%d}")

    def build_report(self, details: IssueDetails, created_at: Optional[datetime] = None) -> IssueReport:
        """A SUBMITTED report from extracted details; does not store it.

        Missing type/description/city/state are filled with best-effort defaults.
        """
        created_at = created_at or self.clock()
        location = details.location.model_copy(update={
            "city": details.location.city.strip() or "unspecified",
            "state": details.location.state.strip() or "unspecified",
        })
        return IssueReport(
            tracking_id=self.new_tracking_id(created_at),
            issue_type=details.issue_type or IssueType.OTHER,
            description=details.description.strip() or "(no description given)",
            location=location,
            severity=details.severity,
            status_history=[StatusHistoryEntry(status=IssueStatus.SUBMITTED, timestamp=created_at)],
            created_at=created_at,
        )

    def save_report(self, report: IssueReport) -> IssueReport:
        """Persist a report built by `build_report`, re-keying on id collision."""
        while not self.repository.insert(report):
            logger.warning(f"Tracking id collision on {report.tracking_id}, regenerating")
            report = report.model_copy(update={"tracking_id": self.new_tracking_id(report.created_at)})
        logger.info(f"Filed issue {report.tracking_id} ({report.issue_type.value}, {report.location.city})")
        return report

    def create_report(self, details: IssueDetails) -> IssueReport:
        return self.save_report(self.build_report(details))

    def get_report(self, tracking_id: str) -> IssueReport:
        return self.repository.get(tracking_id.strip().upper())

    def get_issue_status(self, tracking_id: str) -> IssueStatus:
        """Current status; raises NotFoundError for unknown ids."""
        return self.get_report(tracking_id).status

    def add_follow_up(self, tracking_id: str, text: str, author: str = "citizen") -> IssueReport:
        """Append a citizen comment. Status is unchanged."""
        if not text.strip():
            raise ValidationError("Follow-up comment is empty")
        comment = FollowUpComment(text=text.strip(), timestamp=self.clock(), author=author)

        def append(report: IssueReport) -> IssueReport:
            return report.model_copy(update={"follow_ups": report.follow_ups + [comment]})

        return self.repository.update(tracking_id.strip().upper(), append)

    def apply_status_update(
        self,
        tracking_id: str,
        new_status: IssueStatus,
        notes: str = "",
        timestamp: Optional[datetime] = None,
    ) -> IssueReport:
        """Case-management webhook: append a legal status transition.

        Raises:
            NotFoundError: unknown tracking id.
            ValidationError: illegal transition or out-of-order timestamp.
        """
        timestamp = timestamp or self.clock()

        def transition(report: IssueReport) -> IssueReport:
            current = report.status
            if new_status not in ALLOWED_TRANSITIONS[current]:
                raise IllegalTransitionError(
                    f"Illegal status transition for {report.tracking_id}: {current.value} -> {new_status.value}"
                )
            if timestamp < report.last_updated_at:
                raise ValidationError(
                    f"Status update for {report.tracking_id} is older than its last history entry"
                )
            entry = StatusHistoryEntry(status=new_status, timestamp=timestamp, notes=notes)
            return report.model_copy(update={"status_history": report.status_history + [entry]})

        updated = self.repository.update(tracking_id.strip().upper(), transition)
        logger.info(f"Issue {updated.tracking_id} -> {new_status.value}")
        return updated

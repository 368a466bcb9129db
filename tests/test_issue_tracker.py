"""
Tests for the civic issue lifecycle and tracking ids.

Run with: pytest tests/test_issue_tracker.py -v
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from jansahayak.errors import IllegalTransitionError, NotFoundError, ValidationError
from jansahayak.issues import IssueTracker, format_tracking_id
from jansahayak.models import IssueDetails, IssueStatus, IssueType, Location, Severity

TRACKING_ID = re.compile(r"^JS-\d{8}-\d{5}$")


@pytest.fixture
def report(tracker):
    return tracker.create_report(IssueDetails(
        issue_type=IssueType.STREETLIGHT,
        description="Streetlight not working for two weeks",
        location=Location(address="MG Road", city="Lucknow", state="Uttar Pradesh"),
        severity=Severity.MEDIUM,
        confidence=0.9,
    ))


# =============================================================================
# CREATION
# =============================================================================

class TestCreateReport:
    """Filing reports and tracking id allocation."""

    def test_new_report_is_submitted(self, report, clock):
        assert TRACKING_ID.match(report.tracking_id)
        assert report.tracking_id.startswith("JS-20250301-")
        assert report.status is IssueStatus.SUBMITTED
        assert len(report.status_history) == 1
        assert report.created_at == clock.now

    def test_missing_fields_get_defaults(self, tracker):
        """A best-effort report still carries city, state, type and description."""
        filed = tracker.create_report(IssueDetails())

        assert filed.issue_type is IssueType.OTHER
        assert filed.location.city == "unspecified"
        assert filed.location.state == "unspecified"
        assert filed.description

    def test_tracking_ids_are_unique(self, tracker):
        ids = {tracker.create_report(IssueDetails(description=f"issue {n}")).tracking_id for n in range(50)}
        assert len(ids) == 50

    def test_collision_is_rekeyed_on_save(self, tracker, report):
        """A report built with a taken id is saved under a fresh one."""
        duplicate = report.model_copy(update={"description": "another issue"})

        saved = tracker.save_report(duplicate)

        assert saved.tracking_id != report.tracking_id
        assert tracker.get_report(report.tracking_id).description == report.description
        assert len(tracker.repository) == 2

    def test_format_tracking_id_uses_utc_date(self):
        late_evening_ist = datetime(2025, 1, 1, 23, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert format_tracking_id(late_evening_ist, 42) == "JS-20250101-00042"


# =============================================================================
# LOOKUP AND FOLLOW-UPS
# =============================================================================

class TestLookup:
    """Status lookup and citizen comments."""

    def test_unknown_id_raises_not_found(self, tracker):
        with pytest.raises(NotFoundError) as exc:
            tracker.get_issue_status("JS-20250101-00042")
        assert exc.value.kind == "issue"

    def test_lookup_ignores_case_and_whitespace(self, tracker, report):
        assert tracker.get_issue_status(f"  {report.tracking_id.lower()} ") is IssueStatus.SUBMITTED

    def test_follow_up_does_not_change_status(self, tracker, report):
        updated = tracker.add_follow_up(report.tracking_id, "Still dark at night")

        assert updated.status is IssueStatus.SUBMITTED
        assert [c.text for c in updated.follow_ups] == ["Still dark at night"]
        assert updated.status_history == report.status_history

    def test_empty_follow_up_is_rejected(self, tracker, report):
        with pytest.raises(ValidationError):
            tracker.add_follow_up(report.tracking_id, "   ")

    def test_follow_up_on_unknown_issue(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.add_follow_up("JS-20250101-00042", "hello")

    def test_returned_reports_are_copies(self, tracker, report):
        """Mutating a returned report does not touch the stored one."""
        fetched = tracker.get_report(report.tracking_id)
        fetched.description = "changed"

        assert tracker.get_report(report.tracking_id).description == report.description


# =============================================================================
# STATUS LIFECYCLE
# =============================================================================

class TestStatusUpdates:
    """Case-management webhook transitions."""

    def test_full_lifecycle_appends_history(self, tracker, report, clock):
        for status in (IssueStatus.UNDER_REVIEW, IssueStatus.IN_PROGRESS,
                       IssueStatus.RESOLVED, IssueStatus.CLOSED):
            clock.advance(hours=1)
            updated = tracker.apply_status_update(report.tracking_id, status, notes=status.value)

        assert updated.status is IssueStatus.CLOSED
        assert [e.status for e in updated.status_history] == [
            IssueStatus.SUBMITTED,
            IssueStatus.UNDER_REVIEW,
            IssueStatus.IN_PROGRESS,
            IssueStatus.RESOLVED,
            IssueStatus.CLOSED,
        ]
        timestamps = [e.timestamp for e in updated.status_history]
        assert timestamps == sorted(timestamps)

    def test_rejected_issue_can_be_closed(self, tracker, report):
        for status in (IssueStatus.UNDER_REVIEW, IssueStatus.IN_PROGRESS, IssueStatus.REJECTED, IssueStatus.CLOSED):
            updated = tracker.apply_status_update(report.tracking_id, status)
        assert updated.status is IssueStatus.CLOSED

    def test_skipping_a_step_is_illegal(self, tracker, report):
        with pytest.raises(IllegalTransitionError):
            tracker.apply_status_update(report.tracking_id, IssueStatus.RESOLVED)
        assert tracker.get_issue_status(report.tracking_id) is IssueStatus.SUBMITTED

    def test_closed_is_terminal(self, tracker, report):
        for status in (IssueStatus.UNDER_REVIEW, IssueStatus.IN_PROGRESS, IssueStatus.RESOLVED, IssueStatus.CLOSED):
            tracker.apply_status_update(report.tracking_id, status)

        for status in IssueStatus:
            with pytest.raises(IllegalTransitionError):
                tracker.apply_status_update(report.tracking_id, status)

    def test_out_of_order_timestamp_is_rejected(self, tracker, report, clock):
        """History timestamps never go backwards."""
        with pytest.raises(ValidationError):
            tracker.apply_status_update(
                report.tracking_id,
                IssueStatus.UNDER_REVIEW,
                timestamp=clock.now - timedelta(minutes=5),
            )
        assert len(tracker.get_report(report.tracking_id).status_history) == 1

    def test_illegal_transition_is_a_validation_error(self):
        assert issubclass(IllegalTransitionError, ValidationError)

    def test_unknown_issue_update(self):
        with pytest.raises(NotFoundError):
            IssueTracker().apply_status_update("JS-20250101-00042", IssueStatus.UNDER_REVIEW)

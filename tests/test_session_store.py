"""
Tests for the in-memory session store and the Session model.

Run with: pytest tests/test_session_store.py -v
"""

from datetime import timedelta

import pydantic
import pytest

from jansahayak.conversation import InMemorySessionStore
from jansahayak.errors import CapacityError, ConflictError, NotFoundError
from jansahayak.models import (
    ClarificationRequest,
    DialogueState,
    Language,
    Session,
    Topic,
    Turn,
)

TTL = timedelta(minutes=30)


def _session(clock, session_id="s-1"):
    return Session.start(session_id, clock(), TTL)


# =============================================================================
# STORE
# =============================================================================

class TestInMemorySessionStore:
    """TTL, conditional writes and capacity."""

    def test_put_then_get(self, sessions, clock):
        stored = sessions.put(_session(clock), TTL)

        assert stored.revision == 1
        assert sessions.get("s-1").session_id == "s-1"

    def test_missing_session_is_not_found(self, sessions):
        with pytest.raises(NotFoundError):
            sessions.get("nobody")

    def test_expired_session_is_indistinguishable_from_missing(self, sessions, clock):
        sessions.put(_session(clock), TTL)
        clock.advance(minutes=31)

        with pytest.raises(NotFoundError):
            sessions.get("s-1")
        assert len(sessions) == 0

    def test_put_if_revision_succeeds_on_match(self, sessions, clock):
        first = sessions.put_if_revision(_session(clock), TTL, None)
        second = sessions.put_if_revision(first, TTL, first.revision)

        assert (first.revision, second.revision) == (1, 2)

    def test_stale_revision_conflicts(self, sessions, clock):
        """Two writers read revision 1; only the first commit wins."""
        sessions.put_if_revision(_session(clock), TTL, None)
        reader_a = sessions.get("s-1")
        reader_b = sessions.get("s-1")

        sessions.put_if_revision(reader_a, TTL, reader_a.revision)
        with pytest.raises(ConflictError):
            sessions.put_if_revision(reader_b, TTL, reader_b.revision)

    def test_creating_an_existing_session_conflicts(self, sessions, clock):
        sessions.put_if_revision(_session(clock), TTL, None)

        with pytest.raises(ConflictError):
            sessions.put_if_revision(_session(clock), TTL, None)

    def test_capacity_is_enforced_for_new_sessions(self, clock):
        store = InMemorySessionStore(max_sessions=2, clock=clock)
        store.put(_session(clock, "a"), TTL)
        store.put(_session(clock, "b"), TTL)

        with pytest.raises(CapacityError):
            store.put(_session(clock, "c"), TTL)
        # Existing sessions can still be written
        store.put(store.get("a"), TTL)

    def test_expired_sessions_free_capacity(self, clock):
        store = InMemorySessionStore(max_sessions=1, clock=clock)
        store.put(_session(clock, "a"), TTL)
        clock.advance(minutes=31)

        store.put(_session(clock, "b"), TTL)

        assert len(store) == 1

    def test_store_holds_copies(self, sessions, clock):
        session = _session(clock)
        sessions.put(session, TTL)
        session.recent_schemes.append("pm-kisan")

        assert sessions.get("s-1").recent_schemes == []

    def test_delete(self, sessions, clock):
        sessions.put(_session(clock), TTL)
        sessions.delete("s-1")
        sessions.delete("s-1")

        with pytest.raises(NotFoundError):
            sessions.get("s-1")


# =============================================================================
# SESSION MODEL
# =============================================================================

class TestSession:
    """Session invariants maintained by its own methods."""

    def test_touch_moves_expiry(self, clock):
        session = _session(clock)
        clock.advance(minutes=10)

        session.touch(clock(), TTL)

        assert session.last_active_at == clock.now
        assert session.expires_at == clock.now + TTL
        assert not session.is_expired(clock.now + timedelta(minutes=29))
        assert session.is_expired(clock.now + timedelta(minutes=31))

    def test_terminated_session_cannot_be_resumed(self, clock):
        session = _session(clock)
        clock.advance(minutes=31)

        session.terminate()

        assert session.state is DialogueState.TERMINATED
        with pytest.raises(ValueError, match="terminated"):
            session.touch(clock(), TTL)
        assert session.expires_at < clock.now

    def test_history_evicts_oldest(self, clock):
        session = _session(clock)
        for n in range(5):
            session.add_turn(Turn(role="user", text=f"turn {n}", language=Language.EN, timestamp=clock()), 3)

        assert [t.text for t in session.history] == ["turn 2", "turn 3", "turn 4"]
        assert [t.text for t in session.recent_history(2)] == ["turn 3", "turn 4"]

    def test_remember_schemes_puts_latest_first(self, clock):
        session = _session(clock)
        session.remember_schemes(["a", "b"], limit=3)
        session.remember_schemes(["c", "a"], limit=3)

        assert session.recent_schemes == ["c", "a", "b"]

    def test_reset_topic_keeps_history(self, clock):
        session = _session(clock)
        session.add_turn(Turn(role="user", text="hi", language=Language.EN, timestamp=clock()), 10)
        session.slots.scheme.category = "health"
        session.pending_clarifications = [
            ClarificationRequest(topic=Topic.ISSUE_REPORTING, slot="city", question="Which city?")
        ]
        session.clarification_rounds = 1

        session.reset_topic(Topic.SCHEME_DISCOVERY)

        assert session.topic is Topic.SCHEME_DISCOVERY
        assert session.state is DialogueState.ACTIVE
        assert session.slots.scheme.category is None
        assert session.pending_clarifications == []
        assert session.clarification_rounds == 0
        assert len(session.history) == 1

    def test_slots_are_validated_on_assignment(self, clock):
        """Slot values of the wrong type are rejected at write time."""
        session = _session(clock)

        with pytest.raises(pydantic.ValidationError):
            session.slots.issue.issue_type = "not-a-type"
        with pytest.raises(pydantic.ValidationError):
            session.slots.scheme.profile.age = -4

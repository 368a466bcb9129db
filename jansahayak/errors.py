"""
Error taxonomy for the Jan Sahayak conversation engine.

Every component-level failure is converted to one of these kinds before it
reaches the dialogue orchestrator boundary:
- TransientDependencyError: network / rate-limit / timeout, retried then degraded
- ValidationError: schema mismatch or illegal state change, triggers clarification
- NotFoundError: unknown scheme, tracking id or session
- CapacityError: a store is at its configured limit
- ConflictError: concurrent write detected on the same session

IllegalTransitionError is the ValidationError raised for a forbidden issue
status change.
"""


class CivicAssistError(Exception):
    """Base class for all engine errors."""


class DependencyError(CivicAssistError):
    """An external collaborator failed in a way that retrying will not fix."""


class TransientDependencyError(DependencyError):
    """Network, rate-limit or timeout failure of an external collaborator."""


class ValidationError(CivicAssistError):
    """Malformed extraction output, schema mismatch or illegal transition."""


class NotFoundError(CivicAssistError):
    """The requested scheme, tracking id or session does not exist."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class CapacityError(CivicAssistError):
    """A store reached its configured capacity."""


class ConflictError(CivicAssistError):
    """A concurrent write for the same session id was detected."""


class IllegalTransitionError(ValidationError):
    """An issue status change not allowed by the lifecycle."""

"""
Civic issue tracking.
"""

from .tracker import InMemoryIssueRepository, IssueTracker, format_tracking_id

__all__ = ["InMemoryIssueRepository", "IssueTracker", "format_tracking_id"]

"""
Structured extraction from free-form citizen text.
"""

from .extractor import IssueExtractor, ProfileExtractor

__all__ = ["IssueExtractor", "ProfileExtractor"]

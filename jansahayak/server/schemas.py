"""
Request and response schemas for the HTTP API.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..models import DetectedLanguage, IssueStatus, Language, UserProfile


class TurnRequest(BaseModel):
    """One citizen utterance within a session."""
    session_id: str = Field(..., min_length=1, max_length=128, description="Opaque session identifier")
    utterance: str = Field(..., max_length=2000, description="Transcribed citizen utterance")
    language: Optional[DetectedLanguage] = Field(
        None, description="Language tag from the transcription collaborator, if known"
    )


class EligibilityRequest(BaseModel):
    profile: UserProfile = Field(default_factory=UserProfile)
    language: Language = Language.EN


class StatusUpdateRequest(BaseModel):
    """Case-management webhook payload."""
    status: IssueStatus
    notes: str = ""
    timestamp: Optional[datetime] = Field(None, description="Defaults to the time of receipt")


class CommentRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)
    author: str = "citizen"


class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy | initializing")
    version: str
    knowledge_base_loaded: bool
    llm_available: bool
    schemes: int = 0
    chunks: int = 0


class ErrorResponse(BaseModel):
    error: str
    message: str

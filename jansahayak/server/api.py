"""
API route definitions for the Jan Sahayak server.
"""

import logging
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException

from ..conversation import DialogueOrchestrator
from ..errors import CapacityError, ConflictError, IllegalTransitionError, NotFoundError, ValidationError
from ..issues import IssueTracker
from ..models import EligibilityResult, IssueReport, Response, SchemeDocument
from ..retrieval import SchemeRetriever
from .config import Settings, get_settings
from .dependencies import (
    get_issue_tracker,
    get_orchestrator,
    get_retriever,
    is_initialized,
    is_llm_available,
)
from .schemas import (
    CommentRequest,
    EligibilityRequest,
    ErrorResponse,
    HealthResponse,
    StatusUpdateRequest,
    TurnRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Not found"}}


def _raise_not_found(e: NotFoundError) -> NoReturn:
    raise HTTPException(
        status_code=404,
        detail={"error": f"{e.kind}_not_found", "message": str(e)},
    )


# ============================================================================
# CONVERSATION
# ============================================================================

@router.post(
    "/assistant/turn",
    response_model=Response,
    summary="Process one citizen utterance",
    description="""
Run one conversational turn for a session.

The response is always a natural-language message in the citizen's language;
collaborator failures produce a degraded fallback (`degraded: true`) rather
than an HTTP error. `data` carries structured results tagged by `kind`:
`scheme_results`, `issue_report` or `eligibility`.
""",
    tags=["Assistant"],
)
async def assistant_turn(
    request: TurnRequest,
    orchestrator: Annotated[DialogueOrchestrator, Depends(get_orchestrator)],
) -> Response:
    logger.info(f"Turn for session {request.session_id}: {request.utterance[:80]}")
    try:
        return await orchestrator.process(request.session_id, request.utterance, request.language)
    except (CapacityError, ConflictError) as e:
        logger.error(f"Turn for session {request.session_id} could not be stored: {e}")
        raise HTTPException(status_code=503, detail={"error": "session_unavailable", "message": "Please try again shortly."})


# ============================================================================
# SCHEMES
# ============================================================================

@router.get(
    "/schemes/{scheme_id}",
    response_model=SchemeDocument,
    responses=NOT_FOUND,
    summary="Current version of a scheme",
    tags=["Schemes"],
)
def get_scheme(
    scheme_id: str,
    retriever: Annotated[SchemeRetriever, Depends(get_retriever)],
) -> SchemeDocument:
    try:
        return retriever.get_document(scheme_id)
    except NotFoundError as e:
        _raise_not_found(e)


@router.post(
    "/schemes/{scheme_id}/eligibility",
    response_model=EligibilityResult,
    responses=NOT_FOUND,
    summary="Check a citizen profile against a scheme",
    tags=["Schemes"],
)
def check_eligibility(
    scheme_id: str,
    request: EligibilityRequest,
    retriever: Annotated[SchemeRetriever, Depends(get_retriever)],
) -> EligibilityResult:
    try:
        return retriever.check_eligibility(scheme_id, request.profile, request.language)
    except NotFoundError as e:
        _raise_not_found(e)


# ============================================================================
# ISSUES
# ============================================================================

@router.get(
    "/issues/{tracking_id}",
    response_model=IssueReport,
    responses=NOT_FOUND,
    summary="Issue report with status history",
    tags=["Issues"],
)
def get_issue(
    tracking_id: str,
    tracker: Annotated[IssueTracker, Depends(get_issue_tracker)],
) -> IssueReport:
    try:
        return tracker.get_report(tracking_id)
    except NotFoundError as e:
        _raise_not_found(e)


@router.post(
    "/issues/{tracking_id}/status",
    response_model=IssueReport,
    responses={
        **NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Transition not allowed from the current status"},
        422: {"model": ErrorResponse, "description": "Out-of-order update"},
    },
    summary="Case-management status webhook",
    tags=["Issues"],
)
def update_issue_status(
    tracking_id: str,
    request: StatusUpdateRequest,
    tracker: Annotated[IssueTracker, Depends(get_issue_tracker)],
) -> IssueReport:
    try:
        return tracker.apply_status_update(tracking_id, request.status, request.notes, request.timestamp)
    except NotFoundError as e:
        _raise_not_found(e)
    except IllegalTransitionError as e:
        raise HTTPException(status_code=409, detail={"error": "illegal_transition", "message": str(e)})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"error": "invalid_update", "message": str(e)})


@router.post(
    "/issues/{tracking_id}/comments",
    response_model=IssueReport,
    responses=NOT_FOUND,
    summary="Append a follow-up comment",
    tags=["Issues"],
)
def add_comment(
    tracking_id: str,
    request: CommentRequest,
    tracker: Annotated[IssueTracker, Depends(get_issue_tracker)],
) -> IssueReport:
    try:
        return tracker.add_follow_up(tracking_id, request.text, request.author)
    except NotFoundError as e:
        _raise_not_found(e)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"error": "invalid_comment", "message": str(e)})


# ============================================================================
# HEALTH
# ============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the service is healthy and the knowledge base is loaded.",
    tags=["Health"],
)
def health_check(
    settings: Annotated[Settings, Depends(get_settings)]
) -> HealthResponse:
    if not is_initialized():
        return HealthResponse(
            status="initializing",
            version=settings.app_version,
            knowledge_base_loaded=False,
            llm_available=False,
        )
    stats = get_retriever().store.get_stats()
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        knowledge_base_loaded=True,
        llm_available=is_llm_available(),
        schemes=stats.get("schemes", 0),
        chunks=stats.get("current_chunks", 0),
    )

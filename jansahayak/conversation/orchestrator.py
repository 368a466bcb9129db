"""
Dialogue orchestration: one request/response cycle per citizen utterance.

Turn flow:
1. Tag the utterance language and pick the response language
2. Load the session (a missing or expired one is replaced by a fresh session)
3. Route to a topic: rules first, then the current topic, then the model
4. Run the topic handler (retrieval, extraction, issue tracking)
5. Commit the session conditionally on the revision that was read, then
   apply deferred side effects (issue filing, follow-up comments); a failed
   effect writes the pre-turn session back

Every collaborator call goes through `call_with_resilience`. Whatever fails,
the citizen gets a natural-language Response; nothing is committed for a
turn that failed or was cancelled before its commit began.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from ..errors import (
    CapacityError,
    CivicAssistError,
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from ..extraction import IssueExtractor, ProfileExtractor
from ..issues import IssueTracker
from ..llm import Generator, call_with_resilience
from ..messages import ISSUE_LABELS, STATUS_LABELS, label, message
from ..models import (
    ClarificationRequest,
    DetectedLanguage,
    DialogueState,
    EligibilityData,
    IssueDetails,
    IssueReport,
    IssueReportData,
    IssueSlots,
    Language,
    Location,
    Response,
    SchemeMatch,
    SchemeResultSet,
    Session,
    Topic,
    Turn,
    UserProfile,
)
from ..retrieval import SchemeResponder, SchemeRetriever, SearchContext, TopicClassifier
from ..retrieval.intent import (
    detect_eligibility_question,
    detect_follow_up,
    detect_issue_type,
    detect_new_topic,
    detect_rule_topic,
    detect_scheme_category,
    find_tracking_id,
    resolve_ordinal,
)
from .config import OrchestratorConfig
from .language import LanguageDetection, LanguageDetector, choose_response_language
from .session_store import SessionStore
from .speech import segment_for_speech

logger = logging.getLogger(__name__)

# A side effect applied after the session commit; may replace the response
Effect = Callable[[], Awaitable[Optional[Response]]]

ISSUE_QUESTIONS = {
    "issue_type": "ask_issue_type",
    "description": "ask_description",
    "city": "ask_city",
    "state": "ask_state",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Transcript:
    """Output of the speech-to-text collaborator."""
    text: str
    language: Optional[DetectedLanguage] = None
    confidence: float = 1.0


@dataclass
class TurnOutcome:
    response: Response
    effects: list[Effect] = field(default_factory=list)


class DialogueOrchestrator:
    """Composes detection, retrieval, extraction and session state into turns."""

    def __init__(
        self,
        retriever: SchemeRetriever,
        sessions: SessionStore,
        issues: IssueTracker,
        generator: Optional[Generator] = None,
        config: Optional[OrchestratorConfig] = None,
        detector: Optional[LanguageDetector] = None,
        classifier: Optional[TopicClassifier] = None,
        responder: Optional[SchemeResponder] = None,
        issue_extractor: Optional[IssueExtractor] = None,
        profile_extractor: Optional[ProfileExtractor] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.retriever = retriever
        self.sessions = sessions
        self.issues = issues
        self.config = config or OrchestratorConfig()
        self.detector = detector or LanguageDetector()
        self.classifier = classifier or TopicClassifier(generator)
        self.responder = responder or SchemeResponder(generator)
        self.issue_extractor = issue_extractor or IssueExtractor(generator)
        self.profile_extractor = profile_extractor or ProfileExtractor(generator)
        self.clock = clock

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def process(
        self,
        session_id: str,
        utterance: str,
        detected_language: Optional[DetectedLanguage] = None,
    ) -> Response:
        """Handle one citizen utterance. Never raises except on cancellation."""
        detection = self._detect(utterance, detected_language)
        language = choose_response_language(
            detection, self.config.default_language, self.config.language_confidence_threshold
        )
        if not utterance.strip():
            return self._finalize(Response(text=message("repeat_please", language), language=language))

        try:
            return await self._run_turn(session_id, utterance, detection)
        except (ConflictError, CapacityError) as e:
            logger.warning(f"Session {session_id}: {e}")
            return self._finalize(Response(text=message("retry_later", language), language=language, degraded=True))
        except DependencyError as e:
            logger.error(f"Session {session_id}: collaborator failure, serving fallback: {e}")
            return self._fallback(language)
        except CivicAssistError as e:
            logger.error(f"Session {session_id}: {type(e).__name__}: {e}")
            return self._fallback(language)
        except Exception:
            logger.exception(f"Session {session_id}: unexpected failure, serving fallback")
            return self._fallback(language)

    async def process_transcript(self, session_id: str, transcript: Transcript) -> Response:
        """Handle transcribed speech; low confidence asks the citizen to repeat."""
        if transcript.confidence < self.config.transcription_confidence_threshold or not transcript.text.strip():
            concrete = transcript.language.as_language() if transcript.language else None
            language = concrete or self.config.default_language
            logger.info(f"Session {session_id}: transcript confidence {transcript.confidence:.2f}, asking to repeat")
            return self._finalize(Response(text=message("repeat_please", language), language=language))
        return await self.process(session_id, transcript.text, transcript.language)

    # ------------------------------------------------------------------
    # Turn transaction
    # ------------------------------------------------------------------

    async def _run_turn(self, session_id: str, utterance: str, detection: LanguageDetection) -> Response:
        for attempt in (1, 2):
            now = self.clock()
            session, expected_revision = await self._load_session(session_id, now)
            before = session.model_copy(deep=True)
            language = choose_response_language(
                detection, session.language, self.config.language_confidence_threshold
            )
            outcome = await self._handle_turn(session, utterance, language, now)
            try:
                # Once the commit starts it runs to completion even if the caller goes away
                return await asyncio.shield(self._commit(session, before, expected_revision, outcome))
            except ConflictError:
                if attempt == 2:
                    raise
                logger.warning(f"Concurrent write on session {session_id}, recomputing turn")
        raise ConflictError(f"Session {session_id} could not be committed")

    async def _load_session(self, session_id: str, now: datetime) -> tuple[Session, Optional[int]]:
        """Session to work on plus the revision the commit must match."""
        try:
            session = await self._call(
                self.sessions.get, session_id,
                timeout=self.config.store_timeout, operation="session load",
            )
        except NotFoundError:
            logger.info(f"Starting session {session_id}")
            return self._new_session(session_id, now), None

        if session.is_expired(now):
            session.terminate()
            logger.info(f"Session {session_id} expired at {session.expires_at:%H:%M:%S}, starting afresh")
            return self._new_session(session_id, now), session.revision
        return session, session.revision

    def _new_session(self, session_id: str, now: datetime) -> Session:
        return Session.start(session_id, now, self.config.inactivity_window, self.config.default_language)

    async def _commit(
        self,
        session: Session,
        before: Session,
        expected_revision: Optional[int],
        outcome: TurnOutcome,
    ) -> Response:
        """Write the session, then apply deferred effects.

        If an effect fails the pre-turn session is written back, so the
        stored session never records a turn whose effects did not happen.
        """
        stored = await self._call(
            self.sessions.put_if_revision, session, self.config.inactivity_window, expected_revision,
            timeout=self.config.store_timeout, operation="session commit",
        )
        response = outcome.response
        try:
            for effect in outcome.effects:
                replacement = await effect()
                if replacement is not None:
                    response = replacement
        except Exception as e:
            logger.error(f"Session {session.session_id}: side effect failed after commit, undoing the turn: {e}")
            await self._undo_turn(before, stored.revision)
            language = response.language
            return self._finalize(Response(text=message("retry_later", language), language=language, degraded=True))
        return self._finalize(response)

    async def _undo_turn(self, before: Session, committed_revision: int) -> None:
        try:
            await self._call(
                self.sessions.put_if_revision, before, self.config.inactivity_window, committed_revision,
                timeout=self.config.store_timeout, operation="session rollback",
            )
        except ConflictError:
            logger.warning(f"Session {before.session_id} moved on before the failed turn could be undone")
        except DependencyError:
            logger.exception(f"Session {before.session_id}: rollback of the failed turn did not complete")

    async def _handle_turn(self, session: Session, utterance: str, language: Language, now: datetime) -> TurnOutcome:
        session.language = language
        session.touch(now, self.config.inactivity_window)
        history = session.recent_history(self.config.history_window)
        session.add_turn(Turn(role="user", text=utterance, language=language, timestamp=now),
                         self.config.stored_history)

        topic = await self._route(session, utterance)
        logger.debug(f"Session {session.session_id}: topic={session.topic.value} state={session.state.value}")

        if topic is None:
            outcome = TurnOutcome(Response(text=message("new_topic", language), language=language))
        elif topic is Topic.SCHEME_DISCOVERY:
            outcome = await self._handle_scheme(session, utterance, language, history)
        elif topic is Topic.ISSUE_REPORTING:
            outcome = await self._handle_issue(session, utterance, language)
        elif topic is Topic.ISSUE_TRACKING:
            outcome = await self._handle_tracking(session, utterance, language)
        else:
            outcome = await self._handle_general(session, utterance, language, history)

        session.add_turn(Turn(role="assistant", text=outcome.response.text, language=language, timestamp=now),
                         self.config.stored_history)
        return outcome

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def _route(self, session: Session, utterance: str) -> Optional[Topic]:
        """Decide the turn's topic and update session state. None = bare "new topic"."""
        if detect_new_topic(utterance):
            topic = detect_rule_topic(utterance)
            session.reset_topic(topic or Topic.GENERAL)
            logger.info(f"Session {session.session_id}: new topic requested")
            return topic

        pending = self._pending_slot(session)
        if pending is not None:
            pending_topic = session.pending_clarifications[0].topic
            topic = self.classifier.classify_by_rules(utterance, pending_topic)
            if topic is pending_topic:
                return topic
        else:
            topic = self.classifier.classify_by_rules(utterance, session.topic)
            if topic is None:
                topic = await self._classify_with_model(utterance)

        if topic is not session.topic or pending is not None:
            session.clear_clarifications()
        session.topic = topic
        session.state = DialogueState.ACTIVE
        return topic

    async def _classify_with_model(self, utterance: str) -> Topic:
        try:
            return await self._call(
                self.classifier.classify_with_model, utterance,
                timeout=self.config.generation_timeout, operation="topic classification",
            )
        except DependencyError as e:
            logger.warning(f"Topic classification unavailable, treating as general: {e}")
            return Topic.GENERAL

    # ------------------------------------------------------------------
    # Scheme discovery
    # ------------------------------------------------------------------

    async def _handle_scheme(
        self, session: Session, utterance: str, language: Language, history: list[Turn]
    ) -> TurnOutcome:
        position = resolve_ordinal(utterance)
        if position is not None and position < len(session.recent_schemes):
            session.slots.scheme.focus_scheme_id = session.recent_schemes[position]
            if detect_eligibility_question(utterance):
                return await self._handle_eligibility(session, utterance, language)
            return await self._describe_scheme(session, utterance, language)

        if detect_eligibility_question(utterance) or self._pending_slot(session) == "profile":
            return await self._handle_eligibility(session, utterance, language)
        return await self._search_schemes(session, utterance, language, history)

    async def _search_schemes(
        self, session: Session, utterance: str, language: Language, history: list[Turn]
    ) -> TurnOutcome:
        slots = session.slots.scheme
        query = utterance
        if self._pending_slot(session) == "query" and slots.last_query:
            query = f"{slots.last_query} {utterance}"

        category = detect_scheme_category(query) or slots.category
        result = await self._search(query, language, category)
        if result.is_empty and category is not None:
            logger.info(f"No '{category}' schemes for '{query[:50]}', widening search")
            category = None
            result = await self._search(query, language, None)

        slots.last_query = query
        slots.category = category

        if result.is_empty:
            if self._can_clarify(session):
                question = message("schemes_clarify", language)
                self._await_clarification(session, [
                    ClarificationRequest(topic=Topic.SCHEME_DISCOVERY, slot="query", question=question)
                ])
                return TurnOutcome(Response(text=question, language=language))
            self._settle(session)
            slots.last_query = None
            return TurnOutcome(Response(text=message("schemes_none", language), language=language))

        scheme_ids = result.scheme_ids()
        documents = [await self._get_document(scheme_id) for scheme_id in scheme_ids]
        session.remember_schemes(scheme_ids, self.config.max_recent_schemes)
        slots.focus_scheme_id = None
        self._settle(session)

        text, degraded = await self._generate(self.responder.answer_with_context, query, documents, language, history)
        if text is None:
            text = SchemeResponder.template_results(documents, language)
        if result.cross_language:
            text = f"{text} {message('schemes_cross_language', language)}"

        scores: dict[str, float] = {}
        for hit in result.hits:
            scores.setdefault(hit.scheme_id, hit.score)
        data = SchemeResultSet(
            items=[
                SchemeMatch(
                    scheme_id=doc.scheme_id,
                    name=doc.name.get(language),
                    category=doc.category,
                    score=round(scores[doc.scheme_id], 4),
                )
                for doc in documents
            ],
            cross_language=result.cross_language,
        )
        suggestions = [message("suggest_details", language), message("suggest_eligibility", language)]
        return TurnOutcome(Response(text=text, language=language, suggestions=suggestions, data=data, degraded=degraded))

    async def _describe_scheme(self, session: Session, utterance: str, language: Language) -> TurnOutcome:
        scheme_id = session.slots.scheme.focus_scheme_id
        self._settle(session)
        try:
            doc = await self._get_document(scheme_id)
        except NotFoundError:
            logger.warning(f"Focused scheme {scheme_id} no longer exists")
            return TurnOutcome(Response(text=message("not_found_scheme", language), language=language))

        text, degraded = await self._generate(self.responder.describe_scheme, utterance, doc, language)
        if text is None:
            text = SchemeResponder.template_detail(doc, language)
        return TurnOutcome(Response(
            text=text,
            language=language,
            suggestions=[message("suggest_eligibility", language)],
            degraded=degraded,
        ))

    async def _handle_eligibility(self, session: Session, utterance: str, language: Language) -> TurnOutcome:
        slots = session.slots.scheme
        scheme_id = slots.focus_scheme_id or (session.recent_schemes[0] if session.recent_schemes else None)
        if scheme_id is None:
            question = message("which_scheme", language)
            if self._can_clarify(session):
                self._await_clarification(session, [
                    ClarificationRequest(topic=Topic.SCHEME_DISCOVERY, slot="scheme", question=question)
                ])
            else:
                self._settle(session)
            return TurnOutcome(Response(text=question, language=language))

        slots.focus_scheme_id = scheme_id
        update, degraded = await self._extract_profile(utterance)
        slots.profile = slots.profile.merged_with(update)

        try:
            result = await self._call(
                self.retriever.check_eligibility, scheme_id, slots.profile, language,
                timeout=self.config.generation_timeout, operation="eligibility check",
            )
        except NotFoundError:
            self._settle(session)
            return TurnOutcome(Response(text=message("not_found_scheme", language), language=language))

        if result.missing_information and self._can_clarify(session):
            self._await_clarification(session, [
                ClarificationRequest(topic=Topic.SCHEME_DISCOVERY, slot="profile", question=result.explanation)
            ])
        else:
            self._settle(session)
        return TurnOutcome(Response(
            text=result.explanation,
            language=language,
            data=EligibilityData(result=result),
            degraded=degraded,
        ))

    async def _extract_profile(self, utterance: str) -> tuple[UserProfile, bool]:
        try:
            profile = await self._call(
                self.profile_extractor.extract, utterance,
                timeout=self.config.extraction_timeout, operation="profile extraction",
            )
            return profile, False
        except ValidationError:
            logger.warning("Profile extraction failed validation, using keyword heuristic")
            return ProfileExtractor.heuristic(utterance), False
        except DependencyError as e:
            logger.error(f"Profile extraction unavailable, using keyword heuristic: {e}")
            return ProfileExtractor.heuristic(utterance), True

    # ------------------------------------------------------------------
    # Issue reporting
    # ------------------------------------------------------------------

    async def _handle_issue(self, session: Session, utterance: str, language: Language) -> TurnOutcome:
        slots = session.slots.issue
        degraded = False
        pending = self._pending_slot(session)
        if pending in ISSUE_QUESTIONS:
            self._fill_issue_slot(slots, pending, utterance)
        else:
            details, degraded = await self._extract_issue(utterance)
            self._merge_issue_details(slots, details)

        details = self._issue_details(slots)
        missing = details.missing_fields()
        if missing and self._can_clarify(session):
            requests = [
                ClarificationRequest(
                    topic=Topic.ISSUE_REPORTING,
                    slot=name,
                    question=message(ISSUE_QUESTIONS[name], language),
                )
                for name in missing
            ]
            self._await_clarification(session, requests)
            return TurnOutcome(Response(text=requests[0].question, language=language, degraded=degraded))

        if missing:
            logger.info(f"Session {session.session_id}: filing with defaults for {missing}")
        report = self.issues.build_report(details, created_at=session.last_active_at)
        partial = bool(missing)
        session.slots.issue = IssueSlots()
        session.slots.tracking.tracking_id = report.tracking_id
        self._settle(session)

        async def file_report() -> Optional[Response]:
            saved = await self._call(
                self.issues.save_report, report,
                timeout=self.config.store_timeout, operation="issue filing",
            )
            if saved.tracking_id == report.tracking_id:
                return None
            return self._filed_response(saved, language, partial, degraded)

        return TurnOutcome(self._filed_response(report, language, partial, degraded), effects=[file_report])

    async def _extract_issue(self, utterance: str) -> tuple[IssueDetails, bool]:
        try:
            details = await self._call(
                self.issue_extractor.extract, utterance,
                timeout=self.config.extraction_timeout, operation="issue extraction",
            )
            return details, False
        except ValidationError:
            logger.warning("Issue extraction failed validation twice, falling back to keywords")
            return IssueExtractor.heuristic(utterance), False
        except DependencyError as e:
            logger.error(f"Issue extraction unavailable, falling back to keywords: {e}")
            return IssueExtractor.heuristic(utterance), True

    @staticmethod
    def _fill_issue_slot(slots: IssueSlots, slot: str, utterance: str) -> None:
        """Store a direct answer to a targeted question."""
        answer = utterance.strip().strip(".।!?").strip()
        if slot == "issue_type":
            slots.issue_type = detect_issue_type(answer)
            if not slots.description:
                slots.description = answer
        elif slot == "description":
            slots.description = answer
            if slots.issue_type is None:
                slots.issue_type = detect_issue_type(answer)
        elif slot == "city":
            parts = [p.strip() for p in answer.split(",") if p.strip()]
            slots.city = parts[0] if parts else ""
            if len(parts) > 1 and not slots.state:
                slots.state = parts[-1]
        elif slot == "state":
            slots.state = answer

    @staticmethod
    def _merge_issue_details(slots: IssueSlots, details: IssueDetails) -> None:
        """Copy every non-empty extracted value into the slots."""
        if details.issue_type is not None:
            slots.issue_type = details.issue_type
        if details.description.strip():
            slots.description = details.description.strip()
        location = details.location
        if location.address.strip():
            slots.address = location.address.strip()
        if location.landmark:
            slots.landmark = location.landmark
        if location.city.strip():
            slots.city = location.city.strip()
        if location.state.strip():
            slots.state = location.state.strip()
        slots.severity = details.severity

    @staticmethod
    def _issue_details(slots: IssueSlots) -> IssueDetails:
        return IssueDetails(
            issue_type=slots.issue_type,
            description=slots.description,
            location=Location(address=slots.address, landmark=slots.landmark, city=slots.city, state=slots.state),
            severity=slots.severity,
        )

    @staticmethod
    def _filed_response(report: IssueReport, language: Language, partial: bool, degraded: bool) -> Response:
        text = message(
            "issue_filed",
            language,
            issue=label(ISSUE_LABELS, report.issue_type.value, language),
            city=report.location.city,
            tracking_id=report.tracking_id,
        )
        if partial:
            text = f"{message('issue_filed_partial', language)} {text}"
        return Response(
            text=text,
            language=language,
            suggestions=[message("suggest_track", language)],
            data=IssueReportData(report=report),
            degraded=degraded,
        )

    # ------------------------------------------------------------------
    # Issue tracking
    # ------------------------------------------------------------------

    async def _handle_tracking(self, session: Session, utterance: str, language: Language) -> TurnOutcome:
        slots = session.slots.tracking
        tracking_id = find_tracking_id(utterance) or slots.tracking_id
        if tracking_id is None:
            question = message("ask_tracking_id", language)
            if self._can_clarify(session):
                self._await_clarification(session, [
                    ClarificationRequest(topic=Topic.ISSUE_TRACKING, slot="tracking_id", question=question)
                ])
            else:
                self._settle(session)
            return TurnOutcome(Response(text=question, language=language))

        self._settle(session)
        try:
            report = await self._call(
                self.issues.get_report, tracking_id,
                timeout=self.config.store_timeout, operation="issue lookup",
            )
        except NotFoundError:
            logger.info(f"No issue record for {tracking_id}")
            slots.tracking_id = None
            return TurnOutcome(Response(
                text=message("not_found_issue", language, tracking_id=tracking_id),
                language=language,
            ))

        slots.tracking_id = report.tracking_id
        status = label(STATUS_LABELS, report.status.value, language)
        data = IssueReportData(report=report)

        if detect_follow_up(utterance):
            async def add_comment() -> Optional[Response]:
                await self._call(
                    self.issues.add_follow_up, report.tracking_id, utterance,
                    timeout=self.config.store_timeout, operation="follow-up comment",
                )
                return None

            text = message("follow_up_added", language, tracking_id=report.tracking_id, status=status)
            return TurnOutcome(Response(text=text, language=language, data=data), effects=[add_comment])

        text = message(
            "issue_status",
            language,
            tracking_id=report.tracking_id,
            issue=label(ISSUE_LABELS, report.issue_type.value, language),
            status=status,
        )
        return TurnOutcome(Response(text=text, language=language, data=data))

    # ------------------------------------------------------------------
    # General conversation
    # ------------------------------------------------------------------

    async def _handle_general(
        self, session: Session, utterance: str, language: Language, history: list[Turn]
    ) -> TurnOutcome:
        self._settle(session)
        text, degraded = await self._generate(self.responder.general_reply, utterance, language, history)
        return TurnOutcome(Response(
            text=text or message("welcome", language),
            language=language,
            degraded=degraded,
        ))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _call(self, fn: Callable[..., Any], *args: Any, timeout: float, operation: str) -> Any:
        return await call_with_resilience(
            fn, *args, timeout=timeout, policy=self.config.retry_policy, operation=operation
        )

    async def _search(self, query: str, language: Language, category: Optional[str]):
        return await self._call(
            self.retriever.search, query, language, SearchContext(category=category),
            timeout=self.config.retrieval_timeout, operation="scheme search",
        )

    async def _get_document(self, scheme_id: str):
        return await self._call(
            self.retriever.get_document, scheme_id,
            timeout=self.config.store_timeout, operation="document lookup",
        )

    async def _generate(self, fn: Callable[..., str], *args: Any) -> tuple[Optional[str], bool]:
        """Generated text and whether generation was attempted and failed."""
        if not self.responder.available:
            return None, False
        try:
            text = await self._call(fn, *args, timeout=self.config.generation_timeout, operation="answer generation")
        except DependencyError as e:
            logger.error(f"Answer generation unavailable, using template: {e}")
            return None, True
        return (text or None), False

    def _detect(self, utterance: str, detected_language: Optional[DetectedLanguage]) -> LanguageDetection:
        if detected_language is not None:
            return LanguageDetection(detected_language, 1.0)
        return self.detector.detect(utterance)

    @staticmethod
    def _pending_slot(session: Session) -> Optional[str]:
        if session.state is DialogueState.AWAITING_CLARIFICATION and session.pending_clarifications:
            return session.pending_clarifications[0].slot
        return None

    def _can_clarify(self, session: Session) -> bool:
        return session.clarification_rounds < self.config.max_clarification_rounds

    @staticmethod
    def _await_clarification(session: Session, requests: list[ClarificationRequest]) -> None:
        session.pending_clarifications = requests
        session.clarification_rounds += 1
        session.state = DialogueState.AWAITING_CLARIFICATION

    @staticmethod
    def _settle(session: Session) -> None:
        session.clear_clarifications()
        session.state = DialogueState.ACTIVE

    def _finalize(self, response: Response) -> Response:
        segments = segment_for_speech(
            response.text, self.config.max_spoken_seconds, self.config.words_per_second
        )
        return response.model_copy(update={"speech_segments": segments})

    def _fallback(self, language: Language) -> Response:
        return self._finalize(Response(text=message("fallback", language), language=language, degraded=True))

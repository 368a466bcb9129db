"""
Shared fixtures for the Jan Sahayak test suite.

External collaborators are replaced with deterministic fakes: a keyword-axis
embedder stands in for the sentence-transformers model and a scripted
generator stands in for Gemini.
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from jansahayak.conversation import DialogueOrchestrator, InMemorySessionStore, OrchestratorConfig
from jansahayak.indexing import KnowledgeStore, SchemeIndexer
from jansahayak.issues import IssueTracker
from jansahayak.llm import RetryPolicy
from jansahayak.models import (
    BilingualText,
    EligibilityCriterion,
    EligibilityRule,
    RuleOperator,
    SchemeDocument,
)
from jansahayak.retrieval import SchemeRetriever

START = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

EMBEDDING_DIM = 8

# One vector axis per topic; text with no topic word embeds to zero and matches nothing
TOPIC_AXES = {
    0: ["farmer", "kisan", "crop", "irrigation", "agriculture", "किसान", "सिंचाई", "खेती", "फसल"],
    1: ["hospital", "treatment", "health", "अस्पताल", "इलाज", "स्वास्थ्य"],
    2: ["house", "housing", "आवास", "मकान"],
    3: ["scholarship", "student", "छात्रवृत्ति", "छात्र"],
}


class KeywordEmbedder:
    """Unit vectors built from topic-word counts; explicit overrides win."""

    embedding_dim = EMBEDDING_DIM

    def __init__(self, overrides=None, dim=EMBEDDING_DIM):
        self.embedding_dim = dim
        self.overrides = dict(overrides or {})

    def embed(self, text):
        if text in self.overrides:
            return np.asarray(self.overrides[text], dtype=np.float32)
        lowered = text.lower()
        vector = np.zeros(self.embedding_dim, dtype=np.float32)
        for axis, words in TOPIC_AXES.items():
            vector[axis] = sum(1 for w in words if w in lowered)
        norm = np.linalg.norm(vector)
        return vector / norm if norm else vector


class ScriptedGenerator:
    """Returns queued replies in order; queued exceptions are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError(f"Unexpected generation call: {prompt[:80]!r}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeClock:
    def __init__(self, start=START):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


# =============================================================================
# SCHEME CORPUS
# =============================================================================


def text(en, hi=""):
    return BilingualText(en=en, hi=hi)


def rule(field, operator, value, en, hi=""):
    return EligibilityCriterion(
        text=text(en, hi),
        rule=EligibilityRule(profile_field=field, operator=RuleOperator(operator), value=value),
    )


def make_scheme(scheme_id, name, description, category="general", version=1,
                eligibility=None, benefits=None, process=None,
                verified_at=datetime(2025, 1, 1, tzinfo=timezone.utc)):
    return SchemeDocument(
        scheme_id=scheme_id,
        version=version,
        name=name,
        description=description,
        eligibility=eligibility or [],
        benefits=benefits or [],
        application_process=process or text(""),
        category=category,
        updated_at=verified_at,
        verified_at=verified_at,
    )


def build_schemes():
    return [
        make_scheme(
            "pm-kisan",
            text("PM Kisan Samman Nidhi", "पीएम किसान सम्मान निधि"),
            text("Income support of 6000 rupees a year for every farmer family.",
                 "हर किसान परिवार को साल में 6000 रुपये की आय सहायता।"),
            category="agriculture",
            eligibility=[
                rule("occupation", "eq", "farmer", "Must be a farmer", "किसान होना चाहिए"),
                rule("land_holding_acres", "gt", 0, "Must own farm land", "खेती की ज़मीन होनी चाहिए"),
            ],
            benefits=[text("6000 rupees a year for the farmer in three instalments.",
                           "किसान को तीन किस्तों में साल के 6000 रुपये।")],
            process=text("Register as a farmer at the nearest Common Service Centre.",
                         "किसान के रूप में नज़दीकी जन सेवा केंद्र पर पंजीकरण करें।"),
            verified_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
        ),
        make_scheme(
            "pmksy",
            text("Pradhan Mantri Krishi Sinchayee Yojana", "प्रधानमंत्री कृषि सिंचाई योजना"),
            text("Subsidy on drip irrigation so that every farmer gets water for the crop.",
                 "हर किसान को सिंचाई के लिए ड्रिप पर सब्सिडी।"),
            category="agriculture",
            eligibility=[
                rule("occupation", "eq", "farmer", "Must be a farmer", "किसान होना चाहिए"),
                rule("land_holding_acres", "gt", 0, "Must own farm land", "खेती की ज़मीन होनी चाहिए"),
            ],
            benefits=[text("Up to 55 percent subsidy on irrigation equipment.",
                           "सिंचाई उपकरण पर 55 प्रतिशत तक सब्सिडी।")],
            process=text("Apply at the district agriculture office.",
                         "ज़िला कृषि कार्यालय में खेती विभाग को आवेदन दें।"),
        ),
        make_scheme(
            "ayushman-bharat",
            text("Ayushman Bharat", "आयुष्मान भारत"),
            text("Free hospital treatment up to 5 lakh rupees for poor families.",
                 "गरीब परिवारों को 5 लाख रुपये तक का मुफ्त अस्पताल इलाज।"),
            category="health",
            eligibility=[rule("is_bpl", "eq", True, "Family must hold a BPL card", "परिवार के पास बीपीएल कार्ड हो")],
        ),
        make_scheme(
            "pmay-g",
            text("Pradhan Mantri Awas Yojana (Gramin)", "प्रधानमंत्री आवास योजना (ग्रामीण)"),
            text("Help to build a pucca house for rural families.",
                 "ग्रामीण परिवारों को पक्का मकान बनाने के लिए आवास सहायता।"),
            category="housing",
            eligibility=[rule("annual_income", "lt", 300000, "Annual income below 3 lakh rupees",
                              "सालाना आय 3 लाख रुपये से कम")],
        ),
        # English-only content
        make_scheme(
            "nsp-scholarship",
            text("National Scholarship Portal"),
            text("Post-matric scholarship for every eligible student."),
            category="education",
        ),
    ]


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def schemes():
    return build_schemes()


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def store(embedder, schemes):
    store = KnowledgeStore(embedding_dim=EMBEDDING_DIM)
    SchemeIndexer(store, embedder).index_all(schemes)
    return store


@pytest.fixture
def retriever(store, embedder):
    return SchemeRetriever(store, embedder)


@pytest.fixture
def sessions(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def tracker(clock):
    return IssueTracker(clock=clock)


@pytest.fixture
def fast_config():
    return OrchestratorConfig(retry_policy=RetryPolicy(max_attempts=2, backoff_base=0.01, backoff_max=0.02))


@pytest.fixture
def build_orchestrator(retriever, sessions, tracker, clock, fast_config):
    """Factory so tests can swap single collaborators."""

    def build(generator=None, **overrides):
        parts = {
            "retriever": retriever,
            "sessions": sessions,
            "issues": tracker,
            "config": fast_config,
            "clock": clock,
        }
        parts.update(overrides)
        return DialogueOrchestrator(generator=generator, **parts)

    return build


@pytest.fixture
def orchestrator(build_orchestrator):
    return build_orchestrator()

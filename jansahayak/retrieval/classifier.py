"""
Topic classification for citizen utterances.

Rules (tracking ids, issue and scheme keywords) decide first. When they are
silent the conversation's current topic is kept; only a fresh conversation
with an ambiguous opener goes to the generation collaborator.
"""

import logging
from typing import Optional

import pydantic
from pydantic import BaseModel, Field

from ..llm import Generator, extract_json_block
from ..models import Topic
from .intent import detect_rule_topic

logger = logging.getLogger(__name__)


class TopicIntent(BaseModel):
    topic: Topic = Field(..., description="The conversation topic of the utterance.")
    confidence: float = Field(0.5, ge=0.0, le=1.0)


class TopicClassifier:
    PROMPT = """
    You route messages for an Indian citizen-services assistant.
    Classify the message into exactly one topic:
    - "scheme_discovery": asking about government welfare schemes, benefits, subsidies, eligibility
    - "issue_reporting": reporting a civic problem (roads, water, garbage, streetlights, drainage)
    - "issue_tracking": asking about the status of an earlier complaint
    - "general": greetings, thanks, or anything else

    The message may be in English, Hindi or a mix of both.

    Message: "{text}"

    Return strictly in JSON format: {{"topic": "<topic>", "confidence": <float between 0 and 1>}}
    """

    def __init__(self, generator: Optional[Generator] = None):
        self.generator = generator

    def classify_by_rules(self, text: str, current_topic: Topic = Topic.GENERAL) -> Optional[Topic]:
        """Rule decision, falling back to the current non-general topic.

        Returns None when only the model can decide.
        """
        topic = detect_rule_topic(text)
        if topic is not None:
            return topic
        if current_topic is not Topic.GENERAL:
            return current_topic
        return None

    def classify_with_model(self, text: str) -> Topic:
        """Ask the generation collaborator; unparseable output means general."""
        if self.generator is None:
            return Topic.GENERAL
        raw = self.generator.generate(self.PROMPT.format(text=text))
        try:
            intent = TopicIntent.model_validate_json(extract_json_block(raw))
        except pydantic.ValidationError:
            logger.warning(f"Unparseable topic classification: {raw[:120]!r}")
            return Topic.GENERAL
        logger.debug(f"Model topic for '{text[:40]}': {intent.topic.value} ({intent.confidence:.2f})")
        return intent.topic

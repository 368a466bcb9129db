"""
Deterministic eligibility evaluation.

Criteria with a structured rule are compared field-by-field against the
citizen's profile. Free-text criteria that cannot be rule-matched go to a
judge (a generative yes/no call); without a judge they remain undetermined.
"""

import json
import logging
from typing import Any, Callable, Optional

import pydantic
from pydantic import BaseModel

from ..errors import CivicAssistError
from ..llm import Generator, extract_json_block
from ..messages import PROFILE_FIELD_LABELS, label, message
from ..models import (
    EligibilityCriterion,
    EligibilityResult,
    EligibilityRule,
    Language,
    RuleOperator,
    SchemeDocument,
    UserProfile,
)

logger = logging.getLogger(__name__)

# judge(criterion_text, profile) -> True / False / None (cannot tell)
Judge = Callable[[str, UserProfile], Optional[bool]]


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _canonical(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def evaluate_rule(rule: EligibilityRule, profile: UserProfile) -> Optional[bool]:
    """Compare one rule against the profile. None means the field is unknown."""
    actual = getattr(profile, rule.profile_field)
    if actual is None:
        return None

    op = rule.operator
    if op in (RuleOperator.IN, RuleOperator.NOT_IN):
        options = rule.value if isinstance(rule.value, (list, tuple, set)) else [rule.value]
        found = _canonical(actual) in {_canonical(o) for o in options}
        return found if op is RuleOperator.IN else not found

    if op in (RuleOperator.EQ, RuleOperator.NE):
        equal = _canonical(actual) == _canonical(rule.value)
        return equal if op is RuleOperator.EQ else not equal

    left, right = _as_number(actual), _as_number(rule.value)
    if left is None or right is None:
        logger.warning(f"Non-numeric comparison for rule on {rule.profile_field}: {actual!r} vs {rule.value!r}")
        return None
    if op is RuleOperator.LT:
        return left < right
    if op is RuleOperator.LTE:
        return left <= right
    if op is RuleOperator.GT:
        return left > right
    return left >= right


def check_eligibility(
    doc: SchemeDocument,
    profile: UserProfile,
    judge: Optional[Judge] = None,
    language: Language = Language.EN,
) -> EligibilityResult:
    """Evaluate every eligibility criterion of `doc` for `profile`."""
    matched: list[str] = []
    unmatched: list[str] = []
    missing: list[str] = []

    for criterion in doc.eligibility:
        text = criterion.text.get(language)
        outcome = _evaluate_criterion(criterion, profile, judge, text)
        if outcome is True:
            matched.append(text)
        elif outcome is False:
            unmatched.append(text)
        else:
            missing.append(_missing_label(criterion, language, text))

    eligible = not unmatched and not missing
    name = doc.name.get(language)
    if eligible:
        explanation = message("eligible", language, name=name)
    elif unmatched:
        explanation = message("not_eligible", language, name=name, criteria="; ".join(unmatched))
    else:
        explanation = message("eligibility_needs_info", language, name=name, fields=", ".join(dict.fromkeys(missing)))

    return EligibilityResult(
        scheme_id=doc.scheme_id,
        eligible=eligible,
        matched=matched,
        unmatched=unmatched,
        missing_information=list(dict.fromkeys(missing)),
        explanation=explanation,
    )


def _evaluate_criterion(
    criterion: EligibilityCriterion,
    profile: UserProfile,
    judge: Optional[Judge],
    text: str,
) -> Optional[bool]:
    if criterion.rule is not None:
        return evaluate_rule(criterion.rule, profile)
    if judge is None:
        return None
    try:
        return judge(criterion.text.en or text, profile)
    except CivicAssistError as e:
        logger.warning(f"Eligibility judgement failed for '{text[:60]}': {e}")
        return None


def _missing_label(criterion: EligibilityCriterion, language: Language, text: str) -> str:
    if criterion.rule is not None:
        return label(PROFILE_FIELD_LABELS, criterion.rule.profile_field, language)
    return text


class _Judgement(BaseModel):
    satisfied: Optional[bool] = None
    reason: str = ""


class GenerativeJudge:
    """Yes/no judgement of a free-text criterion by the generation collaborator."""

    PROMPT = """You check government scheme eligibility.
Decide whether the citizen satisfies the criterion using ONLY the profile given.
If the profile does not contain enough information, answer null.

Criterion: "{criterion}"
Citizen profile (JSON): {profile}

Return strictly a JSON object: {{"satisfied": true | false | null, "reason": "<short reason>"}}"""

    def __init__(self, generator: Generator):
        self.generator = generator

    def __call__(self, criterion: str, profile: UserProfile) -> Optional[bool]:
        prompt = self.PROMPT.format(
            criterion=criterion,
            profile=json.dumps(profile.model_dump(exclude_none=True), ensure_ascii=False),
        )
        raw = self.generator.generate(prompt)
        try:
            judgement = _Judgement.model_validate_json(extract_json_block(raw))
        except pydantic.ValidationError:
            logger.warning(f"Unparseable eligibility judgement: {raw[:120]!r}")
            return None
        return judgement.satisfied

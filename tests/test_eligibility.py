"""
Tests for rule-based eligibility checks.

Run with: pytest tests/test_eligibility.py -v
"""

import pytest

from jansahayak.errors import DependencyError, NotFoundError
from jansahayak.models import EligibilityCriterion, EligibilityRule, Language, RuleOperator, UserProfile
from jansahayak.retrieval import GenerativeJudge, SchemeRetriever, check_eligibility, evaluate_rule

from conftest import ScriptedGenerator, make_scheme, rule, text

FREE_TEXT = EligibilityCriterion(text=text("Family must live in a rural area", "परिवार ग्रामीण क्षेत्र में रहता हो"))


def _rule(field, operator, value):
    return EligibilityRule(profile_field=field, operator=RuleOperator(operator), value=value)


# =============================================================================
# SINGLE RULES
# =============================================================================

class TestEvaluateRule:
    """Operator semantics against one profile field."""

    @pytest.mark.parametrize("operator,value,expected", [
        ("lt", 60, True),
        ("lte", 45, True),
        ("gt", 45, False),
        ("gte", 45, True),
        ("eq", 45, True),
        ("ne", 45, False),
    ])
    def test_numeric_operators(self, operator, value, expected):
        assert evaluate_rule(_rule("age", operator, value), UserProfile(age=45)) is expected

    def test_string_equality_ignores_case(self):
        assert evaluate_rule(_rule("occupation", "eq", "Farmer"), UserProfile(occupation=" farmer "))

    def test_membership(self):
        profile = UserProfile(social_category="SC")
        assert evaluate_rule(_rule("social_category", "in", ["sc", "st"]), profile)
        assert not evaluate_rule(_rule("social_category", "not_in", ["sc", "st"]), profile)

    def test_boolean_field(self):
        assert evaluate_rule(_rule("is_bpl", "eq", True), UserProfile(is_bpl=True))
        assert not evaluate_rule(_rule("is_bpl", "eq", True), UserProfile(is_bpl=False))

    def test_unknown_field_value_is_undetermined(self):
        assert evaluate_rule(_rule("annual_income", "lt", 100000), UserProfile()) is None

    def test_non_numeric_comparison_is_undetermined(self):
        assert evaluate_rule(_rule("occupation", "gt", 5), UserProfile(occupation="farmer")) is None

    def test_rule_must_name_a_profile_field(self):
        with pytest.raises(ValueError):
            _rule("favourite_colour", "eq", "blue")


# =============================================================================
# WHOLE SCHEMES
# =============================================================================

@pytest.fixture
def pension_scheme():
    return make_scheme(
        "old-age-pension",
        text("Old Age Pension", "वृद्धावस्था पेंशन"),
        text("Monthly pension for senior citizens.", "वरिष्ठ नागरिकों के लिए मासिक पेंशन।"),
        eligibility=[
            rule("age", "gte", 60, "Age 60 or above", "आयु 60 वर्ष या अधिक"),
            rule("is_bpl", "eq", True, "Family holds a BPL card", "परिवार के पास बीपीएल कार्ड हो"),
        ],
    )


class TestCheckEligibility:
    """Matched / unmatched / missing bookkeeping and explanations."""

    def test_all_rules_met(self, pension_scheme):
        result = check_eligibility(pension_scheme, UserProfile(age=67, is_bpl=True))

        assert result.eligible
        assert result.matched == ["Age 60 or above", "Family holds a BPL card"]
        assert result.explanation == "Based on what you told me, you appear to be eligible for Old Age Pension."

    def test_failed_rule_is_reported(self, pension_scheme):
        result = check_eligibility(pension_scheme, UserProfile(age=40, is_bpl=True))

        assert not result.eligible
        assert result.unmatched == ["Age 60 or above"]
        assert "Age 60 or above" in result.explanation

    def test_missing_fields_are_named(self, pension_scheme):
        """Unknown profile facts are listed as missing, never assumed."""
        result = check_eligibility(pension_scheme, UserProfile(age=70))

        assert not result.eligible
        assert result.missing_information == ["whether you have a BPL card"]

    def test_hindi_explanation(self, pension_scheme):
        result = check_eligibility(pension_scheme, UserProfile(age=70), language=Language.HI)

        assert result.missing_information == ["क्या आपके पास बीपीएल कार्ड है"]
        assert "वृद्धावस्था पेंशन" in result.explanation

    def test_no_criteria_means_eligible(self):
        scheme = make_scheme("open", text("Open Scheme"), text("For everyone."))
        assert check_eligibility(scheme, UserProfile()).eligible

    def test_free_text_without_judge_is_missing(self):
        scheme = make_scheme("rural", text("Rural Scheme"), text("Rural help."), eligibility=[FREE_TEXT])

        result = check_eligibility(scheme, UserProfile(state="Bihar"))

        assert result.missing_information == ["Family must live in a rural area"]

    def test_free_text_is_judged_by_generator(self):
        scheme = make_scheme("rural", text("Rural Scheme"), text("Rural help."), eligibility=[FREE_TEXT])
        judge = GenerativeJudge(ScriptedGenerator('{"satisfied": true, "reason": "lives in a village"}'))

        result = check_eligibility(scheme, UserProfile(state="Bihar"), judge=judge)

        assert result.eligible
        assert result.matched == ["Family must live in a rural area"]

    def test_judge_failure_leaves_criterion_undetermined(self):
        scheme = make_scheme("rural", text("Rural Scheme"), text("Rural help."), eligibility=[FREE_TEXT])
        judge = GenerativeJudge(ScriptedGenerator(DependencyError("model down")))

        result = check_eligibility(scheme, UserProfile(), judge=judge)

        assert not result.eligible
        assert result.missing_information == ["Family must live in a rural area"]

    def test_unparseable_judgement_is_undetermined(self):
        judge = GenerativeJudge(ScriptedGenerator("I think so, probably"))
        assert judge("Family must live in a rural area", UserProfile()) is None


class TestRetrieverEligibility:
    """Eligibility through the retriever uses the current scheme version."""

    def test_check_against_indexed_scheme(self, retriever):
        result = retriever.check_eligibility("pmay-g", UserProfile(annual_income=120000))

        assert result.scheme_id == "pmay-g"
        assert result.eligible

    def test_unknown_scheme(self, retriever):
        with pytest.raises(NotFoundError):
            retriever.check_eligibility("no-such-scheme", UserProfile())

    def test_generator_judges_free_text(self, store, embedder):
        store.put_document(make_scheme("rural", text("Rural Scheme"), text("Rural help."), eligibility=[FREE_TEXT]))
        generator = ScriptedGenerator('{"satisfied": false, "reason": "lives in a city"}')
        retriever = SchemeRetriever(store, embedder, generator=generator)

        result = retriever.check_eligibility("rural", UserProfile(state="Delhi"))

        assert result.unmatched == ["Family must live in a rural area"]
        assert '"state": "Delhi"' in generator.prompts[0]

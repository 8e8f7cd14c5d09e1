"""
Unit tests for the scoring rubric table and the finding factories.
"""

import pytest

from integrity.rubric import (
    ISSUE_RULES,
    DEDUCTION_BANDS,
    get_deduction,
    make_issue,
    make_warning,
    rubric_to_dict,
)
from models.validation import SEVERITY_WARNING, ValidationIssue, ValidationWarning


class TestIssueRulesTable:
    """Shape and consistency of ISSUE_RULES."""

    def test_every_rule_has_required_keys(self):
        for code, rule in ISSUE_RULES.items():
            assert {"severity", "deduction", "message"} <= set(rule), code

    def test_deductions_fall_inside_severity_band(self):
        for code, rule in ISSUE_RULES.items():
            low, high = DEDUCTION_BANDS[rule["severity"]]
            assert low <= rule["deduction"] <= high, code

    def test_every_warning_has_a_recommendation(self):
        for code, rule in ISSUE_RULES.items():
            if rule["severity"] == SEVERITY_WARNING:
                assert rule.get("recommendation"), code

    def test_anomaly_codes_are_warnings(self):
        for code in ("ANOMALY_GOALS", "ANOMALY_ASSISTS", "ANOMALY_DURATION",
                     "UNLIKELY_STREAK", "FORM_REVERSAL", "PERFORMANCE_SPIKE"):
            assert ISSUE_RULES[code]["severity"] == SEVERITY_WARNING

    def test_known_deductions(self):
        assert get_deduction("NEGATIVE_SCORE") == 25
        assert get_deduction("RESULT_MISMATCH") == 20
        assert get_deduction("EXCESSIVE_GOALS") == 15
        assert get_deduction("VERY_OLD_MATCH") == 2


class TestFindingFactories:
    """make_issue() / make_warning() read severity and deduction from the table."""

    def test_make_issue_uses_default_message(self):
        issue = make_issue("NEGATIVE_SCORE", home_score=-1)

        assert isinstance(issue, ValidationIssue)
        assert issue.severity == "critical"
        assert issue.score_deduction == 25
        assert issue.message == ISSUE_RULES["NEGATIVE_SCORE"]["message"]
        assert issue.data == {"home_score": -1}
        assert issue.is_blocking is True

    def test_make_issue_custom_message(self):
        issue = make_issue("POSSESSION_MISMATCH", "Total possession is 120%")

        assert issue.message == "Total possession is 120%"
        assert issue.is_blocking is False

    def test_make_warning_carries_recommendation(self):
        warning = make_warning("VERY_SHORT_MATCH")

        assert isinstance(warning, ValidationWarning)
        assert warning.severity == "warning"
        assert warning.recommendation == ISSUE_RULES["VERY_SHORT_MATCH"]["recommendation"]

    def test_make_issue_rejects_warning_code(self):
        with pytest.raises(ValueError):
            make_issue("VERY_SHORT_MATCH")

    def test_make_warning_rejects_issue_code(self):
        with pytest.raises(ValueError):
            make_warning("NEGATIVE_SCORE")

    def test_unknown_code_raises_key_error(self):
        with pytest.raises(KeyError):
            make_issue("NOT_A_RULE")

    def test_to_dict(self):
        data = make_warning("FORM_REVERSAL", margin=4).to_dict()

        assert data["code"] == "FORM_REVERSAL"
        assert data["severity"] == "warning"
        assert data["score_deduction"] == 4
        assert data["data"] == {"margin": 4}


class TestRubricToDict:

    def test_contains_every_code(self):
        assert set(rubric_to_dict()) == set(ISSUE_RULES)

    def test_is_a_copy(self):
        rubric = rubric_to_dict()
        rubric["NEGATIVE_SCORE"]["deduction"] = 0

        assert ISSUE_RULES["NEGATIVE_SCORE"]["deduction"] == 25

"""
FairnessScorer - Single Source of Truth for match fairness scores.

Key Formula:
    score = clamp(100 - SUM(deduction[code] for every issue and warning), 0, 100)

    Deductions come from the ISSUE_RULES table in rubric.py, keyed by code,
    so the rubric can be tuned and tested without touching rule logic.

Validity:
    is_valid = no issue with severity critical or high

    Validity never looks at the numeric score: a high score cannot mask a
    critical issue. The rating label exists for display only.
"""
import math
from typing import Any, Dict, Optional, Sequence, Tuple

from models.validation import ValidationIssue, ValidationWarning, BLOCKING_SEVERITIES
from integrity.rubric import ISSUE_RULES


MAX_SCORE = 100
MIN_SCORE = 0

# (minimum score, label), highest band first
RATING_BANDS: Tuple[Tuple[int, str], ...] = (
    (95, "excellent"),
    (80, "good"),
    (60, "fair"),
    (0, "poor"),
)


def get_rating(score: int) -> str:
    """Display label for a fairness score."""
    for minimum, label in RATING_BANDS:
        if score >= minimum:
            return label
    return RATING_BANDS[-1][1]


def get_player_rating(average_score: float, suspicious_count: int, total_matches: int) -> str:
    """
    Display label for a player's whole history.

    Each band also caps the number of suspicious matches:
    excellent allows none, good one, fair 10% of the history (rounded up).
    """
    limits = {
        "excellent": 0,
        "good": 1,
        "fair": math.ceil(total_matches * 0.1),
    }
    for minimum, label in RATING_BANDS:
        if average_score >= minimum and suspicious_count <= limits.get(label, suspicious_count):
            return label
    return RATING_BANDS[-1][1]


class FairnessScorer:
    """
    Aggregates findings into a 0-100 score and a validity verdict.

    Usage:
        scorer = FairnessScorer()
        score = scorer.calculate_score(issues, warnings)
        valid = scorer.is_valid(issues)
    """

    def __init__(self, rules: Optional[Dict[str, Dict[str, Any]]] = None):
        """
        Args:
            rules: Rubric table keyed by code (defaults to ISSUE_RULES)
        """
        self.rules = rules if rules is not None else ISSUE_RULES

    def get_deduction(self, code: str) -> int:
        return self.rules[code]["deduction"]

    def total_deduction(
        self,
        issues: Sequence[ValidationIssue],
        warnings: Sequence[ValidationWarning],
    ) -> int:
        return sum(self.get_deduction(f.code) for f in list(issues) + list(warnings))

    def calculate_score(
        self,
        issues: Sequence[ValidationIssue],
        warnings: Sequence[ValidationWarning],
    ) -> int:
        """
        Calculate the fairness score with clamping.

        Returns:
            Integer score in [0, 100]
        """
        raw = MAX_SCORE - self.total_deduction(issues, warnings)
        return max(MIN_SCORE, min(MAX_SCORE, raw))

    @staticmethod
    def is_valid(issues: Sequence[ValidationIssue]) -> bool:
        """False iff at least one critical or high severity issue is present."""
        return not any(i.severity in BLOCKING_SEVERITIES for i in issues)

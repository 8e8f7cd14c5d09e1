"""
Scoring Rubric
==============

Declarative table of every finding the validator can emit.

Each entry maps an issue code to:
- severity: critical, high, medium (issues) or warning (non-blocking)
- deduction: points subtracted from the 100-point fairness score
- message: default description (checks usually supply a specific one)
- recommendation: reviewer guidance shown with warnings

Deduction bands:
- critical: 20-25
- high: 10-15
- medium: 5-10
- warning: 2-8

How to add a finding:
1. Add the code to ISSUE_RULES below
2. Emit it from a check with make_issue() / make_warning()
The fairness scorer reads deductions from this table only.
"""

from typing import Any, Dict

from models.validation import (
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_MEDIUM,
    SEVERITY_WARNING,
    ValidationIssue,
    ValidationWarning,
)


DEDUCTION_BANDS = {
    SEVERITY_CRITICAL: (20, 25),
    SEVERITY_HIGH: (10, 15),
    SEVERITY_MEDIUM: (5, 10),
    SEVERITY_WARNING: (2, 8),
}


ISSUE_RULES: Dict[str, Dict[str, Any]] = {
    # -------------------------------------------------------------------------
    # Scores
    # -------------------------------------------------------------------------
    "NEGATIVE_SCORE": {
        "severity": SEVERITY_CRITICAL,
        "deduction": 25,
        "message": "Match contains negative scores, which is impossible",
    },
    "UNREALISTIC_SCORE": {
        "severity": SEVERITY_HIGH,
        "deduction": 15,
        "message": "Team score is implausibly large",
    },
    "RESULT_MISMATCH": {
        "severity": SEVERITY_CRITICAL,
        "deduction": 20,
        "message": "Declared result does not match the scores",
    },
    "PLAYER_GOALS_EXCEED_TEAM_SCORE": {
        "severity": SEVERITY_CRITICAL,
        "deduction": 25,
        "message": "Player goals exceed their own team's score",
    },
    "UNREALISTIC_GOAL_RATE": {
        "severity": SEVERITY_WARNING,
        "deduction": 6,
        "message": "Goals per minute is unrealistic for the match duration",
        "recommendation": "Verify the final score against the match replay",
    },
    # -------------------------------------------------------------------------
    # Player stats
    # -------------------------------------------------------------------------
    "NEGATIVE_STATS": {
        "severity": SEVERITY_CRITICAL,
        "deduction": 25,
        "message": "Player stats contain negative values",
    },
    "EXCESSIVE_GOALS": {
        "severity": SEVERITY_HIGH,
        "deduction": 15,
        "message": "Player goals exceed the per-match cap",
    },
    "EXCESSIVE_ASSISTS": {
        "severity": SEVERITY_HIGH,
        "deduction": 10,
        "message": "Player assists exceed the per-match cap",
    },
    "UNUSUAL_CONTRIBUTION": {
        "severity": SEVERITY_WARNING,
        "deduction": 5,
        "message": "Very high combined goals and assists",
        "recommendation": "Review match replay for accuracy",
    },
    "PLAYER_GOAL_RATE_HIGH": {
        "severity": SEVERITY_WARNING,
        "deduction": 5,
        "message": "Player goal rate is exceptionally high",
        "recommendation": "Verify player performance accuracy",
    },
    # -------------------------------------------------------------------------
    # Timing
    # -------------------------------------------------------------------------
    "INVALID_DURATION": {
        "severity": SEVERITY_CRITICAL,
        "deduction": 20,
        "message": "Match duration must be positive",
    },
    "FUTURE_MATCH": {
        "severity": SEVERITY_CRITICAL,
        "deduction": 25,
        "message": "Match date is in the future",
    },
    "VERY_SHORT_MATCH": {
        "severity": SEVERITY_WARNING,
        "deduction": 5,
        "message": "Match duration is unusually short",
        "recommendation": "Ensure match was not abandoned or forcefully ended",
    },
    "VERY_LONG_MATCH": {
        "severity": SEVERITY_WARNING,
        "deduction": 3,
        "message": "Match duration is unusually long",
        "recommendation": "Verify match includes extended time/overtime",
    },
    "VERY_OLD_MATCH": {
        "severity": SEVERITY_WARNING,
        "deduction": 2,
        "message": "Match is older than the retention window",
        "recommendation": "Verify match date is accurate",
    },
    # -------------------------------------------------------------------------
    # Team stats (only when a stats snapshot is supplied)
    # -------------------------------------------------------------------------
    "POSSESSION_MISMATCH": {
        "severity": SEVERITY_MEDIUM,
        "deduction": 5,
        "message": "Team possession values do not sum to 100%",
    },
    "INVALID_PASS_ACCURACY": {
        "severity": SEVERITY_MEDIUM,
        "deduction": 8,
        "message": "Pass accuracy is outside 0-100%",
    },
    "NEGATIVE_TEAM_STATS": {
        "severity": SEVERITY_MEDIUM,
        "deduction": 8,
        "message": "Team stats contain negative totals",
    },
    "SHOTS_ON_TARGET_EXCEED_SHOTS": {
        "severity": SEVERITY_MEDIUM,
        "deduction": 5,
        "message": "Shots on target exceed total shots",
    },
    "GOALS_EXCEED_SHOTS_ON_TARGET": {
        "severity": SEVERITY_MEDIUM,
        "deduction": 5,
        "message": "Team score exceeds shots on target",
    },
    # -------------------------------------------------------------------------
    # Statistical anomalies (history based)
    # -------------------------------------------------------------------------
    "ANOMALY_GOALS": {
        "severity": SEVERITY_WARNING,
        "deduction": 8,
        "message": "Goals deviate strongly from the player's history",
        "recommendation": "Review match highlights and player performance data",
    },
    "ANOMALY_ASSISTS": {
        "severity": SEVERITY_WARNING,
        "deduction": 6,
        "message": "Assists deviate strongly from the player's history",
        "recommendation": "Review match highlights and passing accuracy",
    },
    "ANOMALY_DURATION": {
        "severity": SEVERITY_WARNING,
        "deduction": 4,
        "message": "Match duration deviates strongly from the player's history",
        "recommendation": "Verify the match was played to completion",
    },
    "UNLIKELY_STREAK": {
        "severity": SEVERITY_WARNING,
        "deduction": 3,
        "message": "Consecutive wins form a statistically unlikely pattern",
        "recommendation": "Verify match authenticity and difficulty level",
    },
    "FORM_REVERSAL": {
        "severity": SEVERITY_WARNING,
        "deduction": 4,
        "message": "Large win reported right after a long losing run",
        "recommendation": "Ensure match outcome is correct",
    },
    "PERFORMANCE_SPIKE": {
        "severity": SEVERITY_WARNING,
        "deduction": 5,
        "message": "Sudden jump in recent scoring output",
        "recommendation": "Verify player effort and match circumstances",
    },
}


def get_rule(code: str) -> Dict[str, Any]:
    """Look up a rubric entry, raising KeyError for unknown codes."""
    return ISSUE_RULES[code]


def get_deduction(code: str) -> int:
    return ISSUE_RULES[code]["deduction"]


def make_issue(code: str, message: str = None, **data: Any) -> ValidationIssue:
    """Build a ValidationIssue whose severity and deduction come from the rubric."""
    rule = get_rule(code)
    if rule["severity"] == SEVERITY_WARNING:
        raise ValueError(f"{code} is a warning, not an issue")
    return ValidationIssue(
        code=code,
        severity=rule["severity"],
        message=message or rule["message"],
        score_deduction=rule["deduction"],
        data=data,
    )


def make_warning(code: str, message: str = None, **data: Any) -> ValidationWarning:
    """Build a ValidationWarning whose deduction and recommendation come from the rubric."""
    rule = get_rule(code)
    if rule["severity"] != SEVERITY_WARNING:
        raise ValueError(f"{code} is a {rule['severity']} issue, not a warning")
    return ValidationWarning(
        code=code,
        message=message or rule["message"],
        score_deduction=rule["deduction"],
        recommendation=rule.get("recommendation", ""),
        data=data,
    )


def rubric_to_dict() -> Dict[str, Dict[str, Any]]:
    """JSON-serializable copy of the rubric."""
    return {
        code: {
            "severity": rule["severity"],
            "deduction": rule["deduction"],
            "message": rule["message"],
            "recommendation": rule.get("recommendation", ""),
        }
        for code, rule in ISSUE_RULES.items()
    }

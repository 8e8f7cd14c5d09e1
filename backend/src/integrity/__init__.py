"""
Match Result Integrity Framework
================================

Scores every self-reported match 0-100 for plausibility and flags likely
fabrication before leaderboards, rewards or rankings trust the result.

Components:
- rule_validator.py: Structural/plausibility rules on one match record
- profiler.py: Per-player baseline (mean/stddev) from match history
- anomaly_detector.py: Z-score, streak and form heuristics (warnings only)
- fairness_scorer.py: Rubric-driven 0-100 score and validity verdict
- rubric.py: Declarative table of every issue code, severity and deduction
- report.py: Human-readable text reports
- pipeline.py: validate_match() entry point, soft rejection, player audits

Usage:
    from integrity import validate_match, generate_report, is_suspicious

    result = validate_match(match, team_stats, history)
    if is_suspicious(result):
        tag_for_review(match)
    print(generate_report(result))

How to Add Rules:
1. Add the code to ISSUE_RULES in rubric.py
2. Add the code to a group in RULE_GROUPS (rule_validator.py)
3. Add a corresponding _check_{code_lowercase} method to RuleValidator
"""

from .rubric import ISSUE_RULES, make_issue, make_warning
from .rule_validator import RuleValidator, RULE_GROUPS
from .profiler import StatisticalProfiler
from .anomaly_detector import AnomalyDetector
from .fairness_scorer import FairnessScorer, get_rating, get_player_rating
from .report import generate_report
from .pipeline import validate_match, is_suspicious, audit_player

__all__ = [
    "ISSUE_RULES",
    "make_issue",
    "make_warning",
    "RuleValidator",
    "RULE_GROUPS",
    "StatisticalProfiler",
    "AnomalyDetector",
    "FairnessScorer",
    "get_rating",
    "get_player_rating",
    "generate_report",
    "validate_match",
    "is_suspicious",
    "audit_player",
]

# Match Integrity Validator - Models Package

from .match import (
    MatchRecord, PlayerHistoryEntry, TeamStatLine, TeamMatchStats, MatchPayloadError,
    RESULT_HOME_WIN, RESULT_AWAY_WIN, RESULT_DRAW, TEAM_HOME, TEAM_AWAY,
    OUTCOME_WIN, OUTCOME_LOSS, OUTCOME_DRAW
)
from .validation import (
    ValidationIssue, ValidationWarning, ValidationResult, Findings,
    MetricStats, StatisticalProfile, AuditedMatch, PlayerAudit,
    SEVERITY_CRITICAL, SEVERITY_HIGH, SEVERITY_MEDIUM, SEVERITY_WARNING
)

__all__ = [
    'MatchRecord',
    'PlayerHistoryEntry',
    'TeamStatLine',
    'TeamMatchStats',
    'MatchPayloadError',
    'RESULT_HOME_WIN',
    'RESULT_AWAY_WIN',
    'RESULT_DRAW',
    'TEAM_HOME',
    'TEAM_AWAY',
    'OUTCOME_WIN',
    'OUTCOME_LOSS',
    'OUTCOME_DRAW',
    'ValidationIssue',
    'ValidationWarning',
    'ValidationResult',
    'Findings',
    'MetricStats',
    'StatisticalProfile',
    'AuditedMatch',
    'PlayerAudit',
    'SEVERITY_CRITICAL',
    'SEVERITY_HIGH',
    'SEVERITY_MEDIUM',
    'SEVERITY_WARNING',
]

"""
Match Integrity Validator - Validation Result Models
Findings, derived player profiles, and the aggregated validation result.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


SEVERITY_CRITICAL = 'critical'
SEVERITY_HIGH = 'high'
SEVERITY_MEDIUM = 'medium'
SEVERITY_WARNING = 'warning'

ISSUE_SEVERITIES = (SEVERITY_CRITICAL, SEVERITY_HIGH, SEVERITY_MEDIUM)

# Severities that make a match invalid regardless of its numeric score
BLOCKING_SEVERITIES = (SEVERITY_CRITICAL, SEVERITY_HIGH)


@dataclass(frozen=True)
class ValidationIssue:
    """A concrete, named finding that counts against validity."""
    code: str
    severity: str  # critical, high, medium
    message: str
    score_deduction: int
    data: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def is_blocking(self) -> bool:
        return self.severity in BLOCKING_SEVERITIES

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "score_deduction": self.score_deduction,
            "data": dict(self.data)
        }


@dataclass(frozen=True)
class ValidationWarning:
    """A non-blocking finding: statistically unusual but not impossible."""
    code: str
    message: str
    score_deduction: int
    recommendation: str = ""
    data: Dict[str, Any] = field(default_factory=dict, hash=False)

    severity = SEVERITY_WARNING

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "score_deduction": self.score_deduction,
            "recommendation": self.recommendation,
            "data": dict(self.data)
        }


@dataclass
class Findings:
    """Issues and warnings collected by one validation layer."""
    issues: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    def extend(self, other: 'Findings') -> None:
        self.issues.extend(other.issues)
        self.warnings.extend(other.warnings)

    @property
    def codes(self) -> List[str]:
        return [f.code for f in self.issues] + [f.code for f in self.warnings]

    def __bool__(self) -> bool:
        return bool(self.issues or self.warnings)


@dataclass(frozen=True)
class MetricStats:
    """Mean and sample standard deviation of one tracked metric."""
    mean: float
    stddev: float

    def zscore(self, value: float) -> Optional[float]:
        """Standardized deviation of value, or None when stddev is zero."""
        if not self.stddev:
            return None
        return (value - self.mean) / self.stddev


@dataclass(frozen=True)
class StatisticalProfile:
    """
    Per-player baseline derived from match history.

    Ephemeral: rebuilt on every validation call and never persisted.
    When `sufficient` is False the metric baselines must not be used for
    z-score checks.
    """
    sample_size: int
    sufficient: bool
    goals: Optional[MetricStats] = None
    assists: Optional[MetricStats] = None
    duration: Optional[MetricStats] = None
    win_rate: Optional[float] = None  # 0.0-1.0
    max_goals: Optional[int] = None
    max_assists: Optional[int] = None

    def metrics(self) -> Tuple[Tuple[str, Optional[MetricStats]], ...]:
        """Tracked metrics in a fixed order."""
        return (
            ("goals", self.goals),
            ("assists", self.assists),
            ("duration", self.duration),
        )

    def to_dict(self) -> dict:
        def _stats(s: Optional[MetricStats]):
            return None if s is None else {"mean": s.mean, "stddev": s.stddev}

        return {
            "sample_size": self.sample_size,
            "sufficient": self.sufficient,
            "goals": _stats(self.goals),
            "assists": _stats(self.assists),
            "duration": _stats(self.duration),
            "win_rate": self.win_rate,
            "max_goals": self.max_goals,
            "max_assists": self.max_assists
        }


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome of validating one match."""
    is_valid: bool
    score: int  # 0-100
    issues: Tuple[ValidationIssue, ...]
    warnings: Tuple[ValidationWarning, ...]
    timestamp: int  # epoch milliseconds of evaluation
    checks: Dict[str, Optional[bool]] = field(default_factory=dict, hash=False)  # None = skipped

    @property
    def issue_codes(self) -> List[str]:
        return [i.code for i in self.issues]

    @property
    def warning_codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "is_valid": self.is_valid,
            "score": self.score,
            "issues": [i.to_dict() for i in self.issues],
            "warnings": [w.to_dict() for w in self.warnings],
            "timestamp": self.timestamp,
            "checks": dict(self.checks)
        }


@dataclass(frozen=True)
class AuditedMatch:
    """One history entry re-validated during a player audit."""
    match_id: Optional[str]
    timestamp: int  # epoch milliseconds of the match
    result: ValidationResult
    suspicious: bool

    def to_dict(self) -> dict:
        return {
            "match_id": self.match_id,
            "timestamp": self.timestamp,
            "score": self.result.score,
            "is_valid": self.result.is_valid,
            "suspicious": self.suspicious,
            "issue_codes": self.result.issue_codes,
            "warning_codes": self.result.warning_codes
        }


@dataclass(frozen=True)
class PlayerAudit:
    """
    Fairness summary over a player's whole match history.

    Every match is validated against the matches played before it, so the
    audit of an old match never depends on results reported later.
    """
    player_id: Optional[str]
    matches: Tuple[AuditedMatch, ...]
    average_score: int  # 0-100, rounded half up; 100 for an empty history
    rating: str
    profile: StatisticalProfile
    timestamp: int  # epoch milliseconds of evaluation

    @property
    def total_matches(self) -> int:
        return len(self.matches)

    @property
    def suspicious_matches(self) -> List[AuditedMatch]:
        return [m for m in self.matches if m.suspicious]

    @property
    def suspicious_count(self) -> int:
        return len(self.suspicious_matches)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "player_id": self.player_id,
            "total_matches": self.total_matches,
            "average_score": self.average_score,
            "suspicious_count": self.suspicious_count,
            "suspicious_match_ids": [m.match_id for m in self.suspicious_matches],
            "rating": self.rating,
            "profile": self.profile.to_dict(),
            "timestamp": self.timestamp,
            "matches": [m.to_dict() for m in self.matches]
        }

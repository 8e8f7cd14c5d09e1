"""
Match validation pipeline.

    MatchRecord (+ TeamMatchStats, + history)
        -> RuleValidator
        -> StatisticalProfiler -> AnomalyDetector
        -> FairnessScorer
        -> ValidationResult

audit_player() runs the same pipeline over every match of a player's
history and summarizes the scores into a PlayerAudit.

validate_match() is total over any structurally parseable input: every
finding becomes data in the result and nothing is raised for validation
outcomes. It holds no state between calls, so it is safe to call from
concurrent request handlers. The evaluation clock is an explicit input:
identical arguments (including now_ms) give identical results.
"""

import math
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from models.match import MatchRecord, TeamMatchStats
from models.validation import AuditedMatch, Findings, PlayerAudit, ValidationResult
from integrity.rule_validator import RuleValidator
from integrity.profiler import StatisticalProfiler, chronological
from integrity.anomaly_detector import AnomalyDetector
from integrity.fairness_scorer import FairnessScorer, get_player_rating
from utils.config import SUSPICIOUS_SCORE_THRESHOLD
from utils.logger import log_validation_complete, log_player_audit_complete


def current_time_ms() -> int:
    """Current UTC time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def validate_match(
    match: MatchRecord,
    team_stats: Optional[TeamMatchStats] = None,
    history: Optional[Sequence[MatchRecord]] = None,
    now_ms: Optional[int] = None,
    thresholds: Optional[Dict[str, float]] = None,
) -> ValidationResult:
    """
    Validate one reported match.

    Args:
        match: The reported match
        team_stats: Optional secondary stats snapshot
        history: Optional prior matches for the reporting player (any order)
        now_ms: Evaluation time in epoch ms (default: current time)
        thresholds: Optional overrides, shared by all layers

    Returns:
        ValidationResult with score clamped to [0, 100]
    """
    if now_ms is None:
        now_ms = current_time_ms()
    history = list(history or [])

    rule_findings = RuleValidator(thresholds).run_all_checks(match, now_ms, team_stats)

    profile = StatisticalProfiler(thresholds).build_profile(history)
    anomaly_findings = AnomalyDetector(thresholds).detect_anomalies(match, profile, history)

    findings = Findings()
    for group_findings in rule_findings.values():
        findings.extend(group_findings)
    findings.extend(anomaly_findings)

    checks = {group: not group_findings for group, group_findings in rule_findings.items()}
    checks.setdefault("team_stats", None)
    checks["anomaly"] = (not anomaly_findings) if history else None

    scorer = FairnessScorer()
    result = ValidationResult(
        is_valid=scorer.is_valid(findings.issues),
        score=scorer.calculate_score(findings.issues, findings.warnings),
        issues=tuple(findings.issues),
        warnings=tuple(findings.warnings),
        timestamp=now_ms,
        checks=checks,
    )

    log_validation_complete(
        match_id=match.match_id,
        player_id=match.player_id,
        score=result.score,
        is_valid=result.is_valid,
        issue_codes=result.issue_codes,
        warning_codes=result.warning_codes,
    )

    return result


def is_suspicious(result: ValidationResult, threshold: Optional[int] = None) -> bool:
    """
    Soft rejection: should the match be stored tagged as suspicious?

    True when the result is invalid or its score is below the threshold
    (default SUSPICIOUS_SCORE_THRESHOLD). Callers still store the match.
    """
    if threshold is None:
        threshold = SUSPICIOUS_SCORE_THRESHOLD
    return not result.is_valid or result.score < threshold


def audit_player(
    history: Sequence[MatchRecord],
    now_ms: Optional[int] = None,
    thresholds: Optional[Dict[str, float]] = None,
    suspicious_threshold: Optional[int] = None,
    player_id: Optional[str] = None,
) -> PlayerAudit:
    """
    Audit a player's whole match history.

    Each match is validated against the matches played before it (oldest
    first), then scores are averaged and suspicious matches counted.

    Args:
        history: The player's matches (any order, may be empty)
        now_ms: Evaluation time in epoch ms (default: current time)
        thresholds: Optional overrides, shared by all layers
        suspicious_threshold: Score below which a valid match is suspicious
        player_id: Audited player (default: the player of the oldest entry)

    Returns:
        PlayerAudit; an empty history averages 100 and rates excellent
    """
    if now_ms is None:
        now_ms = current_time_ms()
    ordered = chronological(history or [])

    matches = []
    for index, match in enumerate(ordered):
        result = validate_match(match, history=ordered[:index], now_ms=now_ms, thresholds=thresholds)
        matches.append(AuditedMatch(
            match_id=match.match_id,
            timestamp=match.timestamp,
            result=result,
            suspicious=is_suspicious(result, suspicious_threshold),
        ))

    average = sum(m.result.score for m in matches) / len(matches) if matches else 100
    suspicious_count = sum(1 for m in matches if m.suspicious)
    if player_id is None and ordered:
        player_id = ordered[0].player_id

    audit = PlayerAudit(
        player_id=player_id,
        matches=tuple(matches),
        average_score=int(math.floor(average + 0.5)),
        rating=get_player_rating(average, suspicious_count, len(matches)),
        profile=StatisticalProfiler(thresholds).build_profile(ordered),
        timestamp=now_ms,
    )

    log_player_audit_complete(
        player_id=audit.player_id,
        total_matches=audit.total_matches,
        average_score=audit.average_score,
        suspicious_count=audit.suspicious_count,
        rating=audit.rating,
    )

    return audit

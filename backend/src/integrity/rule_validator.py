"""
Match Rule Validation
=====================

Stateless structural and plausibility checks on one reported match.

Every rule runs unconditionally and independently: a failing rule never
stops the others, so the findings list is always complete.

Rule groups (used for the checks summary):
- scores: score sign, magnitude, declared result, goal rate
- player_stats: reporting player's goals/assists
- timing: duration band and timestamp window
- team_stats: secondary consistency (only when a stats snapshot is supplied)

Usage:
    from integrity import RuleValidator

    validator = RuleValidator()
    findings = validator.run_all_checks(match, now_ms, team_stats)

How to Add Rules:
1. Add the code to ISSUE_RULES in rubric.py (severity, deduction, message)
2. Add the code to a group in RULE_GROUPS below
3. Add a corresponding _check_{code_lowercase} method to RuleValidator
"""

import math
from typing import Dict, List, Optional, Union

from models.match import MatchRecord, TeamMatchStats
from models.validation import Findings, ValidationIssue, ValidationWarning
from integrity.rubric import make_issue, make_warning
from utils.config import RETENTION_DAYS, FUTURE_TOLERANCE_SECONDS


MS_PER_DAY = 24 * 60 * 60 * 1000

Finding = Union[ValidationIssue, ValidationWarning]

# Rule codes per group, in evaluation order
RULE_GROUPS: Dict[str, List[str]] = {
    "scores": [
        "NEGATIVE_SCORE",
        "UNREALISTIC_SCORE",
        "RESULT_MISMATCH",
        "PLAYER_GOALS_EXCEED_TEAM_SCORE",
        "UNREALISTIC_GOAL_RATE",
    ],
    "player_stats": [
        "NEGATIVE_STATS",
        "EXCESSIVE_GOALS",
        "EXCESSIVE_ASSISTS",
        "UNUSUAL_CONTRIBUTION",
        "PLAYER_GOAL_RATE_HIGH",
    ],
    "timing": [
        "INVALID_DURATION",
        "FUTURE_MATCH",
        "VERY_SHORT_MATCH",
        "VERY_LONG_MATCH",
        "VERY_OLD_MATCH",
    ],
    "team_stats": [
        "POSSESSION_MISMATCH",
        "INVALID_PASS_ACCURACY",
        "NEGATIVE_TEAM_STATS",
        "SHOTS_ON_TARGET_EXCEED_SHOTS",
        "GOALS_EXCEED_SHOTS_ON_TARGET",
    ],
}


def _has_duration(match: MatchRecord) -> bool:
    return math.isfinite(match.duration) and match.duration > 0


class RuleValidator:
    """
    Runs rule checks against a single match record.

    Thresholds are configurable but default to:
    - Team score cap: 50
    - Player caps: 10 goals, 8 assists, 15 combined
    - Duration band: 20-200 minutes
    - Retention window: 730 days
    """

    DEFAULT_THRESHOLDS = {
        "max_team_score": 50,
        "max_player_goals": 10,
        "max_player_assists": 8,
        "max_player_contribution": 15,
        "max_goals_per_minute": 0.1,  # ~9 goals per 90 minutes
        "max_player_goals_per_minute": 0.05,  # 3 goals per hour
        "min_duration": 20,
        "max_duration": 200,
        "retention_days": RETENTION_DAYS,
        "future_tolerance_ms": FUTURE_TOLERANCE_SECONDS * 1000,
        "possession_tolerance": 5,
    }

    def __init__(self, thresholds: Optional[Dict[str, float]] = None):
        """
        Args:
            thresholds: Optional custom thresholds (defaults to DEFAULT_THRESHOLDS)
        """
        self.thresholds = {**self.DEFAULT_THRESHOLDS, **(thresholds or {})}

    # =========================================================================
    # SCORE RULES
    # =========================================================================

    def _check_negative_score(self, match, team_stats, now_ms) -> Optional[Finding]:
        if match.home_score < 0 or match.away_score < 0:
            return make_issue(
                "NEGATIVE_SCORE",
                home_score=match.home_score,
                away_score=match.away_score,
            )
        return None

    def _check_unrealistic_score(self, match, team_stats, now_ms) -> Optional[Finding]:
        cap = self.thresholds["max_team_score"]
        if match.home_score > cap or match.away_score > cap:
            return make_issue(
                "UNREALISTIC_SCORE",
                f"Unrealistic score detected: {match.home_score}-{match.away_score}",
                home_score=match.home_score,
                away_score=match.away_score,
                threshold=cap,
            )
        return None

    def _check_result_mismatch(self, match, team_stats, now_ms) -> Optional[Finding]:
        expected = match.expected_result
        if match.result != expected:
            return make_issue(
                "RESULT_MISMATCH",
                f"Reported result ({match.result}) doesn't match scores "
                f"({match.home_score}-{match.away_score})",
                reported=match.result,
                calculated=expected,
            )
        return None

    def _check_player_goals_exceed_team_score(self, match, team_stats, now_ms) -> Optional[Finding]:
        team_score = match.player_team_score
        if match.player_goals > team_score:
            return make_issue(
                "PLAYER_GOALS_EXCEED_TEAM_SCORE",
                f"Player goals ({match.player_goals}) exceed team score ({team_score})",
                player_goals=match.player_goals,
                team_score=team_score,
            )
        return None

    def _check_unrealistic_goal_rate(self, match, team_stats, now_ms) -> Optional[Finding]:
        if not _has_duration(match):
            return None
        # Rates are computed over at least min_duration so short matches
        # are not judged on a handful of minutes.
        minutes = max(match.duration, self.thresholds["min_duration"])
        rate = match.total_goals / minutes
        if rate > self.thresholds["max_goals_per_minute"]:
            return make_warning(
                "UNREALISTIC_GOAL_RATE",
                f"Goal rate ({rate * 90:.1f} per 90 min) is unrealistic",
                total_goals=match.total_goals,
                duration=match.duration,
                rate=round(rate, 4),
            )
        return None

    # =========================================================================
    # PLAYER RULES
    # =========================================================================

    def _check_negative_stats(self, match, team_stats, now_ms) -> Optional[Finding]:
        if match.player_goals < 0 or match.player_assists < 0:
            return make_issue(
                "NEGATIVE_STATS",
                player_goals=match.player_goals,
                player_assists=match.player_assists,
            )
        return None

    def _check_excessive_goals(self, match, team_stats, now_ms) -> Optional[Finding]:
        cap = self.thresholds["max_player_goals"]
        if match.player_goals > cap:
            return make_issue(
                "EXCESSIVE_GOALS",
                f"Player scored {match.player_goals} goals in one match (cap {cap})",
                player_goals=match.player_goals,
                threshold=cap,
            )
        return None

    def _check_excessive_assists(self, match, team_stats, now_ms) -> Optional[Finding]:
        cap = self.thresholds["max_player_assists"]
        if match.player_assists > cap:
            return make_issue(
                "EXCESSIVE_ASSISTS",
                f"Player had {match.player_assists} assists in one match (cap {cap})",
                player_assists=match.player_assists,
                threshold=cap,
            )
        return None

    def _check_unusual_contribution(self, match, team_stats, now_ms) -> Optional[Finding]:
        total = match.player_goals + match.player_assists
        if total > self.thresholds["max_player_contribution"]:
            return make_warning(
                "UNUSUAL_CONTRIBUTION",
                f"Very high player contribution: {total} goals+assists",
                contribution=total,
            )
        return None

    def _check_player_goal_rate_high(self, match, team_stats, now_ms) -> Optional[Finding]:
        if not _has_duration(match):
            return None
        minutes = max(match.duration, self.thresholds["min_duration"])
        rate = match.player_goals / minutes
        if rate > self.thresholds["max_player_goals_per_minute"]:
            return make_warning(
                "PLAYER_GOAL_RATE_HIGH",
                f"Player goal rate ({rate * 90:.1f} per 90 min) is exceptionally high",
                player_goals=match.player_goals,
                duration=match.duration,
            )
        return None

    # =========================================================================
    # TIMING RULES
    # =========================================================================

    def _check_invalid_duration(self, match, team_stats, now_ms) -> Optional[Finding]:
        if not _has_duration(match):
            return make_issue(
                "INVALID_DURATION",
                f"Match duration must be positive, got {match.duration}",
                duration=match.duration,
            )
        return None

    def _check_future_match(self, match, team_stats, now_ms) -> Optional[Finding]:
        if match.timestamp > now_ms + self.thresholds["future_tolerance_ms"]:
            return make_issue(
                "FUTURE_MATCH",
                timestamp=match.timestamp,
                now=now_ms,
            )
        return None

    def _check_very_short_match(self, match, team_stats, now_ms) -> Optional[Finding]:
        if _has_duration(match) and match.duration < self.thresholds["min_duration"]:
            return make_warning(
                "VERY_SHORT_MATCH",
                f"Match duration is only {match.duration:g} minutes",
                duration=match.duration,
                threshold=self.thresholds["min_duration"],
            )
        return None

    def _check_very_long_match(self, match, team_stats, now_ms) -> Optional[Finding]:
        if _has_duration(match) and match.duration > self.thresholds["max_duration"]:
            return make_warning(
                "VERY_LONG_MATCH",
                f"Match duration is {match.duration:g} minutes (unusual)",
                duration=match.duration,
                threshold=self.thresholds["max_duration"],
            )
        return None

    def _check_very_old_match(self, match, team_stats, now_ms) -> Optional[Finding]:
        retention_days = self.thresholds["retention_days"]
        if now_ms - match.timestamp > retention_days * MS_PER_DAY:
            return make_warning(
                "VERY_OLD_MATCH",
                f"Match is more than {retention_days} days old",
                timestamp=match.timestamp,
                retention_days=retention_days,
            )
        return None

    # =========================================================================
    # TEAM STAT RULES
    # =========================================================================

    def _check_possession_mismatch(self, match, team_stats, now_ms) -> Optional[Finding]:
        home, away = team_stats.home.possession, team_stats.away.possession
        if home is None or away is None:
            return None
        total = home + away
        if not math.isfinite(total) or abs(total - 100) > self.thresholds["possession_tolerance"]:
            return make_issue(
                "POSSESSION_MISMATCH",
                f"Total possession is {total:g}%, not 100%",
                home_possession=home,
                away_possession=away,
            )
        return None

    def _check_invalid_pass_accuracy(self, match, team_stats, now_ms) -> Optional[Finding]:
        bad = {
            team: line.pass_accuracy
            for team, line in team_stats.sides()
            if line.pass_accuracy is not None and not 0 <= line.pass_accuracy <= 100
        }
        if bad:
            return make_issue(
                "INVALID_PASS_ACCURACY",
                "Invalid pass accuracy: " + ", ".join(f"{t} {v:g}%" for t, v in bad.items()),
                **bad,
            )
        return None

    def _check_negative_team_stats(self, match, team_stats, now_ms) -> Optional[Finding]:
        bad = {
            team: line.negative_fields()
            for team, line in team_stats.sides()
            if line.negative_fields()
        }
        if bad:
            return make_issue("NEGATIVE_TEAM_STATS", **bad)
        return None

    def _check_shots_on_target_exceed_shots(self, match, team_stats, now_ms) -> Optional[Finding]:
        bad = [
            team for team, line in team_stats.sides()
            if line.shots is not None and line.shots_on_target is not None
            and line.shots_on_target > line.shots
        ]
        if bad:
            return make_issue(
                "SHOTS_ON_TARGET_EXCEED_SHOTS",
                f"Shots on target exceed total shots ({', '.join(bad)})",
                teams=bad,
            )
        return None

    def _check_goals_exceed_shots_on_target(self, match, team_stats, now_ms) -> Optional[Finding]:
        scores = {"home": match.home_score, "away": match.away_score}
        bad = [
            team for team, line in team_stats.sides()
            if line.shots_on_target is not None and scores[team] > line.shots_on_target
        ]
        if bad:
            return make_issue(
                "GOALS_EXCEED_SHOTS_ON_TARGET",
                f"Team score exceeds shots on target ({', '.join(bad)})",
                teams=bad,
            )
        return None

    # =========================================================================
    # RUNNERS
    # =========================================================================

    def run_check(
        self,
        code: str,
        match: MatchRecord,
        team_stats: Optional[TeamMatchStats],
        now_ms: int,
    ) -> Optional[Finding]:
        """Run a single rule by code."""
        check = getattr(self, f"_check_{code.lower()}", None)
        if check is None:
            raise KeyError(f"No check registered for rule {code}")
        return check(match, team_stats, now_ms)

    def run_group(
        self,
        group: str,
        match: MatchRecord,
        team_stats: Optional[TeamMatchStats],
        now_ms: int,
    ) -> Findings:
        """Run every rule in a group and collect the findings."""
        findings = Findings()
        for code in RULE_GROUPS[group]:
            finding = self.run_check(code, match, team_stats, now_ms)
            if finding is None:
                continue
            if isinstance(finding, ValidationIssue):
                findings.issues.append(finding)
            else:
                findings.warnings.append(finding)
        return findings

    def run_all_checks(
        self,
        match: MatchRecord,
        now_ms: int,
        team_stats: Optional[TeamMatchStats] = None,
    ) -> Dict[str, Findings]:
        """
        Run all rule groups for a match.

        Returns:
            Findings per group. The team_stats group is omitted when no
            stats snapshot was supplied.
        """
        results = {}
        for group in RULE_GROUPS:
            if group == "team_stats" and team_stats is None:
                continue
            results[group] = self.run_group(group, match, team_stats, now_ms)
        return results

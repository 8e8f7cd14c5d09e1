"""
Anomaly Detection
=================

Statistical anomaly detection for reported matches.
Catches implausible performances that hard rules might miss.

Detection Methods:
1. Z-Score: goals, assists or duration > 3 standard deviations from the
   player's historical mean (requires a sufficient profile)
2. Streak likelihood: consecutive wins that are improbable under the
   player's smoothed win rate before the run (a fair coin when the
   run covers the whole history)
3. Form reversal: a large win straight after a long losing run
4. Performance spike: recent scoring average jumps well above the
   average of the matches before it

Every finding is a warning: anomalies are suspicious, not proof.

Usage:
    from integrity import AnomalyDetector

    detector = AnomalyDetector()
    findings = detector.detect_anomalies(match, profile, history)
"""

import math
from typing import Dict, List, Optional, Sequence

from models.match import MatchRecord, OUTCOME_LOSS, OUTCOME_WIN
from models.validation import Findings, StatisticalProfile, ValidationWarning
from integrity.profiler import chronological
from integrity.rubric import make_warning
from utils.config import ZSCORE_THRESHOLD
from utils.logger import logger


# Profile metric name -> (MatchRecord attribute, warning code)
ZSCORE_METRICS = {
    "goals": ("player_goals", "ANOMALY_GOALS"),
    "assists": ("player_assists", "ANOMALY_ASSISTS"),
    "duration": ("duration", "ANOMALY_DURATION"),
}


def _trailing_run(outcomes: Sequence[str], outcome: str) -> int:
    """Length of the run of `outcome` at the end of outcomes."""
    run = 0
    for value in reversed(outcomes):
        if value != outcome:
            break
        run += 1
    return run


class AnomalyDetector:
    """
    Detects statistical anomalies in a reported match.

    Thresholds are configurable but default to:
    - Z-score: 3.0 (3 standard deviations)
    - Streak: 6+ consecutive wins with probability < 1%, baseline capped at 90%
    - Form reversal: win by 3+ goals after 5+ straight losses
    - Performance spike: 5-match goal average up by more than 3
    """

    DEFAULT_THRESHOLDS = {
        "zscore": ZSCORE_THRESHOLD,
        "min_streak": 6,
        "streak_probability": 0.01,
        "max_streak_baseline": 0.9,
        "form_reversal_losses": 5,
        "form_reversal_margin": 3,
        "spike_window": 5,
        "spike_goals": 3,
    }

    def __init__(self, thresholds: Optional[Dict[str, float]] = None):
        """
        Args:
            thresholds: Optional custom thresholds (defaults to DEFAULT_THRESHOLDS)
        """
        self.thresholds = {**self.DEFAULT_THRESHOLDS, **(thresholds or {})}

    def detect_anomalies(
        self,
        match: MatchRecord,
        profile: StatisticalProfile,
        history: Optional[Sequence[MatchRecord]] = None,
    ) -> Findings:
        """
        Run all anomaly detection for a match.

        Args:
            match: The reported match
            profile: Baseline built from history by StatisticalProfiler
            history: The same prior matches (any order)

        Returns:
            Findings containing warnings only
        """
        ordered = chronological(history or [])

        warnings: List[ValidationWarning] = []
        warnings.extend(self._detect_zscore_anomalies(match, profile))

        streak = self._detect_unlikely_streak(match, ordered)
        if streak:
            warnings.append(streak)

        reversal = self._detect_form_reversal(match, ordered)
        if reversal:
            warnings.append(reversal)

        spike = self._detect_performance_spike(match, profile, ordered)
        if spike:
            warnings.append(spike)

        if warnings:
            logger.debug(
                f"Anomaly detection for player {match.player_id}: "
                f"{', '.join(w.code for w in warnings)}"
            )

        return Findings(warnings=warnings)

    def _detect_zscore_anomalies(
        self, match: MatchRecord, profile: StatisticalProfile
    ) -> List[ValidationWarning]:
        """
        Flag metrics more than `zscore` standard deviations from the mean.

        Skipped entirely for insufficient profiles; skipped per metric when
        the historical stddev is zero.
        """
        if not profile.sufficient:
            return []

        warnings = []
        for metric, stats in profile.metrics():
            if stats is None:
                continue
            attribute, code = ZSCORE_METRICS[metric]
            value = getattr(match, attribute)
            zscore = stats.zscore(value)
            if zscore is None or not math.isfinite(zscore):
                continue
            if abs(zscore) > self.thresholds["zscore"]:
                warnings.append(
                    make_warning(
                        code,
                        f"{metric.capitalize()} ({value:g}) is {abs(zscore):.1f} standard "
                        f"deviations from the player's average ({stats.mean:.1f})",
                        value=value,
                        mean=round(stats.mean, 4),
                        stddev=round(stats.stddev, 4),
                        zscore=round(zscore, 2),
                    )
                )
        return warnings

    def _detect_unlikely_streak(
        self, match: MatchRecord, ordered: List[MatchRecord]
    ) -> Optional[ValidationWarning]:
        """
        Estimate the probability of the win streak ending with this match.

        Baseline win probability is the Laplace-smoothed win rate
        (wins + 1) / (n + 2) of the matches before the current run, capped
        at `max_streak_baseline`. With nothing before the run it is a fair coin.
        """
        if match.player_outcome != OUTCOME_WIN:
            return None

        outcomes = [e.player_outcome for e in ordered]
        streak = _trailing_run(outcomes, OUTCOME_WIN) + 1
        if streak < self.thresholds["min_streak"]:
            return None

        before_run = outcomes[:len(outcomes) - (streak - 1)]
        wins = before_run.count(OUTCOME_WIN)
        baseline = min(
            (wins + 1) / (len(before_run) + 2),
            self.thresholds["max_streak_baseline"],
        )
        probability = baseline ** streak
        if probability >= self.thresholds["streak_probability"]:
            return None

        return make_warning(
            "UNLIKELY_STREAK",
            f"{streak} consecutive wins has an estimated probability of "
            f"{probability:.2%} at a {baseline:.0%} win rate",
            streak=streak,
            baseline_win_rate=round(baseline, 4),
            probability=round(probability, 6),
        )

    def _detect_form_reversal(
        self, match: MatchRecord, ordered: List[MatchRecord]
    ) -> Optional[ValidationWarning]:
        """Flag a large win reported right after a long losing run."""
        if match.player_outcome != OUTCOME_WIN:
            return None

        margin = match.player_team_score - match.opponent_score
        if margin < self.thresholds["form_reversal_margin"]:
            return None

        losses = _trailing_run([e.player_outcome for e in ordered], OUTCOME_LOSS)
        if losses < self.thresholds["form_reversal_losses"]:
            return None

        return make_warning(
            "FORM_REVERSAL",
            f"Win by {margin} goals reported after {losses} consecutive losses",
            margin=margin,
            losing_streak=losses,
        )

    def _detect_performance_spike(
        self,
        match: MatchRecord,
        profile: StatisticalProfile,
        ordered: List[MatchRecord],
    ) -> Optional[ValidationWarning]:
        """
        Compare goal averages of the latest window (this match plus the most
        recent priors) with the window before it.
        """
        window = int(self.thresholds["spike_window"])
        if not profile.sufficient or len(ordered) < 2 * window - 1:
            return None

        split = len(ordered) - (window - 1)
        recent = [match.player_goals] + [e.player_goals for e in ordered[split:]]
        earlier = [e.player_goals for e in ordered[split - window:split]]

        recent_avg = sum(recent) / window
        earlier_avg = sum(earlier) / window
        jump = recent_avg - earlier_avg
        if jump <= self.thresholds["spike_goals"]:
            return None

        return make_warning(
            "PERFORMANCE_SPIKE",
            f"Recent scoring ({recent_avg:.1f} goals avg) is up {jump:.1f} "
            f"from earlier ({earlier_avg:.1f})",
            recent_average=recent_avg,
            earlier_average=earlier_avg,
        )

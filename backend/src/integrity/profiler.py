"""
Statistical Profiler
====================

Builds a per-player baseline from prior match records:
mean and sample standard deviation of goals, assists and duration.

The profile is a pure function of the history it is given. Input order
does not matter: statistics.mean/stdev sum exactly, and sequence-based
helpers sort by timestamp first.

Below the minimum sample size the profile is marked insufficient and
carries no metric baselines, so z-score checks are skipped for that player.
"""

import math
import statistics
from typing import Dict, Iterable, List, Optional, Sequence

from models.match import MatchRecord, OUTCOME_WIN
from models.validation import MetricStats, StatisticalProfile
from utils.config import MIN_HISTORY_SAMPLE


def _sort_key(entry: MatchRecord):
    # Timestamp first; the remaining fields only break ties deterministically
    return (
        entry.timestamp,
        entry.match_id or "",
        entry.home_score,
        entry.away_score,
        entry.result,
        entry.player_team,
        entry.player_goals,
        entry.player_assists,
        entry.duration,
        entry.home_team,
        entry.away_team,
    )


def chronological(history: Iterable[MatchRecord]) -> List[MatchRecord]:
    """Return history oldest-first, independent of the input order."""
    return sorted(history, key=_sort_key)


def _metric(values: Sequence[float]) -> Optional[MetricStats]:
    # Non-finite entries carry no baseline information
    values = [v for v in values if math.isfinite(v)]
    if not values:
        return None
    mean = float(statistics.mean(values))
    stddev = float(statistics.stdev(values)) if len(values) > 1 else 0.0
    return MetricStats(mean=mean, stddev=stddev)


class StatisticalProfiler:
    """
    Derives StatisticalProfile objects from player history.

    Thresholds default to:
    - Minimum sample size: 5 prior matches
    """

    DEFAULT_THRESHOLDS = {
        "min_sample_size": MIN_HISTORY_SAMPLE,
    }

    def __init__(self, thresholds: Optional[Dict[str, float]] = None):
        self.thresholds = {**self.DEFAULT_THRESHOLDS, **(thresholds or {})}

    def build_profile(self, history: Optional[Sequence[MatchRecord]]) -> StatisticalProfile:
        """
        Build a baseline from prior matches.

        Args:
            history: Prior matches for the player (any order, may be empty)

        Returns:
            StatisticalProfile; `sufficient` is False below the minimum sample size
        """
        entries = list(history or [])
        sample_size = len(entries)

        if sample_size == 0:
            return StatisticalProfile(sample_size=0, sufficient=False)

        wins = sum(1 for e in entries if e.player_outcome == OUTCOME_WIN)
        win_rate = wins / sample_size
        max_goals = max(e.player_goals for e in entries)
        max_assists = max(e.player_assists for e in entries)

        if sample_size < self.thresholds["min_sample_size"]:
            return StatisticalProfile(
                sample_size=sample_size,
                sufficient=False,
                win_rate=win_rate,
                max_goals=max_goals,
                max_assists=max_assists,
            )

        return StatisticalProfile(
            sample_size=sample_size,
            sufficient=True,
            goals=_metric([e.player_goals for e in entries]),
            assists=_metric([e.player_assists for e in entries]),
            duration=_metric([e.duration for e in entries]),
            win_rate=win_rate,
            max_goals=max_goals,
            max_assists=max_assists,
        )

"""
Unit tests for validate_match() - the end-to-end validation pipeline.

TDD: These tests pin the behaviour callers rely on:
- A plausible match scores 100 and is valid
- Score is always clamped to [0, 100]
- is_valid is false iff a critical/high issue exists
- Identical inputs give identical results
- Anomaly warnings need a sufficient history sample
- Reference scenarios (goals > team score, short match, future match,
  negative score, goals anomaly)
"""

import dataclasses
import random
from unittest.mock import patch

import pytest
from freezegun import freeze_time

from integrity.pipeline import validate_match, is_suspicious, current_time_ms, audit_player
from models.validation import BLOCKING_SEVERITIES


@pytest.fixture
def steady_scorer_history(make_history):
    """20 matches averaging one goal (stddev ~0.5), 120 minutes each."""
    goals = [1] * 20
    goals[3] = goals[8] = 0
    goals[12] = goals[17] = 2
    return make_history(['win', 'loss'] * 10, goals=goals, assists=[0] * 20,
                        durations=[120] * 20)


class TestCleanMatch:
    """A plausible match passes every layer."""

    def test_clean_match_scores_100(self, make_match, now_ms):
        result = validate_match(make_match(), now_ms=now_ms)

        assert result.score == 100
        assert result.is_valid is True
        assert result.issues == ()
        assert result.warnings == ()

    def test_clean_match_with_stats_and_history(
        self, make_match, make_history, sample_team_stats_payload, now_ms
    ):
        from models.match import TeamMatchStats

        history = make_history(['win', 'loss', 'draw'] * 3,
                               goals=[0, 1, 2, 1, 1, 0, 2, 1, 1])
        stats = TeamMatchStats.from_dict(sample_team_stats_payload)

        result = validate_match(make_match(), team_stats=stats, history=history, now_ms=now_ms)

        assert result.score == 100
        assert result.is_valid is True
        assert all(result.checks.values())

    def test_result_timestamp_is_evaluation_time(self, make_match, now_ms):
        assert validate_match(make_match(), now_ms=now_ms).timestamp == now_ms


class TestChecksSummary:
    """Per-group pass/fail summary."""

    def test_skipped_groups_are_none(self, make_match, now_ms):
        checks = validate_match(make_match(), now_ms=now_ms).checks

        assert checks == {
            "scores": True,
            "player_stats": True,
            "timing": True,
            "team_stats": None,
            "anomaly": None,
        }

    def test_failed_group_is_false(self, make_match, now_ms):
        match = make_match(home_score=3, away_score=1, player_goals=5)

        checks = validate_match(match, now_ms=now_ms).checks

        assert checks["scores"] is False
        assert checks["timing"] is True


class TestScenarios:
    """Reference scenarios."""

    def test_player_goals_exceed_team_score(self, make_match, now_ms):
        match = make_match(home_score=3, away_score=1, result='home_win', player_goals=5)

        result = validate_match(match, now_ms=now_ms)

        assert "PLAYER_GOALS_EXCEED_TEAM_SCORE" in result.issue_codes
        issue = [i for i in result.issues if i.code == "PLAYER_GOALS_EXCEED_TEAM_SCORE"][0]
        assert issue.severity == 'critical'
        assert result.is_valid is False
        assert result.score <= 80

    def test_very_short_match_alone_keeps_validity(self, make_match, now_ms):
        match = make_match(home_score=1, away_score=0, player_goals=0, duration=10)

        result = validate_match(match, now_ms=now_ms)

        assert "VERY_SHORT_MATCH" in result.warning_codes
        assert result.issues == ()
        assert result.is_valid is True
        assert result.score == 95

    def test_future_match(self, make_match, now_ms, day_ms):
        match = make_match(timestamp=now_ms + day_ms)

        result = validate_match(match, now_ms=now_ms)

        assert "FUTURE_MATCH" in result.issue_codes
        assert result.is_valid is False

    def test_negative_score(self, make_match, now_ms):
        match = make_match(home_score=-1, away_score=0, result='away_win', player_goals=0)

        result = validate_match(match, now_ms=now_ms)

        issue = [i for i in result.issues if i.code == "NEGATIVE_SCORE"][0]
        assert issue.severity == 'critical'
        assert result.is_valid is False

    def test_goals_anomaly_reduces_score_but_keeps_validity(
        self, make_match, steady_scorer_history, now_ms
    ):
        match = make_match(home_score=10, away_score=0, player_goals=10,
                           player_assists=0, duration=120)

        result = validate_match(match, history=steady_scorer_history, now_ms=now_ms)

        assert "ANOMALY_GOALS" in result.warning_codes
        assert result.is_valid is True
        assert result.score < 100
        assert result.checks["anomaly"] is False


class TestInvariants:
    """Properties that hold for every input."""

    def test_score_clamped_at_zero(self, make_match, now_ms, day_ms):
        match = make_match(
            home_score=-5,
            away_score=60,
            result='home_win',
            player_goals=-2,
            player_assists=20,
            duration=-1,
            timestamp=now_ms + day_ms,
        )

        result = validate_match(match, now_ms=now_ms)

        assert result.score == 0
        assert result.is_valid is False

    @pytest.mark.parametrize("overrides", [
        {},
        {"duration": 10, "home_score": 1, "away_score": 0, "player_goals": 0},
        {"duration": 500},
        {"home_score": 99, "away_score": 0, "player_goals": 99},
        {"result": "draw"},
        {"player_assists": -4},
    ])
    def test_score_always_in_range(self, make_match, now_ms, overrides):
        result = validate_match(make_match(**overrides), now_ms=now_ms)

        assert 0 <= result.score <= 100

    @pytest.mark.parametrize("overrides", [
        {},
        {"duration": 10, "home_score": 1, "away_score": 0, "player_goals": 0},
        {"home_score": 51, "away_score": 0, "player_goals": 1},
        {"result": "away_win"},
        {"player_goals": 11, "home_score": 12, "away_score": 0},
    ])
    def test_validity_iff_no_blocking_issue(self, make_match, now_ms, overrides):
        result = validate_match(make_match(**overrides), now_ms=now_ms)

        blocking = any(i.severity in BLOCKING_SEVERITIES for i in result.issues)
        assert result.is_valid is (not blocking)

    def test_medium_issues_do_not_invalidate(self, make_match, make_team_stats, now_ms):
        stats = make_team_stats(home={'possession': 80}, away={'possession': 80})

        result = validate_match(make_match(), team_stats=stats, now_ms=now_ms)

        assert result.issue_codes == ["POSSESSION_MISMATCH"]
        assert result.is_valid is True
        assert result.score == 95

    def test_deterministic(self, make_match, steady_scorer_history, now_ms):
        match = make_match(home_score=10, away_score=0, player_goals=10,
                           player_assists=0, duration=120)

        first = validate_match(match, history=steady_scorer_history, now_ms=now_ms)
        second = validate_match(match, history=steady_scorer_history, now_ms=now_ms)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_history_order_does_not_matter(self, make_match, make_history, now_ms):
        history = make_history(['loss'] * 10 + ['win'] * 6,
                               goals=[0, 1, 2, 1, 0, 1, 3, 1, 0, 1, 2, 1, 1, 0, 1, 2])
        shuffled = list(history)
        random.Random(11).shuffle(shuffled)

        assert (validate_match(make_match(), history=shuffled, now_ms=now_ms)
                == validate_match(make_match(), history=history, now_ms=now_ms))

    def test_no_anomaly_warnings_below_minimum_sample(self, make_match, make_history, now_ms):
        history = make_history(['win', 'loss', 'win', 'loss'], goals=[0, 1, 0, 1],
                               durations=[90, 91, 92, 93])
        match = make_match(home_score=10, away_score=0, player_goals=10,
                           player_assists=8, duration=190)

        result = validate_match(match, history=history, now_ms=now_ms)

        assert not [c for c in result.warning_codes if c.startswith("ANOMALY_")]

    def test_thresholds_apply_to_every_layer(self, make_match, steady_scorer_history, now_ms):
        match = make_match(home_score=10, away_score=0, player_goals=10,
                           player_assists=0, duration=120)

        result = validate_match(match, history=steady_scorer_history, now_ms=now_ms,
                                thresholds={"zscore": 50, "max_player_goals_per_minute": 1})

        assert result.warnings == ()
        assert result.score == 100


class TestClock:
    """Evaluation time defaults to the current UTC time."""

    @freeze_time("2025-10-09 08:53:20")
    def test_current_time_ms(self, now_ms):
        assert current_time_ms() == now_ms

    @freeze_time("2025-10-09 08:53:20")
    def test_default_now_is_current_time(self, make_match, now_ms, day_ms):
        result = validate_match(make_match(timestamp=now_ms + day_ms))

        assert result.timestamp == now_ms
        assert "FUTURE_MATCH" in result.issue_codes


class TestLogging:

    def test_completed_validation_is_logged(self, make_match, now_ms):
        with patch('integrity.pipeline.log_validation_complete') as mock_log:
            validate_match(make_match(home_score=3, away_score=1, player_goals=5), now_ms=now_ms)

        mock_log.assert_called_once_with(
            match_id='m-1001',
            player_id='player-7',
            score=70,
            is_valid=False,
            issue_codes=["PLAYER_GOALS_EXCEED_TEAM_SCORE"],
            warning_codes=["PLAYER_GOAL_RATE_HIGH"],
        )


class TestIsSuspicious:
    """Soft rejection."""

    def test_clean_result_not_suspicious(self, make_match, now_ms):
        assert is_suspicious(validate_match(make_match(), now_ms=now_ms)) is False

    def test_invalid_result_is_suspicious(self, make_match, now_ms, day_ms):
        result = validate_match(make_match(timestamp=now_ms + day_ms), now_ms=now_ms)

        assert is_suspicious(result) is True

    def test_valid_but_low_score_is_suspicious(self, make_match, make_team_stats, now_ms):
        stats = make_team_stats(
            home={'possession': 90, 'pass_accuracy': 120, 'fouls': -1,
                  'shots': 1, 'shots_on_target': 4},
            away={'possession': 90, 'shots_on_target': 0},
        )

        result = validate_match(make_match(), team_stats=stats, now_ms=now_ms)

        assert result.is_valid is True
        assert result.score == 69
        assert is_suspicious(result) is False
        assert is_suspicious(result, threshold=70) is True


@pytest.fixture
def history_with_one_fabrication(make_history):
    """Six clean matches; the third claims five goals in a 2-0 win."""
    history = make_history(['win', 'loss'] * 3)
    history[2] = dataclasses.replace(history[2], player_goals=5)
    return history


class TestAuditPlayer:
    """History-wide fairness summary."""

    def test_empty_history(self, now_ms):
        audit = audit_player([], now_ms=now_ms, player_id='player-7')

        assert audit.total_matches == 0
        assert audit.average_score == 100
        assert audit.suspicious_count == 0
        assert audit.rating == "excellent"
        assert audit.player_id == 'player-7'
        assert audit.profile.sufficient is False

    def test_clean_history(self, make_history, now_ms):
        audit = audit_player(make_history(['win', 'loss'] * 3), now_ms=now_ms)

        assert audit.player_id == 'player-7'
        assert [m.match_id for m in audit.matches] == [f'h-{i}' for i in range(6)]
        assert all(m.result.score == 100 for m in audit.matches)
        assert audit.average_score == 100
        assert audit.rating == "excellent"
        assert audit.timestamp == now_ms

    def test_suspicious_match_lowers_rating(self, history_with_one_fabrication, now_ms):
        audit = audit_player(history_with_one_fabrication, now_ms=now_ms)

        assert audit.suspicious_count == 1
        flagged = audit.suspicious_matches[0]
        assert flagged.match_id == 'h-2'
        assert flagged.result.score == 70
        assert flagged.result.is_valid is False
        # (5 * 100 + 70) / 6 = 95, but a suspicious match rules out excellent
        assert audit.average_score == 95
        assert audit.rating == "good"

    def test_each_match_sees_only_earlier_matches(self, make_history, now_ms):
        audit = audit_player(make_history(['win', 'loss'] * 3), now_ms=now_ms)

        assert audit.matches[0].result.checks["anomaly"] is None
        assert audit.matches[-1].result.checks["anomaly"] is True

    def test_result_matches_single_validation(self, make_history, now_ms):
        history = make_history(['loss'] * 10 + ['win'] * 6)

        audit = audit_player(history, now_ms=now_ms)

        assert audit.matches[-1].result == validate_match(history[-1], history=history[:-1], now_ms=now_ms)

    def test_history_order_does_not_matter(self, history_with_one_fabrication, now_ms):
        shuffled = list(history_with_one_fabrication)
        random.Random(5).shuffle(shuffled)

        assert (audit_player(shuffled, now_ms=now_ms)
                == audit_player(history_with_one_fabrication, now_ms=now_ms))

    def test_custom_suspicious_threshold(self, make_history, now_ms):
        history = make_history(['win'] * 7)

        audit = audit_player(history, now_ms=now_ms, suspicious_threshold=100)

        # The seventh straight win is an unlikely streak, so it drops below 100
        assert [m.match_id for m in audit.suspicious_matches] == ['h-6']

    def test_to_dict(self, history_with_one_fabrication, now_ms):
        data = audit_player(history_with_one_fabrication, now_ms=now_ms).to_dict()

        assert data["total_matches"] == 6
        assert data["suspicious_count"] == 1
        assert data["suspicious_match_ids"] == ['h-2']
        assert data["matches"][2]["issue_codes"] == ["PLAYER_GOALS_EXCEED_TEAM_SCORE"]
        assert data["profile"]["sample_size"] == 6

    def test_audit_is_logged(self, history_with_one_fabrication, now_ms):
        with patch('integrity.pipeline.log_player_audit_complete') as mock_log:
            audit_player(history_with_one_fabrication, now_ms=now_ms)

        mock_log.assert_called_once_with(
            player_id='player-7',
            total_matches=6,
            average_score=95,
            suspicious_count=1,
            rating="good",
        )

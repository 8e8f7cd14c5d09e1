"""
Match Integrity Validator - pytest Configuration and Fixtures

Provides shared test fixtures for:
- A fixed evaluation clock (epoch ms)
- Sample match payloads (camelCase, as clients send them)
- Factories for MatchRecord objects and player history

All fixtures are pure data: no network, no database.
"""

import pytest

from models.match import MatchRecord, TeamMatchStats, TeamStatLine


# 2025-10-09T08:53:20Z
NOW_MS = 1_760_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


# ============================================================================
# Clock Fixtures
# ============================================================================

@pytest.fixture
def now_ms():
    """Fixed evaluation time used by every deterministic test."""
    return NOW_MS


@pytest.fixture
def day_ms():
    return DAY_MS


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_match_payload():
    """
    Sample match payload for API tests.

    Returns:
        camelCase dictionary as submitted by a game client
    """
    return {
        'matchId': 'm-1001',
        'homeTeam': 'Red Lions',
        'awayTeam': 'Blue Sharks',
        'homeScore': 2,
        'awayScore': 1,
        'result': 'home_win',
        'playerId': 'player-7',
        'playerTeam': 'home',
        'playerGoals': 1,
        'playerAssists': 1,
        'duration': 90,
        'timestamp': NOW_MS - DAY_MS
    }


@pytest.fixture
def sample_team_stats_payload():
    """Consistent team stats snapshot for a 2-1 match."""
    return {
        'home': {
            'shots': 12,
            'shotsOnTarget': 5,
            'passes': 430,
            'passAccuracy': 84.5,
            'tackles': 18,
            'fouls': 9,
            'possession': 55
        },
        'away': {
            'shots': 8,
            'shotsOnTarget': 3,
            'passes': 350,
            'passAccuracy': 79.0,
            'tackles': 21,
            'fouls': 12,
            'possession': 45
        }
    }


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_match():
    """
    Factory for MatchRecord objects.

    Defaults describe a clean 2-1 home win played yesterday:
    no rule fires for the defaults.

    Example:
        match = make_match(home_score=3, away_score=1, player_goals=2)
    """
    def _make(**overrides):
        fields = {
            'home_team': 'Red Lions',
            'away_team': 'Blue Sharks',
            'home_score': 2,
            'away_score': 1,
            'result': 'home_win',
            'player_id': 'player-7',
            'player_goals': 1,
            'player_assists': 1,
            'duration': 90,
            'timestamp': NOW_MS - DAY_MS,
            'player_team': 'home',
            'match_id': 'm-1001',
        }
        fields.update(overrides)
        return MatchRecord(**fields)

    return _make


@pytest.fixture
def make_team_stats():
    """Factory for TeamMatchStats from two keyword dicts."""
    def _make(home=None, away=None):
        return TeamMatchStats(
            home=TeamStatLine(**(home or {})),
            away=TeamStatLine(**(away or {})),
        )

    return _make


@pytest.fixture
def make_history():
    """
    Factory for a player's prior matches, oldest first.

    Args (of the returned callable):
        outcomes: 'win' / 'loss' / 'draw' per match, oldest first
        goals: player goals per match (default 1)
        assists: player assists per match (default 1)
        durations: minutes per match (default 90)

    The player is always on the home side. Entry i of n is played
    (n - i + 1) days before NOW_MS, so the newest entry is two days old.
    Scores are kept consistent with the outcome and the player's goals.
    """
    def _make(outcomes, goals=None, assists=None, durations=None, player_id='player-7'):
        n = len(outcomes)
        goals = goals if goals is not None else [1] * n
        assists = assists if assists is not None else [1] * n
        durations = durations if durations is not None else [90] * n

        history = []
        for i, outcome in enumerate(outcomes):
            player_goals = goals[i]
            if outcome == 'win':
                home_score, away_score, result = player_goals + 1, 0, 'home_win'
            elif outcome == 'loss':
                home_score, away_score, result = player_goals, player_goals + 1, 'away_win'
            else:
                home_score, away_score, result = player_goals, player_goals, 'draw'

            history.append(MatchRecord(
                home_team='Red Lions',
                away_team=f'Opponent {i}',
                home_score=home_score,
                away_score=away_score,
                result=result,
                player_id=player_id,
                player_goals=player_goals,
                player_assists=assists[i],
                duration=durations[i],
                timestamp=NOW_MS - (n - i + 1) * DAY_MS,
                player_team='home',
                match_id=f'h-{i}',
            ))
        return history

    return _make

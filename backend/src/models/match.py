"""
Match Integrity Validator - Match Entity Models
Represents a reported match outcome and the optional team stat snapshot
that accompanies it.
"""

import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


RESULT_HOME_WIN = 'home_win'
RESULT_AWAY_WIN = 'away_win'
RESULT_DRAW = 'draw'
VALID_RESULTS = (RESULT_HOME_WIN, RESULT_AWAY_WIN, RESULT_DRAW)

TEAM_HOME = 'home'
TEAM_AWAY = 'away'
VALID_TEAMS = (TEAM_HOME, TEAM_AWAY)

OUTCOME_WIN = 'win'
OUTCOME_LOSS = 'loss'
OUTCOME_DRAW = 'draw'


class MatchPayloadError(ValueError):
    """Raised when a payload cannot be turned into a match record."""
    pass


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (accepts snake_case and camelCase)."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _require_int(data: Dict[str, Any], name: str, *keys: str) -> int:
    value = _pick(data, *keys)
    if value is None:
        raise MatchPayloadError(f"Missing required field: {name}")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MatchPayloadError(f"Field '{name}' must be a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise MatchPayloadError(f"Field '{name}' must be a finite number, got {value}")
    if isinstance(value, float) and not value.is_integer():
        raise MatchPayloadError(f"Field '{name}' must be a whole number, got {value}")
    return int(value)


def _optional_number(data: Dict[str, Any], name: str, *keys: str) -> Optional[float]:
    value = _pick(data, *keys)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MatchPayloadError(f"Field '{name}' must be a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise MatchPayloadError(f"Field '{name}' must be a finite number, got {value}")
    return value


@dataclass(frozen=True)
class MatchRecord:
    """
    One reported match outcome.

    Scores and player stats are kept as reported (they may be negative or
    inconsistent); the rule validator turns such values into issues.
    """
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    result: str  # home_win, away_win, draw
    player_id: str
    player_goals: int
    player_assists: int
    duration: float  # minutes
    timestamp: int  # epoch milliseconds
    player_team: str = TEAM_HOME  # home, away
    match_id: Optional[str] = None

    @property
    def player_team_score(self) -> int:
        """Score of the reporting player's own team."""
        return self.home_score if self.player_team == TEAM_HOME else self.away_score

    @property
    def opponent_score(self) -> int:
        return self.away_score if self.player_team == TEAM_HOME else self.home_score

    @property
    def total_goals(self) -> int:
        return self.home_score + self.away_score

    @property
    def expected_result(self) -> str:
        """Result implied by the arithmetic comparison of the scores."""
        if self.home_score > self.away_score:
            return RESULT_HOME_WIN
        if self.away_score > self.home_score:
            return RESULT_AWAY_WIN
        return RESULT_DRAW

    @property
    def player_outcome(self) -> str:
        """Win/loss/draw from the reporting player's point of view, per the declared result."""
        if self.result == RESULT_DRAW:
            return OUTCOME_DRAW
        won = (
            (self.result == RESULT_HOME_WIN and self.player_team == TEAM_HOME)
            or (self.result == RESULT_AWAY_WIN and self.player_team == TEAM_AWAY)
        )
        return OUTCOME_WIN if won else OUTCOME_LOSS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchRecord':
        """
        Build a MatchRecord from an API payload.

        Accepts snake_case or camelCase keys. Raises MatchPayloadError for
        missing or mistyped fields; numeric values are not range-checked here.
        """
        if not isinstance(data, dict):
            raise MatchPayloadError("Match payload must be an object")

        result = _pick(data, 'result')
        if result not in VALID_RESULTS:
            raise MatchPayloadError(
                f"Field 'result' must be one of: {', '.join(VALID_RESULTS)}"
            )

        player_team = _pick(data, 'player_team', 'playerTeam', default=TEAM_HOME)
        if player_team not in VALID_TEAMS:
            raise MatchPayloadError(
                f"Field 'player_team' must be one of: {', '.join(VALID_TEAMS)}"
            )

        player_id = _pick(data, 'player_id', 'playerId')
        if player_id is None:
            raise MatchPayloadError("Missing required field: player_id")

        duration = _optional_number(data, 'duration', 'duration')
        if duration is None:
            raise MatchPayloadError("Missing required field: duration")

        match_id = _pick(data, 'match_id', 'matchId', 'id')

        return cls(
            home_team=str(_pick(data, 'home_team', 'homeTeam', default='home')),
            away_team=str(_pick(data, 'away_team', 'awayTeam', default='away')),
            home_score=_require_int(data, 'home_score', 'home_score', 'homeScore'),
            away_score=_require_int(data, 'away_score', 'away_score', 'awayScore'),
            result=result,
            player_id=str(player_id),
            player_goals=_require_int(data, 'player_goals', 'player_goals', 'playerGoals'),
            player_assists=_require_int(data, 'player_assists', 'player_assists', 'playerAssists'),
            duration=duration,
            timestamp=_require_int(data, 'timestamp', 'timestamp', 'date'),
            player_team=player_team,
            match_id=str(match_id) if match_id is not None else None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "match_id": self.match_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "result": self.result,
            "player_id": self.player_id,
            "player_team": self.player_team,
            "player_goals": self.player_goals,
            "player_assists": self.player_assists,
            "duration": self.duration,
            "timestamp": self.timestamp
        }


# Prior matches share the MatchRecord shape
PlayerHistoryEntry = MatchRecord


@dataclass(frozen=True)
class TeamStatLine:
    """One team's secondary stats for a match. Every field is optional."""
    shots: Optional[int] = None
    shots_on_target: Optional[int] = None
    passes: Optional[int] = None
    pass_accuracy: Optional[float] = None  # percent
    tackles: Optional[int] = None
    fouls: Optional[int] = None
    possession: Optional[float] = None  # percent

    # Counting stats that must never be negative
    COUNT_FIELDS = ('shots', 'shots_on_target', 'passes', 'tackles', 'fouls', 'possession')

    def negative_fields(self) -> Dict[str, float]:
        return {
            name: getattr(self, name)
            for name in self.COUNT_FIELDS
            if getattr(self, name) is not None and getattr(self, name) < 0
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'TeamStatLine':
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MatchPayloadError("Team stat line must be an object")
        return cls(
            shots=_optional_number(data, 'shots', 'shots'),
            shots_on_target=_optional_number(data, 'shots_on_target', 'shots_on_target', 'shotsOnTarget'),
            passes=_optional_number(data, 'passes', 'passes'),
            pass_accuracy=_optional_number(data, 'pass_accuracy', 'pass_accuracy', 'passAccuracy'),
            tackles=_optional_number(data, 'tackles', 'tackles'),
            fouls=_optional_number(data, 'fouls', 'fouls'),
            possession=_optional_number(data, 'possession', 'possession'),
        )

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TeamMatchStats:
    """Secondary stats for both teams of a match."""
    home: TeamStatLine = field(default_factory=TeamStatLine)
    away: TeamStatLine = field(default_factory=TeamStatLine)

    def sides(self):
        """Yield (team, stat line) pairs in home, away order."""
        yield TEAM_HOME, self.home
        yield TEAM_AWAY, self.away

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamMatchStats':
        if not isinstance(data, dict):
            raise MatchPayloadError("Team stats payload must be an object")
        return cls(
            home=TeamStatLine.from_dict(_pick(data, 'home', 'homeTeam')),
            away=TeamStatLine.from_dict(_pick(data, 'away', 'awayTeam')),
        )

    def to_dict(self) -> dict:
        return {"home": self.home.to_dict(), "away": self.away.to_dict()}

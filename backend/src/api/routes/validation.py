"""
Match Integrity Validator - Validation API Routes
================================================

Server-side entry point for checking self-reported match results before
they are accepted.

Endpoints:
    POST /matches/validate  - Validate one match (plus optional stats/history)
    POST /players/audit     - Audit every match of one player's history
    GET  /rules             - Scoring rubric (issue codes, severities, deductions)

The evaluation clock is the server's: clients cannot choose "now".
"""

from flask import Blueprint, request, jsonify

from api.middleware.auth import api_key_auth
from integrity import (
    validate_match, audit_player, generate_report, is_suspicious, get_rating, RULE_GROUPS
)
from integrity.rubric import rubric_to_dict
from models.match import MatchRecord, MatchPayloadError, TeamMatchStats
from utils.config import MAX_HISTORY_ENTRIES, SUSPICIOUS_SCORE_THRESHOLD
from utils.logger import logger

validation_bp = Blueprint("validation", __name__)


def _parse_history(raw, player_id: str):
    """Parse the optional history array into match records for one player."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MatchPayloadError("Field 'history' must be an array")
    if len(raw) > MAX_HISTORY_ENTRIES:
        raise MatchPayloadError(
            f"Field 'history' has {len(raw)} entries; maximum is {MAX_HISTORY_ENTRIES}"
        )

    history = []
    for index, entry in enumerate(raw):
        try:
            record = MatchRecord.from_dict(entry)
        except MatchPayloadError as e:
            raise MatchPayloadError(f"history[{index}]: {e}")
        if record.player_id != player_id:
            raise MatchPayloadError(
                f"history[{index}]: belongs to player '{record.player_id}', expected '{player_id}'"
            )
        history.append(record)
    return history


@validation_bp.route("/matches/validate", methods=["POST"])
@api_key_auth.require_api_key
def validate():
    """
    Validate a reported match.

    Request Body:
        {
            "match": {"homeScore": 3, "awayScore": 1, "result": "home_win", ...},
            "teamStats": {"home": {...}, "away": {...}},   (optional)
            "history": [{...}, ...]                        (optional)
        }

    Query Parameters:
        report (bool): Include the human-readable report text

    Returns:
        {
            "success": true,
            "result": {"is_valid": ..., "score": ..., "issues": [...], ...},
            "rating": "excellent" | "good" | "fair" | "poor",
            "suspicious": true/false,
            "report": "..."                                (when requested)
        }

    Status Codes:
        200: Validation completed (even if the match is invalid)
        400: Malformed payload
        401: Missing or invalid API key
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MatchPayloadError("Request body must be a JSON object")
    if "match" not in data:
        raise MatchPayloadError("Missing required field: match")

    match = MatchRecord.from_dict(data["match"])

    raw_stats = data.get("teamStats", data.get("team_stats"))
    team_stats = TeamMatchStats.from_dict(raw_stats) if raw_stats is not None else None

    history = _parse_history(data.get("history"), match.player_id)

    result = validate_match(match, team_stats=team_stats, history=history)

    response = {
        "success": True,
        "result": result.to_dict(),
        "rating": get_rating(result.score),
        "suspicious": is_suspicious(result),
        "suspicious_threshold": SUSPICIOUS_SCORE_THRESHOLD,
    }
    if request.args.get("report", "false").lower() in ("true", "1", "yes"):
        response["report"] = generate_report(result)

    logger.debug(
        f"Validated match {match.match_id}: score={result.score}, "
        f"valid={result.is_valid}, history={len(history)}"
    )

    return jsonify(response), 200


@validation_bp.route("/players/audit", methods=["POST"])
@api_key_auth.require_api_key
def audit():
    """
    Audit a player's match history.

    Request Body:
        {
            "playerId": "player-7",                        (optional, defaults to
                                                            the first entry's player)
            "history": [{...}, ...]
        }

    Returns:
        {
            "success": true,
            "audit": {"average_score": ..., "suspicious_count": ..., "rating": ..., ...},
            "suspicious_threshold": 60
        }

    Status Codes:
        200: Audit completed
        400: Malformed payload
        401: Missing or invalid API key
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MatchPayloadError("Request body must be a JSON object")
    if "history" not in data:
        raise MatchPayloadError("Missing required field: history")

    raw_history = data["history"]
    player_id = data.get("playerId", data.get("player_id"))
    if player_id is None and isinstance(raw_history, list) and raw_history \
            and isinstance(raw_history[0], dict):
        player_id = raw_history[0].get("playerId", raw_history[0].get("player_id"))
    if player_id is None:
        raise MatchPayloadError("Missing required field: playerId")

    history = _parse_history(raw_history, str(player_id))
    result = audit_player(history, player_id=str(player_id))

    return jsonify({
        "success": True,
        "audit": result.to_dict(),
        "suspicious_threshold": SUSPICIOUS_SCORE_THRESHOLD,
    }), 200


@validation_bp.route("/rules", methods=["GET"])
def get_rules():
    """
    Get the scoring rubric.

    Returns:
        {
            "success": true,
            "rules": {"NEGATIVE_SCORE": {"severity": "critical", "deduction": 25, ...}, ...},
            "groups": {"scores": [...], ...}
        }
    """
    return jsonify({
        "success": True,
        "rules": rubric_to_dict(),
        "groups": RULE_GROUPS,
    }), 200

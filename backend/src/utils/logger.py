"""
Match Integrity Validator - Structured Logging
Provides JSON-formatted logging for log aggregation queries.
"""

import logging
import sys
from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL, config


def setup_logger(name: str = __name__) -> logging.Logger:
    """
    Configure structured JSON logger.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Validation completed", extra={
        ...     "match_id": "m-42",
        ...     "score": 75,
        ...     "is_valid": False
        ... })
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    # JSON formatter for structured logs
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


# Global logger instance
logger = setup_logger('match_integrity')


def log_validation_complete(match_id, player_id: str, score: int, is_valid: bool,
                            issue_codes: list, warning_codes: list):
    """Log the outcome of one match validation."""
    level = logging.INFO if is_valid else logging.WARNING
    logger.log(level, "Match validation completed", extra={
        "event_type": "validation_complete",
        "match_id": match_id,
        "player_id": player_id,
        "score": score,
        "is_valid": is_valid,
        "issue_codes": issue_codes,
        "warning_codes": warning_codes,
        "environment": config.environment
    })


def log_validation_rejected_payload(error: Exception, path: str = None):
    """Log a payload that could not be parsed into a match record."""
    logger.warning("Match payload rejected", extra={
        "event_type": "payload_rejected",
        "error_type": type(error).__name__,
        "error_message": str(error),
        "path": path
    })


def log_api_request(method: str, path: str, status_code: int, duration_ms: float):
    """Log API request metrics."""
    logger.info("API request", extra={
        "event_type": "api_request",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms
    })


def log_player_audit_complete(player_id, total_matches: int, average_score: int,
                              suspicious_count: int, rating: str):
    """Log the summary of a player history audit."""
    level = logging.INFO if suspicious_count == 0 else logging.WARNING
    logger.log(level, "Player audit completed", extra={
        "event_type": "player_audit_complete",
        "player_id": player_id,
        "total_matches": total_matches,
        "average_score": average_score,
        "suspicious_count": suspicious_count,
        "rating": rating,
        "environment": config.environment
    })


def log_auth_rejected(reason: str, path: str = None, remote_addr: str = None,
                      api_key_prefix: str = None):
    """Log a request rejected by API key authentication."""
    logger.warning("API key rejected", extra={
        "event_type": "auth_rejected",
        "reason": reason,
        "path": path,
        "remote_addr": remote_addr,
        "api_key_prefix": api_key_prefix
    })

"""
Match Integrity Validator - API Key Authentication Middleware

Game servers submitting match results identify themselves with an
X-API-Key header. Keys come from API_KEYS (comma-separated; read from SSM
in production). With no keys configured every request passes, which is
the local development mode.
"""

from functools import wraps
from typing import Iterable, Optional, Set, Union

from flask import request, jsonify

from utils.config import config
from utils.logger import logger, log_auth_rejected

API_KEY_HEADER = 'X-API-Key'


def parse_api_keys(raw: Optional[Union[str, Iterable[str]]]) -> Set[str]:
    """Normalize a comma-separated string (or an iterable) of keys into a set."""
    if not raw:
        return set()
    parts = raw.split(',') if isinstance(raw, str) else raw
    return {key.strip() for key in parts if key and key.strip()}


def mask_api_key(api_key: str) -> str:
    """Loggable form of a key: its first 8 characters, never the whole key."""
    return api_key[:8] if len(api_key) >= 8 else "***"


def _unauthorized(message: str):
    return jsonify({
        "success": False,
        "error": "Unauthorized",
        "message": message
    }), 401


class APIKeyAuth:
    """
    API key authentication for match submission endpoints.

    Usage:
        @validation_bp.route('/matches/validate', methods=['POST'])
        @api_key_auth.require_api_key
        def validate():
            ...
    """

    def __init__(self, api_keys: Optional[Union[str, Iterable[str]]] = None):
        """
        Args:
            api_keys: Accepted keys (default: API_KEYS from config)
        """
        if api_keys is None:
            api_keys = config.get('API_KEYS', '')
        self.valid_api_keys = parse_api_keys(api_keys)

        if not self.valid_api_keys:
            logger.warning("No API keys configured - match submissions are not authenticated")

    @property
    def enabled(self) -> bool:
        return bool(self.valid_api_keys)

    def require_api_key(self, f):
        """Decorator rejecting requests without an accepted X-API-Key (401)."""
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not self.enabled:
                return f(*args, **kwargs)

            api_key = request.headers.get(API_KEY_HEADER)

            if not api_key:
                log_auth_rejected("missing_key", path=request.path,
                                  remote_addr=request.remote_addr)
                return _unauthorized(f"Missing {API_KEY_HEADER} header")

            if api_key not in self.valid_api_keys:
                log_auth_rejected("invalid_key", path=request.path,
                                  remote_addr=request.remote_addr,
                                  api_key_prefix=mask_api_key(api_key))
                return _unauthorized("Invalid API key")

            return f(*args, **kwargs)

        return decorated_function


# Global instance
api_key_auth = APIKeyAuth()

"""
Match Integrity Validator - Health Check Endpoint
Provides API health status and the active validation thresholds.
"""

from flask import Blueprint, jsonify
from datetime import datetime, timezone

from integrity import RuleValidator, StatisticalProfiler, AnomalyDetector
from utils.config import config, SUSPICIOUS_SCORE_THRESHOLD

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    The validator has no external dependencies, so health reflects only
    that the process is serving and which thresholds it is using.

    Response:
        200 OK: Service operational
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ'),
        "api_version": "1.0.0",
        "environment": config.environment,
        "thresholds": {
            "rules": RuleValidator.DEFAULT_THRESHOLDS,
            "profile": StatisticalProfiler.DEFAULT_THRESHOLDS,
            "anomaly": AnomalyDetector.DEFAULT_THRESHOLDS,
            "suspicious_score": SUSPICIOUS_SCORE_THRESHOLD,
        }
    }

    return jsonify(health_data), 200

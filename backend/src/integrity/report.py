"""
Human-readable validation reports.

Pure formatting: never mutates the result, safe to call repeatedly.
"""

from datetime import datetime, timezone

from models.validation import ValidationResult
from integrity.fairness_scorer import get_rating


CHECK_LABELS = (
    ("scores", "Scores"),
    ("player_stats", "Player stats"),
    ("timing", "Timing"),
    ("team_stats", "Team stats"),
    ("anomaly", "Anomaly detection"),
)


def _format_timestamp(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def generate_report(result: ValidationResult) -> str:
    """
    Render a ValidationResult as an ordered text block.

    Sections: summary line, score and rating, issues, warnings
    (with recommendations), and the per-group checks summary.
    """
    lines = []

    status = "VALID" if result.is_valid else "INVALID"
    lines.append(
        f"Match validation: {status} "
        f"({len(result.issues)} issue(s), {len(result.warnings)} warning(s))"
    )
    lines.append(f"Score: {result.score}/100")
    lines.append(f"Rating: {get_rating(result.score)}")
    lines.append(f"Evaluated: {_format_timestamp(result.timestamp)}")
    lines.append("")

    if result.issues:
        lines.append(f"ISSUES ({len(result.issues)}):")
        for issue in result.issues:
            lines.append(
                f"  - [{issue.severity.upper()}] {issue.code}: {issue.message} "
                f"(-{issue.score_deduction})"
            )
        lines.append("")

    if result.warnings:
        lines.append(f"WARNINGS ({len(result.warnings)}):")
        for warning in result.warnings:
            lines.append(f"  - {warning.code}: {warning.message} (-{warning.score_deduction})")
            if warning.recommendation:
                lines.append(f"    -> {warning.recommendation}")
        lines.append("")

    if result.checks:
        lines.append("CHECKS:")
        for key, label in CHECK_LABELS:
            if key not in result.checks:
                continue
            passed = result.checks[key]
            state = "skipped" if passed is None else ("pass" if passed else "fail")
            lines.append(f"  {label}: {state}")
        lines.append("")

    if result.is_valid and not result.issues and not result.warnings:
        lines.append("All checks passed")

    return "\n".join(lines).rstrip("\n")

"""
Scoring, rep-quality tiers and issue ordering.
"""

from typing import Iterable

from .config import MAX_SCORE, MIN_SCORE, REP_QUALITY_THRESHOLDS, SEVERITY_PENALTIES
from .results import FormIssue, RepQuality


def calculate_score(issues: Iterable[FormIssue]) -> int:
    """Compute the 0-100 form score from the issues found.

    Each issue subtracts its severity's fixed penalty from 100; the result
    is clamped so any number of issues still yields a valid score.

    Args:
        issues: Issues reported for one analysis.

    Returns:
        int: Score in [0, 100].
    """
    penalty = sum(SEVERITY_PENALTIES[issue.severity.value] for issue in issues)
    return max(MIN_SCORE, min(MAX_SCORE, MAX_SCORE - penalty))


def rep_quality(score: int) -> RepQuality:
    """Map a score to its rep-quality tier."""
    if score >= REP_QUALITY_THRESHOLDS["good"]:
        return RepQuality.GOOD
    if score >= REP_QUALITY_THRESHOLDS["fair"]:
        return RepQuality.FAIR
    return RepQuality.POOR


def sort_issues(issues: Iterable[FormIssue]) -> list[FormIssue]:
    """Order issues by severity, highest first. Ties keep evaluation order."""
    return sorted(issues, key=lambda issue: issue.severity.rank, reverse=True)

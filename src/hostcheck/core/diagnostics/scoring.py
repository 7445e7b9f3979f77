"""
Health scoring and issue prioritization.

score = (passed * 1.0 + warned * 0.5) / total * 100, one decimal.
Any critical issue forces the CRITICAL label regardless of the number.
"""

from typing import Dict, List, Tuple

from .ledger import RunLedger
from .models import HealthScore, HealthStatus

PASS_WEIGHT = 1.0
WARN_WEIGHT = 0.5

# (minimum percentage, label), checked top down
STATUS_THRESHOLDS = [
    (85.0, HealthStatus.EXCELLENT),
    (70.0, HealthStatus.GOOD),
    (50.0, HealthStatus.FAIR),
]

PRIORITY_FIX_MARKERS = ("critical", "failed")

# Process exit codes, highest precedence first
EXIT_CRITICAL = 3
EXIT_FAILURE_MAJORITY = 2
EXIT_HIGH_ISSUES = 1
EXIT_HEALTHY = 0


def health_percentage(passed: int, warned: int, total: int) -> float:
    """Weighted pass percentage, rounded to one decimal."""
    if total <= 0:
        return 0.0
    return round((passed * PASS_WEIGHT + warned * WARN_WEIGHT) / total * 100, 1)


def status_label(percentage: float, has_critical: bool) -> HealthStatus:
    """Status label for a percentage; critical issues override the number."""
    if has_critical:
        return HealthStatus.CRITICAL
    for minimum, label in STATUS_THRESHOLDS:
        if percentage >= minimum:
            return label
    return HealthStatus.POOR


def score(ledger: RunLedger) -> HealthScore:
    """Compute the health score for a finished run."""
    if ledger.total == 0 and not ledger.has_critical:
        return HealthScore(0.0, HealthStatus.UNKNOWN)
    percentage = health_percentage(ledger.passed, ledger.warned, ledger.total)
    return HealthScore(percentage, status_label(percentage, ledger.has_critical))


def is_priority_fix(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in PRIORITY_FIX_MARKERS)


def prioritized_fixes(fix_suggestions: Dict[str, str], limit: int = 8) -> List[Tuple[str, str]]:
    """
    Order fix suggestions for display.

    Keys mentioning "critical" or "failed" come first and are always
    listed; the remaining suggestions follow in insertion order until
    `limit` entries have been listed.
    """
    priority = [(k, v) for k, v in fix_suggestions.items() if is_priority_fix(k)]
    others = [(k, v) for k, v in fix_suggestions.items() if not is_priority_fix(k)]

    ordered = list(priority)
    for item in others:
        if len(ordered) >= limit:
            break
        ordered.append(item)
    return ordered


def exit_code_for(ledger: RunLedger) -> int:
    """Process exit code: critical > failure majority > high issues > clean."""
    if ledger.has_critical:
        return EXIT_CRITICAL
    if ledger.failed > ledger.passed:
        return EXIT_FAILURE_MAJORITY
    if ledger.has_high:
        return EXIT_HIGH_ISSUES
    return EXIT_HEALTHY

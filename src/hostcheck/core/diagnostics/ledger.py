"""
Run ledger: the accumulated outcome of one diagnostic run.

Recording is append-only. Counters only go up, issue lists keep detection
order, and fix suggestions are keyed (a later suggestion for the same key
replaces the earlier text).
"""

import logging
from typing import Dict, List, Tuple

from .models import CheckResult, CheckStatus, Severity

logger = logging.getLogger(__name__)


class RunLedger:
    """Counters, severity-partitioned issues and fix suggestions for a run."""

    def __init__(self):
        self.total = 0
        self.passed = 0
        self.failed = 0
        self.warned = 0
        self.skipped = 0

        self.critical_issues: List[str] = []
        self.high_issues: List[str] = []
        self.medium_issues: List[str] = []
        self.info_items: List[str] = []
        self.detailed_errors: List[Tuple[str, str, str]] = []  # (category, name, detail)

        self.results: List[CheckResult] = []
        self.fix_suggestions: Dict[str, str] = {}

    def record(self, result: CheckResult) -> None:
        """Count a result and file it into the matching issue bucket."""
        self.results.append(result)
        self.total += 1

        if result.status == CheckStatus.PASS:
            self.passed += 1
            if result.severity == Severity.INFO:
                self.info_items.append(result.issue_text)
        elif result.status == CheckStatus.SKIP:
            self.skipped += 1
        else:
            if result.status == CheckStatus.FAIL:
                self.failed += 1
            else:
                self.warned += 1

            if result.severity == Severity.CRITICAL:
                self.critical_issues.append(result.issue_text)
            elif result.severity == Severity.HIGH:
                self.high_issues.append(result.issue_text)
            else:
                self.medium_issues.append(result.issue_text)

            if result.detail:
                self.detailed_errors.append((result.category.value, result.name, result.detail))

        logger.debug(f"{result.status.value.upper()} {result.category.value}/{result.name}: {result.message}")

    def suggest(self, key: str, text: str) -> None:
        """Store a fix suggestion; the latest text for a key wins."""
        self.fix_suggestions[key] = text

    @property
    def has_critical(self) -> bool:
        return bool(self.critical_issues)

    @property
    def has_high(self) -> bool:
        return bool(self.high_issues)

    def counts(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "warned": self.warned,
            "skipped": self.skipped,
        }

    def issues_by_severity(self) -> Dict[str, List[str]]:
        return {
            Severity.CRITICAL.value: list(self.critical_issues),
            Severity.HIGH.value: list(self.high_issues),
            Severity.MEDIUM.value: list(self.medium_issues),
        }

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "summary": self.counts(),
            "issues": self.issues_by_severity(),
            "info": list(self.info_items),
            "details": [
                {"category": category, "name": name, "detail": detail}
                for category, name, detail in self.detailed_errors
            ],
            "fix_suggestions": dict(self.fix_suggestions),
            "checks": [r.to_dict() for r in self.results],
        }

"""
Tests for RunLedger bookkeeping.

Run: python3 -m pytest tests/test_ledger.py -v
"""

import pytest

from hostcheck.core.diagnostics.ledger import RunLedger
from hostcheck.core.diagnostics.models import CheckCategory, CheckResult, CheckStatus, Severity


def make_result(status, severity=Severity.MEDIUM, name="Check", message="message", detail=None):
    return CheckResult(
        category=CheckCategory.STORAGE,
        name=name,
        status=status,
        message=message,
        severity=severity,
        detail=detail,
    )


class TestCounters:
    """Tests for result counting."""

    def test_empty(self):
        ledger = RunLedger()
        assert ledger.counts() == {"total": 0, "passed": 0, "failed": 0, "warned": 0, "skipped": 0}
        assert not ledger.has_critical
        assert not ledger.has_high

    def test_total_is_sum_of_statuses(self):
        ledger = RunLedger()
        for status in (CheckStatus.PASS, CheckStatus.PASS, CheckStatus.FAIL,
                       CheckStatus.WARN, CheckStatus.SKIP):
            ledger.record(make_result(status))

        assert ledger.total == 5
        assert ledger.total == ledger.passed + ledger.failed + ledger.warned + ledger.skipped
        assert (ledger.passed, ledger.failed, ledger.warned, ledger.skipped) == (2, 1, 1, 1)

    def test_results_kept_in_order(self):
        ledger = RunLedger()
        ledger.record(make_result(CheckStatus.PASS, name="first"))
        ledger.record(make_result(CheckStatus.SKIP, name="second"))
        assert [r.name for r in ledger.results] == ["first", "second"]


class TestIssueBuckets:
    """Tests for severity partitioning."""

    @pytest.mark.parametrize("severity,bucket", [
        (Severity.CRITICAL, "critical_issues"),
        (Severity.HIGH, "high_issues"),
        (Severity.MEDIUM, "medium_issues"),
    ])
    def test_fail_goes_to_bucket(self, severity, bucket):
        ledger = RunLedger()
        ledger.record(make_result(CheckStatus.FAIL, severity, message="Disk / at 97%"))
        assert getattr(ledger, bucket) == ["Storage: Disk / at 97%"]

    def test_critical_issues_keep_detection_order(self):
        ledger = RunLedger()
        for i in range(12):
            ledger.record(make_result(CheckStatus.FAIL, Severity.CRITICAL, name=f"disk {i}", message=f"critical {i}"))
            ledger.record(make_result(CheckStatus.FAIL, Severity.HIGH, name=f"svc {i}", message=f"high {i}"))

        assert ledger.critical_issues == [f"Storage: critical {i}" for i in range(12)]

    def test_critical_warning_counts_as_warning(self):
        ledger = RunLedger()
        ledger.record(make_result(CheckStatus.WARN, Severity.CRITICAL))
        assert ledger.warned == 1
        assert ledger.has_critical

    def test_pass_and_skip_are_not_issues(self):
        ledger = RunLedger()
        ledger.record(make_result(CheckStatus.PASS, Severity.HIGH))
        ledger.record(make_result(CheckStatus.SKIP, Severity.CRITICAL))
        assert ledger.critical_issues == []
        assert ledger.high_issues == []

    def test_info_pass(self):
        ledger = RunLedger()
        ledger.record(make_result(CheckStatus.PASS, Severity.INFO, message="Hardware inventory completed"))
        assert ledger.info_items == ["Storage: Hardware inventory completed"]

    def test_detail_recorded_for_issues_only(self):
        ledger = RunLedger()
        ledger.record(make_result(CheckStatus.FAIL, name="SMART /dev/sda", detail="FAILED!"))
        ledger.record(make_result(CheckStatus.PASS, detail="ignored"))
        assert ledger.detailed_errors == [("Storage", "SMART /dev/sda", "FAILED!")]


class TestFixSuggestions:
    """Tests for keyed fix suggestions."""

    def test_latest_text_wins(self):
        ledger = RunLedger()
        ledger.suggest("dns_failed", "first")
        ledger.suggest("dns_failed", "second")
        assert ledger.fix_suggestions == {"dns_failed": "second"}

    def test_to_dict(self):
        ledger = RunLedger()
        ledger.suggest("no_gateway", "Restart networking")
        ledger.record(make_result(CheckStatus.FAIL, Severity.HIGH, message="No gateway"))

        data = ledger.to_dict()

        assert data["summary"]["failed"] == 1
        assert data["issues"]["high"] == ["Storage: No gateway"]
        assert data["fix_suggestions"] == {"no_gateway": "Restart networking"}
        assert data["checks"][0]["status"] == "fail"

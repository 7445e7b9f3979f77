"""
Diagnostic Data Models

Shared by the engine, the check groups and the report renderer:
- Check results are immutable once created
- JSON serialization built-in for --json output
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional


# === Status Enums ===

class CheckStatus(Enum):
    """Status of a single diagnostic check."""
    PASS = "pass"       # Check passed successfully
    FAIL = "fail"       # Check failed - action required
    WARN = "warn"       # Check passed with warnings - review recommended
    SKIP = "skip"       # Check skipped - tool missing or not permitted


class Severity(Enum):
    """How urgent a Fail/Warn result is. Ignored for Pass/Skip."""
    INFO = "info"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CheckCategory(Enum):
    """Check groups, in the order they run. Values are display names."""
    HARDWARE = "Hardware"       # boot log, inventory, memory, CPU, temperature
    STORAGE = "Storage"         # mounts, inodes, SMART
    PACKAGES = "Packages"       # apt integrity, updates, dpkg lock, snap
    SERVICES = "Services"       # failed units, system state, critical services
    NETWORK = "Network"         # interfaces, gateway, internet, DNS
    SECURITY = "Security"       # firewall, auth failures, journal errors, reboot
    SYSTEM = "System"           # uptime


class HealthStatus(Enum):
    """Overall status label derived from the health score."""
    CRITICAL = "CRITICAL"
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    UNKNOWN = "UNKNOWN"     # No checks ran


class RunState(Enum):
    """Progress of a diagnostic run."""
    IDLE = "idle"
    COLLECTING = "collecting"
    SCORING = "scoring"
    DONE = "done"


# === Core Result Types ===

@dataclass(frozen=True)
class CheckResult:
    """
    Result of a single diagnostic check.

    Every check produces exactly one CheckResult; it is recorded once in the
    RunLedger and never changed afterwards.

    Attributes:
        category: Which check group produced the result
        name: Check identifier, unique within its category for a run
        status: PASS, FAIL, WARN, or SKIP
        message: Short human summary (used in the issue lists)
        severity: Urgency for FAIL/WARN results
        detail: Raw diagnostic excerpt (FAIL/WARN only)
        note: Secondary line shown under the result
        fix_key: Fix suggestion to show with the result, if any
        timestamp: When the check was run
    """
    category: CheckCategory
    name: str
    status: CheckStatus
    message: str
    severity: Severity = Severity.MEDIUM
    detail: Optional[str] = None
    note: Optional[str] = None
    fix_key: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.name:
            raise ValueError("CheckResult needs a name")

    @property
    def issue_text(self) -> str:
        """Line used in the severity-partitioned issue lists."""
        return f"{self.category.value}: {self.message}"

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "category": self.category.value,
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "severity": self.severity.value,
            "detail": self.detail,
            "note": self.note,
            "fix_key": self.fix_key,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class HealthScore:
    """Weighted health score and its status label."""
    percentage: float
    status: HealthStatus

    def to_dict(self) -> dict:
        return {"percentage": self.percentage, "status": self.status.value}


@dataclass
class DiagnosticReport:
    """
    Complete diagnostic report.

    Built once at the end of a run from the ledger, the score and the probe
    inventory.
    """
    generated_at: datetime
    duration_seconds: float
    system_info: Dict[str, Any]
    score: HealthScore
    ledger: Any  # RunLedger; typed loosely to avoid an import cycle
    hardware_inventory: Dict[str, str] = field(default_factory=dict)
    hardware_recommendations: list = field(default_factory=list)
    boot_log: str = ""

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        data = {
            "generated_at": self.generated_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 2),
            "system": self.system_info,
            "score": self.score.to_dict(),
            "hardware": self.hardware_inventory,
            "hardware_recommendations": [
                {"title": title, "steps": steps} for title, steps in self.hardware_recommendations
            ],
        }
        data.update(self.ledger.to_dict())
        return data


# === Callback Types ===

CheckCallback = Callable[[CheckResult], None]
ProgressCallback = Callable[[str, int, int], None]  # (group title, current, total)

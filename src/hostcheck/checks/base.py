"""
Shared state handed to every check group.

A check group is a plain function taking a CheckContext. It reads the host
only through ctx.runner / ctx.probes and reports only through ctx.suggest()
and ctx.record(). Store the fix suggestion before recording the result
that refers to it, so the live output can show the fix under the result.
"""

import logging
from typing import Callable, Optional

from ..core.diagnostics.ledger import RunLedger
from ..core.diagnostics.models import CheckCategory, CheckResult, CheckStatus, Severity
from ..utils.catalog import FixCatalog
from ..utils.env_config import HostcheckConfig
from ..utils.hardware import HardwareResolver
from ..utils.probes import CommandRunner, ProbeCollector

logger = logging.getLogger(__name__)


class CheckContext:
    """Everything a check group needs for one run."""

    def __init__(self, config: HostcheckConfig, runner: CommandRunner,
                 probes: ProbeCollector, catalog: FixCatalog,
                 resolver: HardwareResolver, ledger: RunLedger,
                 is_root: bool = False,
                 on_result: Optional[Callable[[CheckResult], None]] = None):
        self.config = config
        self.runner = runner
        self.probes = probes
        self.catalog = catalog
        self.resolver = resolver
        self.ledger = ledger
        self.is_root = is_root
        self.on_result = on_result

        # Kernel error excerpt captured by the boot check, reused by the report
        self.boot_log = ""
        # Full kernel ring buffer, None until read successfully
        self.kernel_log: Optional[str] = None

    def suggest(self, key: str, text: str) -> None:
        self.ledger.suggest(key, text)

    def record(self, category: CheckCategory, name: str, status: CheckStatus,
               message: str, severity: Severity = Severity.MEDIUM,
               detail: Optional[str] = None, note: Optional[str] = None,
               fix_key: Optional[str] = None) -> CheckResult:
        """Create a result, add it to the ledger and notify the listener."""
        result = CheckResult(
            category=category,
            name=name,
            status=status,
            message=message,
            severity=severity,
            detail=detail or None,
            note=note,
            fix_key=fix_key,
        )
        self.ledger.record(result)
        if self.on_result:
            self.on_result(result)
        return result

    def passed(self, category: CheckCategory, name: str, message: str,
               note: Optional[str] = None, info: bool = False) -> CheckResult:
        """Record a Pass; info=True also lists it under informational items."""
        severity = Severity.INFO if info else Severity.MEDIUM
        return self.record(category, name, CheckStatus.PASS, message, severity, note=note)

    def skip(self, category: CheckCategory, name: str, message: str,
             note: Optional[str] = None) -> CheckResult:
        return self.record(category, name, CheckStatus.SKIP, message, note=note)

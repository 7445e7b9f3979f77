"""
Diagnostic Engine for hostcheck

Runs the check groups in a fixed order against one host and keeps the
outcome in a RunLedger. The CLI streams results through the check callback
and renders the report once the run is scored.

Design Principles:
1. Sequential - groups run one after another, results are recorded in order
2. Callback-driven - live output without coupling the engine to a renderer
3. Fault-isolated - a crashing group becomes a Skip result, the run goes on
4. Per-run state - a fresh ledger and probe cache for every run_all()

Usage:
    engine = DiagnosticEngine(HostcheckConfig.from_env())
    engine.register_check_callback(my_handler)
    ledger = engine.run_all()
    report = engine.generate_report()
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional

from ...checks.base import CheckContext
from ...checks.boot import run_boot_checks
from ...checks.network import run_network_checks
from ...checks.packages import run_package_checks
from ...checks.security import run_security_checks
from ...checks.services import run_service_checks
from ...checks.storage import run_storage_checks
from ...checks.uptime import run_uptime_checks
from ...utils.catalog import FixCatalog, load_catalog
from ...utils.env_config import HostcheckConfig
from ...utils.hardware import HardwareResolver
from ...utils.probes import CommandRunner, ProbeCollector
from ...utils.remediation import hardware_recommendations
from ...utils.system import check_root, get_system_info
from .ledger import RunLedger
from .models import (
    CheckCallback, CheckCategory, CheckResult, CheckStatus,
    DiagnosticReport, ProgressCallback, RunState,
)
from .scoring import score

logger = logging.getLogger(__name__)


class CheckGroup(NamedTuple):
    category: CheckCategory
    title: str
    description: str
    run: Callable[[CheckContext], None]


CHECK_GROUPS: List[CheckGroup] = [
    CheckGroup(CheckCategory.HARDWARE, "Boot & Hardware Analysis",
               "Deep hardware analysis with driver recommendations", run_boot_checks),
    CheckGroup(CheckCategory.STORAGE, "Storage Analysis",
               "Disk health with specific remediation steps", run_storage_checks),
    CheckGroup(CheckCategory.PACKAGES, "Package System Analysis",
               "Checking package integrity, updates, and package manager health", run_package_checks),
    CheckGroup(CheckCategory.SERVICES, "Service Analysis",
               "Service health with specific remediation steps", run_service_checks),
    CheckGroup(CheckCategory.NETWORK, "Network Analysis",
               "Network diagnostics with specific fixes", run_network_checks),
    CheckGroup(CheckCategory.SECURITY, "Security & System State",
               "Checking firewall, authentication logs, and system security", run_security_checks),
    CheckGroup(CheckCategory.SYSTEM, "Uptime Analysis",
               "System uptime and reboot recommendations", run_uptime_checks),
]


class DiagnosticEngine:
    """
    Runs every check group once per run_all() call.

    Args:
        config: Thresholds and timeouts
        runner: Host access; a CommandRunner is built from config if omitted
        catalog: Fix catalog; loaded from config.catalog_path (or the bundled
            catalog) if omitted. Raises CatalogError when it is invalid.
        is_root: Override root detection (tests)
    """

    def __init__(self, config: Optional[HostcheckConfig] = None,
                 runner: Optional[CommandRunner] = None,
                 catalog: Optional[FixCatalog] = None,
                 is_root: Optional[bool] = None):
        self.config = config or HostcheckConfig()
        self.runner = runner or CommandRunner(default_timeout=self.config.probe_timeout)
        self.catalog = catalog or load_catalog(self.config.catalog_path)
        self.is_root = check_root() if is_root is None else is_root
        self.groups = list(CHECK_GROUPS)

        self.state = RunState.IDLE
        self.ledger = RunLedger()
        self.context: Optional[CheckContext] = None
        self._started: Optional[float] = None
        self._duration = 0.0

        # Callbacks
        self._check_callbacks: List[CheckCallback] = []
        self._progress_callbacks: List[ProgressCallback] = []
        self._callbacks_lock = threading.Lock()

        logger.debug(f"DiagnosticEngine initialized (root={self.is_root})")

    # === Callback Registration ===

    def register_check_callback(self, callback: CheckCallback):
        """Register callback for individual check results."""
        with self._callbacks_lock:
            self._check_callbacks.append(callback)

    def register_progress_callback(self, callback: ProgressCallback):
        """Register callback called before each check group starts."""
        with self._callbacks_lock:
            self._progress_callbacks.append(callback)

    def _notify_check(self, result: CheckResult):
        with self._callbacks_lock:
            callbacks = list(self._check_callbacks)
        for cb in callbacks:
            try:
                cb(result)
            except Exception as e:
                logger.error(f"Check callback error: {e}")

    def _notify_progress(self, title: str, current: int, total: int):
        with self._callbacks_lock:
            callbacks = list(self._progress_callbacks)
        for cb in callbacks:
            try:
                cb(title, current, total)
            except Exception as e:
                logger.error(f"Progress callback error: {e}")

    # === Check Execution ===

    def _new_context(self) -> CheckContext:
        probes = ProbeCollector(
            self.runner,
            max_lines=self.config.probe_max_lines,
            timeout=self.config.probe_timeout,
        )
        return CheckContext(
            config=self.config,
            runner=self.runner,
            probes=probes,
            catalog=self.catalog,
            resolver=HardwareResolver(self.catalog, probes),
            ledger=self.ledger,
            is_root=self.is_root,
            on_result=self._notify_check,
        )

    def run_group(self, group: CheckGroup):
        """Run one check group; a crash is recorded as a skipped check."""
        try:
            group.run(self.context)
        except Exception as e:
            logger.exception(f"{group.title} crashed")
            self.context.record(
                group.category,
                f"{group.category.value} checks",
                CheckStatus.SKIP,
                f"Check group failed: {e}",
            )

    def run_all(self) -> RunLedger:
        """Run every check group in order and return the ledger."""
        self.ledger = RunLedger()
        self.context = self._new_context()
        self.state = RunState.COLLECTING
        self._started = time.monotonic()

        total = len(self.groups)
        for i, group in enumerate(self.groups, 1):
            self._notify_progress(group.title, i, total)
            logger.info(f"Running {group.title} ({i}/{total})")
            self.run_group(group)

        self._duration = time.monotonic() - self._started
        self.state = RunState.SCORING
        logger.info(f"Collection finished: {self.ledger.total} checks in {self._duration:.1f}s")
        return self.ledger

    def generate_report(self) -> DiagnosticReport:
        """Score the collected results. Requires a finished run_all()."""
        if self.state not in (RunState.SCORING, RunState.DONE):
            raise RuntimeError("generate_report() called before run_all() finished")

        probes = self.context.probes
        report = DiagnosticReport(
            generated_at=datetime.now(),
            duration_seconds=self._duration,
            system_info=get_system_info(),
            score=score(self.ledger),
            ledger=self.ledger,
            hardware_inventory=probes.inventory(),
            hardware_recommendations=hardware_recommendations(
                probes.inventory(), self.context.kernel_log or self.context.boot_log,
                self.catalog.package_alternatives,
            ),
            boot_log=self.context.boot_log,
        )
        self.state = RunState.DONE
        return report

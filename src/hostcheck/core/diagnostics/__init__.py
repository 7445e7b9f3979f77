"""
Diagnostics core for hostcheck

Usage:
    from hostcheck.core.diagnostics import CheckStatus, RunLedger, score
    from hostcheck.core.diagnostics.engine import DiagnosticEngine

    engine = DiagnosticEngine(config)
    ledger = engine.run_all()
    print(score(ledger).status.value)

The engine imports the check groups, which import this package, so it is
not re-exported here.
"""

from .models import (
    CheckStatus,
    Severity,
    CheckCategory,
    HealthStatus,
    RunState,
    CheckResult,
    HealthScore,
    DiagnosticReport,
)
from .ledger import RunLedger
from .scoring import score, prioritized_fixes, exit_code_for

__all__ = [
    'CheckStatus',
    'Severity',
    'CheckCategory',
    'HealthStatus',
    'RunState',
    'CheckResult',
    'HealthScore',
    'DiagnosticReport',
    'RunLedger',
    'score',
    'prioritized_fixes',
    'exit_code_for',
]

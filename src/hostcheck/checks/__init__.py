"""
Check groups.

Each group is a function taking a CheckContext; the engine runs them in
CHECK_GROUPS order.
"""

from .base import CheckContext
from .boot import run_boot_checks
from .network import run_network_checks
from .packages import run_package_checks
from .security import run_security_checks
from .services import run_service_checks
from .storage import run_storage_checks
from .uptime import run_uptime_checks

__all__ = [
    'CheckContext',
    'run_boot_checks',
    'run_storage_checks',
    'run_package_checks',
    'run_service_checks',
    'run_network_checks',
    'run_security_checks',
    'run_uptime_checks',
]

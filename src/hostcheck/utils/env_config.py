"""Environment configuration loader for hostcheck

Settings come from HOSTCHECK_* environment variables, optionally seeded
from a .env file. Values that do not parse fall back to the built-in
default rather than failing the run.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .parsing import parse_float, parse_int

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULTS = {
    # Timeouts (seconds)
    'HOSTCHECK_PROBE_TIMEOUT': '10',
    'HOSTCHECK_NETWORK_TIMEOUT': '5',
    'HOSTCHECK_SMART_TIMEOUT': '15',
    'HOSTCHECK_PROBE_MAX_LINES': '3',

    # Hardware thresholds
    'HOSTCHECK_MEMORY_WARN': '75',
    'HOSTCHECK_MEMORY_CRIT': '90',
    'HOSTCHECK_LOAD_WARN': '75',
    'HOSTCHECK_LOAD_CRIT': '100',
    'HOSTCHECK_TEMP_WARN': '70',
    'HOSTCHECK_TEMP_CRIT': '85',

    # Storage thresholds
    'HOSTCHECK_DISK_WARN': '85',
    'HOSTCHECK_DISK_CRIT': '95',
    'HOSTCHECK_INODE_WARN': '75',
    'HOSTCHECK_INODE_CRIT': '90',

    # Security / uptime
    'HOSTCHECK_AUTH_FAIL_WARN': '5',
    'HOSTCHECK_SYSLOG_ERROR_WARN': '3',
    'HOSTCHECK_UPTIME_WARN_DAYS': '30',
    'HOSTCHECK_UPTIME_CRIT_DAYS': '90',

    # Services / network
    'HOSTCHECK_CRITICAL_SERVICES': 'systemd-resolved,NetworkManager,ssh,systemd-timesyncd,dbus',
    'HOSTCHECK_PING_HOSTS': '8.8.8.8,1.1.1.1,9.9.9.9',
    'HOSTCHECK_DNS_DOMAINS': 'google.com,debian.org,kernel.org',

    # Report
    'HOSTCHECK_MAX_FIXES': '8',
    'HOSTCHECK_MAX_HIGH_ISSUES': '5',
    'HOSTCHECK_CATALOG': '',

    # Logging
    'HOSTCHECK_LOG_LEVEL': 'WARNING',
    'HOSTCHECK_LOG_FILE': '',
}


def find_env_file() -> Optional[Path]:
    """Find the .env file in standard locations"""
    search_paths = [
        Path.cwd() / '.env',
        Path.home() / '.config' / 'hostcheck' / 'hostcheck.env',
        Path('/etc/hostcheck/hostcheck.env'),
    ]

    for path in search_paths:
        if path.is_file():
            return path

    return None


def load_env_file(env_path: Optional[Path] = None, override: bool = False) -> Dict[str, str]:
    """Load HOSTCHECK_* variables from a .env file

    Args:
        env_path: Optional path to .env file. If None, auto-discovers.
        override: Replace variables already present in the environment

    Returns:
        Dictionary of loaded variables
    """
    loaded_vars = {}

    if env_path is None:
        env_path = find_env_file()

    if env_path is None or not env_path.exists():
        return loaded_vars

    try:
        with open(env_path, 'r') as f:
            for line in f:
                line = line.strip()

                if not line or line.startswith('#'):
                    continue
                if line.startswith('export '):
                    line = line[len('export '):]
                if '=' not in line:
                    continue

                key, _, value = line.partition('=')
                key = key.strip()
                value = value.strip()

                if value and value[0] in ('"', "'") and value[-1] == value[0]:
                    value = value[1:-1]

                if not key.startswith('HOSTCHECK_'):
                    continue

                loaded_vars[key] = value
                if override or key not in os.environ:
                    os.environ[key] = value

    except OSError as e:
        logger.warning(f"Could not load {env_path}: {e}")

    return loaded_vars


def get_config(key: str, default: Optional[str] = None) -> str:
    """Get configuration value from environment or defaults

    Priority:
    1. Environment variable
    2. Provided default
    3. Built-in default
    """
    value = os.environ.get(key)
    if value is not None:
        return value
    if default is not None:
        return default
    return DEFAULTS.get(key, '')


def get_config_int(key: str, default: Optional[int] = None) -> int:
    """Get integer configuration value, falling back on bad input"""
    if default is None:
        default = parse_int(DEFAULTS.get(key), 0)
    return parse_int(os.environ.get(key), default)


def get_config_float(key: str, default: Optional[float] = None) -> float:
    """Get float configuration value, falling back on bad input"""
    if default is None:
        default = parse_float(DEFAULTS.get(key), 0.0)
    return parse_float(os.environ.get(key), default)


def get_config_list(key: str) -> List[str]:
    """Get a comma separated configuration value as a list"""
    return [item.strip() for item in get_config(key).split(',') if item.strip()]


@dataclass
class HostcheckConfig:
    """Thresholds, timeouts and report limits for one run."""
    probe_timeout: float = 10.0
    network_timeout: float = 5.0
    smart_timeout: float = 15.0
    probe_max_lines: int = 3

    memory_warn: float = 75.0
    memory_crit: float = 90.0
    load_warn: float = 75.0
    load_crit: float = 100.0
    temp_warn: int = 70
    temp_crit: int = 85

    disk_warn: int = 85
    disk_crit: int = 95
    inode_warn: int = 75
    inode_crit: int = 90

    auth_fail_warn: int = 5
    syslog_error_warn: int = 3
    uptime_warn_days: int = 30
    uptime_crit_days: int = 90

    critical_services: List[str] = field(default_factory=lambda: [
        'systemd-resolved', 'NetworkManager', 'ssh', 'systemd-timesyncd', 'dbus'])
    ping_hosts: List[str] = field(default_factory=lambda: ['8.8.8.8', '1.1.1.1', '9.9.9.9'])
    dns_domains: List[str] = field(default_factory=lambda: ['google.com', 'debian.org', 'kernel.org'])

    max_fixes: int = 8
    max_high_issues: int = 5
    catalog_path: Optional[str] = None

    log_level: str = 'WARNING'
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'HostcheckConfig':
        """Build configuration from the environment (call load_env_file first)."""
        return cls(
            probe_timeout=get_config_float('HOSTCHECK_PROBE_TIMEOUT'),
            network_timeout=get_config_float('HOSTCHECK_NETWORK_TIMEOUT'),
            smart_timeout=get_config_float('HOSTCHECK_SMART_TIMEOUT'),
            probe_max_lines=get_config_int('HOSTCHECK_PROBE_MAX_LINES'),
            memory_warn=get_config_float('HOSTCHECK_MEMORY_WARN'),
            memory_crit=get_config_float('HOSTCHECK_MEMORY_CRIT'),
            load_warn=get_config_float('HOSTCHECK_LOAD_WARN'),
            load_crit=get_config_float('HOSTCHECK_LOAD_CRIT'),
            temp_warn=get_config_int('HOSTCHECK_TEMP_WARN'),
            temp_crit=get_config_int('HOSTCHECK_TEMP_CRIT'),
            disk_warn=get_config_int('HOSTCHECK_DISK_WARN'),
            disk_crit=get_config_int('HOSTCHECK_DISK_CRIT'),
            inode_warn=get_config_int('HOSTCHECK_INODE_WARN'),
            inode_crit=get_config_int('HOSTCHECK_INODE_CRIT'),
            auth_fail_warn=get_config_int('HOSTCHECK_AUTH_FAIL_WARN'),
            syslog_error_warn=get_config_int('HOSTCHECK_SYSLOG_ERROR_WARN'),
            uptime_warn_days=get_config_int('HOSTCHECK_UPTIME_WARN_DAYS'),
            uptime_crit_days=get_config_int('HOSTCHECK_UPTIME_CRIT_DAYS'),
            critical_services=get_config_list('HOSTCHECK_CRITICAL_SERVICES'),
            ping_hosts=get_config_list('HOSTCHECK_PING_HOSTS'),
            dns_domains=get_config_list('HOSTCHECK_DNS_DOMAINS'),
            max_fixes=get_config_int('HOSTCHECK_MAX_FIXES'),
            max_high_issues=get_config_int('HOSTCHECK_MAX_HIGH_ISSUES'),
            catalog_path=get_config('HOSTCHECK_CATALOG') or None,
            log_level=get_config('HOSTCHECK_LOG_LEVEL'),
            log_file=get_config('HOSTCHECK_LOG_FILE') or None,
        )

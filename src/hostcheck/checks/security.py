"""
Security and system state checks.

Firewall, authentication failures and journal errors need root; without it
they are recorded as skipped rather than guessed.
"""

import logging
import re

from ..core.diagnostics.models import CheckCategory, CheckStatus, Severity
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.SECURITY

AUTH_WINDOW = "2 hours ago"
ERROR_WINDOW = "1 hour ago"
MIN_CUSTOM_CHAINS = 3
EXCERPT_WIDTH = 80

REBOOT_REQUIRED = '/var/run/reboot-required'
REBOOT_REQUIRED_PKGS = '/var/run/reboot-required.pkgs'

_AUTH_FAILURE = re.compile(r'authentication failure|failed password|invalid user', re.IGNORECASE)


def _excerpt(lines, count: int) -> str:
    return "\n".join(line[:EXCERPT_WIDTH] for line in lines[:count])


def check_firewall(ctx: CheckContext):
    name = "Firewall Status"
    runner = ctx.runner
    timeout = ctx.config.probe_timeout

    if runner.exists('ufw') and ctx.is_root:
        status = runner.run(['ufw', 'status'], timeout=timeout)
        active = any(line.split()[:2] == ['Status:', 'active'] for line in status.lines)
        if active:
            numbered = runner.run(['ufw', 'status', 'numbered'], timeout=timeout)
            rules = sum(1 for line in numbered.lines if '[' in line)
            ctx.passed(CATEGORY, name, f"UFW active with {rules} rules", note=f"{rules} rules configured")
        else:
            ctx.suggest("ufw_inactive", "UFW firewall inactive. Enable with: sudo ufw enable")
            ctx.record(CATEGORY, name, CheckStatus.WARN, "UFW firewall inactive",
                       note="Enable: sudo ufw enable", fix_key="ufw_inactive")
    elif runner.exists('iptables') and ctx.is_root:
        listing = runner.run(['iptables', '-L'], timeout=timeout)
        chains = sum(1 for line in listing.lines if line.startswith('Chain'))
        if chains > MIN_CUSTOM_CHAINS:
            ctx.passed(CATEGORY, name, "iptables rules configured", note="Custom firewall rules")
        else:
            ctx.suggest("minimal_firewall",
                        "Minimal firewall protection. Consider configuring UFW: sudo apt install ufw && sudo ufw enable")
            ctx.record(CATEGORY, name, CheckStatus.WARN, "Minimal firewall protection",
                       note="Consider configuring UFW", fix_key="minimal_firewall")
    else:
        if not runner.exists('ufw') and not runner.exists('iptables'):
            reason = "no firewall tools found"
        else:
            reason = "requires root privileges"
        ctx.skip(CATEGORY, name, f"Cannot check firewall ({reason})", note=reason)


def check_auth_failures(ctx: CheckContext):
    name = "Authentication Security"
    if not (ctx.is_root and ctx.runner.exists('journalctl')):
        ctx.skip(CATEGORY, name, "Authentication log check requires root", note="Cannot check auth logs")
        return

    output = ctx.runner.run(['journalctl', '--since', AUTH_WINDOW, '--no-pager', '-q'],
                            timeout=ctx.config.probe_timeout * 3)
    if not output.ran:
        ctx.skip(CATEGORY, name, f"journalctl did not complete ({output.status.value})")
        return

    failures = [line for line in output.lines if _AUTH_FAILURE.search(line)]
    count = len(failures)

    if count == 0:
        ctx.passed(CATEGORY, name, "No recent authentication failures", note="Clean authentication log")
    elif count <= ctx.config.auth_fail_warn:
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"{count} authentication failures in last 2 hours",
                   note="Monitor authentication logs")
    else:
        ctx.suggest("auth_attacks",
                    f"{count} authentication failures detected (potential attack). "
                    f"Check: sudo journalctl --since '{AUTH_WINDOW}' | grep -i 'failed password'")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"{count} authentication failures (potential attack)",
                   severity=Severity.HIGH, detail=_excerpt(failures, 3),
                   note="Possible brute force attack", fix_key="auth_attacks")


def check_error_logs(ctx: CheckContext):
    name = "System Error Logs"
    if not (ctx.is_root and ctx.runner.exists('journalctl')):
        ctx.skip(CATEGORY, name, "System log analysis requires root", note="Cannot analyze system logs")
        return

    # -q drops the "-- No entries --" marker
    output = ctx.runner.run(['journalctl', '-p', '3', '-b', '--since', ERROR_WINDOW, '--no-pager', '-q'],
                            timeout=ctx.config.probe_timeout * 3)
    if not output.ran:
        ctx.skip(CATEGORY, name, f"journalctl did not complete ({output.status.value})")
        return

    errors = output.lines
    count = len(errors)

    if count == 0:
        ctx.passed(CATEGORY, name, "No recent critical errors", note="No critical system errors")
    elif count <= ctx.config.syslog_error_warn:
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"{count} critical errors in last hour",
                   note=f"Check: journalctl -p 3 --since '{ERROR_WINDOW}'")
    else:
        ctx.suggest("system_errors", f"{count} critical errors detected. Check: journalctl -p 3 -xb --no-pager")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"{count} critical errors (system instability)",
                   severity=Severity.HIGH, detail=_excerpt(errors[-2:], 2),
                   note="System experiencing issues", fix_key="system_errors")


def check_reboot_required(ctx: CheckContext):
    name = "Reboot Status"
    if not ctx.runner.path_exists(REBOOT_REQUIRED):
        ctx.passed(CATEGORY, name, "No reboot required", note="No pending reboot needed")
        return

    pkgs = ctx.runner.read_file(REBOOT_REQUIRED_PKGS) or ""
    packages = " ".join(line.strip() for line in pkgs.splitlines()[:3] if line.strip()) or "unknown"

    ctx.suggest("reboot_required", "System reboot required for updates. Reboot with: sudo shutdown -r now")
    ctx.record(CATEGORY, name, CheckStatus.WARN, "System reboot required for updates",
               note=f"Packages: {packages}", fix_key="reboot_required")


def run_security_checks(ctx: CheckContext):
    """Firewall, authentication failures, journal errors and pending reboot."""
    check_firewall(ctx)
    check_auth_failures(ctx)
    check_error_logs(ctx)
    check_reboot_required(ctx)

"""systemd checks: failed units, overall system state and critical services."""

import logging

from ..core.diagnostics.models import CheckCategory, CheckStatus, Severity
from ..utils.remediation import failed_service_hint
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.SERVICES


def _unit_name(line: str) -> str:
    # systemctl prefixes failed units with a bullet on some terminals
    fields = line.replace('●', ' ').split()
    return fields[0] if fields else ""


def check_failed_units(ctx: CheckContext):
    name = "Failed Services Analysis"
    output = ctx.runner.run(['systemctl', 'list-units', '--state=failed', '--no-legend', '--no-pager'],
                            timeout=ctx.config.probe_timeout)
    if not output.ran:
        ctx.skip(CATEGORY, name, f"Cannot list failed units ({output.status.value})")
        return

    units = [unit for unit in (_unit_name(line) for line in output.lines) if unit]
    failed_count = sum(1 for unit in units if '.service' in unit)
    if failed_count == 0:
        ctx.passed(CATEGORY, name, "No failed services", note="All services operational")
        return

    detail_lines = []
    for unit in units:
        detail_lines.append(f"FAILED SERVICE: {unit}")
        detail_lines.extend(f"  {hint}" for hint in failed_service_hint(unit))

    ctx.suggest("failed_services", "Failed services detected. Check with: systemctl --failed && journalctl -xe")
    ctx.record(CATEGORY, name, CheckStatus.FAIL,
               f"{failed_count} services failed with remediation steps",
               severity=Severity.HIGH, detail="\n".join(detail_lines),
               note=f"Failed: {', '.join(units[:5])}", fix_key="failed_services")


def check_system_state(ctx: CheckContext):
    name = "System State"
    # is-system-running exits non-zero for anything but "running"
    output = ctx.runner.run(['systemctl', 'is-system-running'], timeout=ctx.config.probe_timeout)
    state = output.stdout.strip() if output.ran else ""
    state = state or "unknown"

    if state == "running":
        ctx.passed(CATEGORY, name, "System running normally", note="System running normally")
    elif state == "degraded":
        ctx.suggest("system_degraded", "System degraded. Check: systemctl --failed && journalctl -p 3 -xb")
        ctx.record(CATEGORY, name, CheckStatus.WARN, "System degraded (some services failed)",
                   note="Some services have issues", fix_key="system_degraded")
    else:
        ctx.suggest("system_unknown", "System state problematic. Check: systemctl status && journalctl -b")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"System state: {state}",
                   severity=Severity.HIGH, note="System not operational", fix_key="system_unknown")


def installed_units(ctx: CheckContext) -> set:
    """Names of all installed unit files."""
    output = ctx.runner.run(['systemctl', 'list-unit-files', '--no-pager', '--no-legend'],
                            timeout=ctx.config.probe_timeout)
    return {line.split()[0] for line in output.lines} if output.ran else set()


def check_critical_services(ctx: CheckContext):
    units = installed_units(ctx)
    total = healthy = 0

    for service in ctx.config.critical_services:
        if f"{service}.service" not in units:
            logger.debug(f"{service} not installed, not checked")
            continue

        total += 1
        output = ctx.runner.run(['systemctl', 'is-active', service], timeout=ctx.config.probe_timeout)
        state = output.stdout.strip() if output.ran else ""
        state = state or "inactive"
        check_name = f"Service {service}"

        if state == "active":
            healthy += 1
            ctx.passed(CATEGORY, check_name, "Active and running", note="Essential service running", info=True)
        else:
            key = f"critical_service_{service}"
            ctx.suggest(key, f"Critical service {service} is {state}. Fix with: "
                             f"sudo systemctl start {service} && sudo systemctl enable {service}")
            ctx.record(CATEGORY, check_name, CheckStatus.FAIL, f"Service {service}: {state}",
                       severity=Severity.HIGH, note="Critical service down", fix_key=key)

    name = "Critical Services"
    if total == healthy:
        ctx.passed(CATEGORY, name, f"All {total} critical services healthy", info=True)
    else:
        unhealthy = total - healthy
        ctx.suggest("critical_services",
                    f"{unhealthy} critical services down. Check with: systemctl list-units --state=failed")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"{unhealthy} of {total} critical services down",
                   severity=Severity.HIGH, fix_key="critical_services")


def run_service_checks(ctx: CheckContext):
    """Failed units, system state and the configured critical services."""
    if not ctx.runner.exists('systemctl'):
        for name in ("Failed Services Analysis", "System State", "Critical Services"):
            ctx.skip(CATEGORY, name, "systemctl not available", note="systemd not in use")
        return

    check_failed_units(ctx)
    check_system_state(ctx)
    check_critical_services(ctx)

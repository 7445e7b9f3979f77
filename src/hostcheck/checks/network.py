"""Network checks: interfaces, default gateway, internet reachability and DNS."""

import logging
from typing import Optional

from ..core.diagnostics.models import CheckCategory, CheckStatus, Severity
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.NETWORK


def ping(ctx: CheckContext, host: str) -> bool:
    """One ICMP echo with a two second reply wait."""
    return ctx.runner.run(['ping', '-c1', '-W2', host], timeout=ctx.config.network_timeout).ok


def default_gateway(route_output: str) -> Optional[str]:
    """Gateway address from `ip route show default` output."""
    for line in route_output.splitlines():
        fields = line.split()
        if 'via' in fields:
            index = fields.index('via') + 1
            if index < len(fields):
                return fields[index]
    return None


def check_interfaces(ctx: CheckContext):
    name = "Network Interface Analysis"
    output = ctx.runner.run(['ip', '-brief', 'addr', 'show'], timeout=ctx.config.probe_timeout)

    active = []
    for line in output.lines if output.ran else []:
        fields = line.split()
        if len(fields) >= 2 and fields[1] == 'UP' and fields[0] != 'lo':
            address = fields[2] if len(fields) > 2 else "no address"
            active.append(f"{fields[0]}: {address}")

    if active:
        ctx.passed(CATEGORY, name, f"{len(active)} active interfaces", note=", ".join(active), info=True)
    else:
        ctx.suggest("no_network",
                    "No network interfaces active. Check: ip link show && sudo systemctl restart NetworkManager")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, "No active network interfaces",
                   severity=Severity.CRITICAL, note="Network unavailable", fix_key="no_network")


def check_gateway(ctx: CheckContext):
    name = "Gateway Connectivity"
    output = ctx.runner.run(['ip', 'route', 'show', 'default'], timeout=ctx.config.probe_timeout)
    gateway = default_gateway(output.stdout) if output.ran else None

    if not gateway:
        ctx.suggest("no_gateway", "No default gateway configured. Check: ip route add default via <router-ip>")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, "No default gateway configured",
                   severity=Severity.HIGH, note="Network isolation", fix_key="no_gateway")
    elif not ctx.runner.exists('ping'):
        ctx.skip(CATEGORY, name, f"ping not available to test gateway {gateway}")
    elif ping(ctx, gateway):
        ctx.passed(CATEGORY, name, f"Gateway reachable: {gateway}", note=f"IP: {gateway}", info=True)
    else:
        ctx.suggest("gateway_failed", f"Gateway {gateway} unreachable. Check: ip route show && ping {gateway}")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"Gateway unreachable: {gateway}",
                   severity=Severity.HIGH, note=f"IP: {gateway}", fix_key="gateway_failed")


def check_internet(ctx: CheckContext) -> Optional[bool]:
    """Ping the configured hosts until one answers. None if ping is missing."""
    name = "Internet Connectivity"
    if not ctx.runner.exists('ping'):
        ctx.skip(CATEGORY, name, "ping not available")
        return None

    for host in ctx.config.ping_hosts:
        if ping(ctx, host):
            ctx.passed(CATEGORY, name, f"Internet reachable via {host}", note=f"Responding host: {host}", info=True)
            return True

    first_host = ctx.config.ping_hosts[0] if ctx.config.ping_hosts else "8.8.8.8"
    ctx.suggest("no_internet",
                f"No internet connectivity. Check: ping {first_host}; sudo systemctl restart NetworkManager; "
                "check firewall settings")
    ctx.record(CATEGORY, name, CheckStatus.FAIL, "No internet connectivity",
               severity=Severity.HIGH, note="Check network config", fix_key="no_internet")
    return False


def check_dns(ctx: CheckContext, internet_ok: Optional[bool]):
    name = "DNS Resolution"
    if internet_ok is False:
        ctx.skip(CATEGORY, name, "Skipped due to no internet connectivity", note="No internet for DNS test")
        return

    for domain in ctx.config.dns_domains:
        if ctx.runner.resolve(domain, timeout=ctx.config.network_timeout):
            ctx.passed(CATEGORY, name, f"DNS resolution working for {domain}", note=f"Resolved: {domain}", info=True)
            return

    ctx.suggest("dns_failed", "DNS resolution failed. Check: /etc/resolv.conf; sudo systemctl restart systemd-resolved")
    ctx.record(CATEGORY, name, CheckStatus.FAIL, "DNS resolution failed for all test domains",
               severity=Severity.HIGH, note="Cannot resolve domain names", fix_key="dns_failed")


def run_network_checks(ctx: CheckContext):
    """Interfaces and gateway (needs iproute2), then internet and DNS."""
    if ctx.runner.exists('ip'):
        check_interfaces(ctx)
        check_gateway(ctx)
    else:
        for name in ("Network Interface Analysis", "Gateway Connectivity"):
            ctx.skip(CATEGORY, name, "ip command not available", note="Install: sudo apt install iproute2")

    internet_ok = check_internet(ctx)
    check_dns(ctx, internet_ok)

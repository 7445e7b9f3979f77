"""Uptime check."""

import logging
from datetime import datetime, timedelta

from ..core.diagnostics.models import CheckCategory, CheckStatus
from ..utils.parsing import first_field, parse_int
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.SYSTEM

LAST_BOOT_AFTER_DAYS = 7


def format_uptime(seconds: int) -> str:
    """Compact uptime: "3d 4h 12m", "4h 12m" or "12m"."""
    days, rest = divmod(max(seconds, 0), 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def run_uptime_checks(ctx: CheckContext):
    name = "System Uptime"
    raw = ctx.runner.read_file('/proc/uptime')
    if not raw or not raw.strip():
        ctx.skip(CATEGORY, name, "Uptime information unavailable", note="Cannot read /proc/uptime")
        return

    seconds = parse_int(first_field(raw))
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    display = format_uptime(seconds)
    cfg = ctx.config

    note = None
    if days > LAST_BOOT_AFTER_DAYS:
        last_boot = datetime.now() - timedelta(seconds=seconds)
        note = f"Last boot: {last_boot.strftime('%Y-%m-%d %H:%M:%S')}"

    if days > cfg.uptime_crit_days:
        ctx.suggest("long_uptime",
                    f"System uptime very high: {days} days. Consider rebooting for:\n"
                    "• Kernel updates and security patches\n"
                    "• Memory leak prevention\n"
                    "• System stability improvements\n"
                    "Reboot command: sudo shutdown -r now")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"System uptime very high: {days} days ({display})",
                   note=note or "Consider rebooting for security updates", fix_key="long_uptime")
    elif days > cfg.uptime_warn_days:
        ctx.suggest("medium_uptime",
                    f"System uptime high: {days} days. Recommended actions:\n"
                    "• Schedule a maintenance window for reboot\n"
                    "• Check for pending kernel updates\n"
                    "• Review system logs for any issues")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"System uptime high: {days} days ({display})",
                   note=note or "Reboot recommended for updates", fix_key="medium_uptime")
    else:
        ctx.passed(CATEGORY, name, f"System uptime: {days} days, {hours} hours ({display})",
                   note=note or "Recent reboot or new system", info=True)

"""Storage checks: per-mount usage, inode usage and SMART drive health."""

import logging
import os
import re

from ..core.diagnostics.models import CheckCategory, CheckStatus, Severity
from ..utils.parsing import parse_percent
from ..utils.remediation import disk_cleanup_hint
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.STORAGE

SMART_MAX_DRIVES = 5
_SMART_DEVICE = re.compile(r'^/dev/(sd|nvme|hd)')


def check_disk_space(ctx: CheckContext):
    name = "Disk Space Analysis"
    # -P keeps one line per filesystem even for long device names
    output = ctx.runner.run(['df', '-P'], timeout=ctx.config.probe_timeout)
    if not output.ran:
        ctx.skip(CATEGORY, name, "df not available")
        return

    cfg = ctx.config
    critical = warning = total = 0

    for line in output.lines:
        if not line.startswith('/dev/'):
            continue
        fields = line.split(None, 5)
        if len(fields) < 6:
            logger.debug(f"Unparseable df line: {line!r}")
            continue

        total += 1
        filesystem, usage, mount = fields[0], parse_percent(fields[4]), fields[5]
        check_name = f"Disk {mount}"

        if usage > cfg.disk_crit:
            critical += 1
            key = f"disk_critical_{mount}"
            ctx.suggest(key, f"CRITICAL: {mount} {usage}% full. {disk_cleanup_hint(mount)}")
            ctx.record(CATEGORY, check_name, CheckStatus.FAIL,
                       f"Critical: {usage}% full on {filesystem}",
                       severity=Severity.CRITICAL, note=f"Filesystem: {filesystem}", fix_key=key)
        elif usage > cfg.disk_warn:
            warning += 1
            key = f"disk_warning_{mount}"
            ctx.suggest(key, f"High usage. Monitor: df -h {mount}")
            ctx.record(CATEGORY, check_name, CheckStatus.WARN,
                       f"High usage: {usage}% full on {filesystem}",
                       note=f"Filesystem: {filesystem}", fix_key=key)
        else:
            ctx.passed(CATEGORY, check_name, f"Usage: {usage}% on {filesystem}",
                       note=f"Filesystem: {filesystem}", info=True)

    if critical:
        ctx.record(CATEGORY, name, CheckStatus.FAIL,
                   f"{critical} critical, {warning} warning of {total} mounts",
                   severity=Severity.CRITICAL)
    elif warning:
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"{warning} high usage of {total} mounts")
    else:
        ctx.passed(CATEGORY, name, f"All {total} mount points healthy", info=True)


def check_inodes(ctx: CheckContext):
    name = "Inode Usage"
    output = ctx.runner.run(['df', '-Pi', '/'], timeout=ctx.config.probe_timeout)
    lines = output.lines if output.ran else []
    fields = lines[1].split() if len(lines) > 1 else []
    usage = parse_percent(fields[4], default=-1) if len(fields) > 4 else -1

    # Filesystems without inode accounting (btrfs) report "-"
    if usage < 0:
        ctx.skip(CATEGORY, name, "Inode information unavailable")
        return

    cfg = ctx.config
    if usage > cfg.inode_crit:
        ctx.suggest("inode_fix",
                    "Critical inode usage. 1) Delete unnecessary small files 2) Clear temporary files "
                    "3) Check for too many files in directories")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"Critical inode usage: {usage}%",
                   severity=Severity.HIGH, note="Too many small files", fix_key="inode_fix")
    elif usage > cfg.inode_warn:
        ctx.suggest("inode_warn", "High inode usage. Monitor file creation and clean up unnecessary files")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"High inode usage: {usage}%",
                   note="Monitor file creation", fix_key="inode_warn")
    else:
        ctx.passed(CATEGORY, name, f"Inode usage: {usage}%", note="Adequate inodes available", info=True)


def check_smart(ctx: CheckContext):
    name = "Disk Health (SMART)"
    if not ctx.runner.exists('smartctl'):
        ctx.skip(CATEGORY, name, "smartctl not installed", note="Install: sudo apt install smartmontools")
        return
    if not ctx.is_root:
        ctx.skip(CATEGORY, name, "Requires root privileges", note="Run with sudo for disk health check")
        return

    listing = ctx.runner.run(['lsblk', '-dpno', 'NAME'], timeout=ctx.config.probe_timeout)
    devices = [line.strip() for line in listing.lines if _SMART_DEVICE.match(line.strip())]
    devices = [dev for dev in devices[:SMART_MAX_DRIVES] if ctx.runner.path_exists(dev)]

    failed = 0
    for dev in devices:
        drive = os.path.basename(dev)
        check_name = f"Drive {drive}"
        smart = ctx.runner.run(['smartctl', '-H', dev], timeout=ctx.config.smart_timeout)

        if 'PASSED' in smart.stdout:
            ctx.passed(CATEGORY, check_name, "SMART health OK", note="Health check OK", info=True)
        elif 'FAILED' in smart.stdout:
            failed += 1
            key = f"smart_failed_{drive}"
            ctx.suggest(key, "SMART health FAILED. 1) Backup data immediately 2) Replace drive "
                             "3) Check cables and connections")
            ctx.record(CATEGORY, check_name, CheckStatus.FAIL, "SMART health FAILED",
                       severity=Severity.CRITICAL, note="Drive replacement needed", fix_key=key)
        else:
            ctx.record(CATEGORY, check_name, CheckStatus.WARN, "SMART status unclear",
                       note="Unable to determine health")

    if not devices:
        ctx.skip(CATEGORY, name, "No compatible drives found for SMART check", note="No drives to check")
    elif failed:
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"{failed} of {len(devices)} drives failing",
                   severity=Severity.CRITICAL)
    else:
        ctx.passed(CATEGORY, name, f"All {len(devices)} drives checked", info=True)


def run_storage_checks(ctx: CheckContext):
    """Mount usage, inode usage and SMART health."""
    check_disk_space(ctx)
    check_inodes(ctx)
    check_smart(ctx)

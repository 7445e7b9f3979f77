"""Package system checks: apt integrity, pending updates, dpkg lock and snaps."""

import logging
import re

from ..core.diagnostics.models import CheckCategory, CheckStatus, Severity
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.PACKAGES

APT_LISTS_DIR = '/var/lib/apt/lists'
DPKG_FRONTEND_LOCK = '/var/lib/dpkg/lock-frontend'

_BROKEN_PACKAGE = re.compile(r'package (\S+)')
# apt-get check without root cannot take the dpkg lock
_NEEDS_PRIVILEGES = re.compile(
    r"are you root|Could not open lock file|Unable to acquire the dpkg|Permission denied", re.IGNORECASE
)


def broken_packages(text: str, limit: int = 5):
    """Package names mentioned in apt check errors, unique, in order."""
    names = []
    for line in text.splitlines():
        # progress lines ("Reading package lists...")
        if line.rstrip().endswith('...'):
            continue
        for name in _BROKEN_PACKAGE.findall(line):
            name = name.strip("'\",.:")
            if name and name not in names:
                names.append(name)
    return names[:limit]


def check_integrity(ctx: CheckContext):
    name = "Package Integrity"
    if ctx.runner.exists('apt-get'):
        args = ['apt-get', 'check']
    elif ctx.runner.exists('apt'):
        args = ['apt', 'check']
    else:
        ctx.skip(CATEGORY, name, "Package manager not available", note="Unsupported package system")
        return

    output = ctx.runner.run(args, timeout=ctx.config.probe_timeout * 3)
    if not output.ran:
        ctx.skip(CATEGORY, name, f"{args[0]} check did not complete ({output.status.value})")
        return

    combined = "\n".join(part for part in (output.stdout, output.stderr) if part)
    if output.returncode == 0 or "0 broken" in combined:
        ctx.passed(CATEGORY, name, "No broken packages detected", note="All packages consistent")
        return
    if _NEEDS_PRIVILEGES.search(combined):
        ctx.skip(CATEGORY, name, "Requires root privileges", note="Run with sudo for package integrity check")
        return

    detail = "\n".join([line for line in combined.splitlines() if line.strip()][:3])
    affected = broken_packages(combined)
    note = "Fix: sudo apt --fix-broken install"
    if affected:
        note += f" | Affected packages: {' '.join(affected)}"

    ctx.suggest("package_fix",
                "Broken packages detected. Fix with: sudo apt --fix-broken install && sudo apt autoremove")
    ctx.record(CATEGORY, name, CheckStatus.FAIL, "Broken packages detected",
               severity=Severity.HIGH, detail=detail, note=note, fix_key="package_fix")


def check_updates(ctx: CheckContext):
    name = "System Updates"
    if not ctx.runner.exists('apt'):
        ctx.skip(CATEGORY, name, "apt not available")
        return

    if not ctx.runner.list_dir(APT_LISTS_DIR):
        ctx.suggest("update_cache", "Package cache empty. Update with: sudo apt update")
        ctx.record(CATEGORY, name, CheckStatus.WARN, "Package cache empty",
                   note="Run: sudo apt update", fix_key="update_cache")
        return

    output = ctx.runner.run(['apt', 'list', '--upgradable'], timeout=ctx.config.probe_timeout * 3)
    if not output.ran:
        ctx.skip(CATEGORY, name, f"Update check did not complete ({output.status.value})")
        return

    upgradable = [line for line in output.lines if '/' in line and 'upgradable' in line]
    security = [line for line in upgradable if 'security' in line.lower()]

    if not upgradable:
        ctx.passed(CATEGORY, name, "System is up to date", note="All packages current")
    elif security:
        sample = " ".join(line.split('/', 1)[0] for line in security[:3])
        ctx.suggest("security_updates",
                    "Security updates available. Install with: sudo apt update && sudo apt upgrade")
        ctx.record(CATEGORY, name, CheckStatus.FAIL,
                   f"{len(upgradable)} total updates ({len(security)} security)",
                   severity=Severity.HIGH,
                   note=f"{len(security)} are security updates: {sample}",
                   fix_key="security_updates")
    else:
        sample = " ".join(line.split('/', 1)[0] for line in upgradable[:3])
        ctx.suggest("regular_updates", "Updates available. Install with: sudo apt update && sudo apt upgrade")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"{len(upgradable)} packages can be updated",
                   note=f"Available updates: {sample}", fix_key="regular_updates")


def check_package_manager(ctx: CheckContext):
    name = "Package Manager"
    locked = (
        ctx.runner.path_exists(DPKG_FRONTEND_LOCK)
        and ctx.runner.exists('fuser')
        and ctx.runner.run(['fuser', DPKG_FRONTEND_LOCK], timeout=ctx.config.probe_timeout).ok
    )
    if locked:
        ctx.record(CATEGORY, name, CheckStatus.WARN, "Package manager locked",
                   note="Another package operation running")
    else:
        ctx.passed(CATEGORY, name, "Package manager available", note="Ready for operations")


def check_snaps(ctx: CheckContext):
    name = "Snap Packages"
    if not ctx.runner.exists('snap'):
        ctx.skip(CATEGORY, name, "Snap not available", note="Snap not installed")
        return

    listing = ctx.runner.run(['snap', 'list'], timeout=ctx.config.probe_timeout)
    snap_count = max(len(listing.lines) - 1, 0) if listing.ok else 0
    if snap_count == 0:
        ctx.passed(CATEGORY, name, "No snap packages installed", note="No snaps to manage", info=True)
        return

    refresh = ctx.runner.run(['snap', 'refresh', '--list'], timeout=ctx.config.smart_timeout)
    if not refresh.ok:
        ctx.record(CATEGORY, name, CheckStatus.WARN, "Cannot check snap updates",
                   note=f"{snap_count} snaps installed, update check failed")
        return

    # "All snaps up to date." goes to stderr; stdout is a table with a header
    pending = refresh.lines[1:]
    if pending:
        names = " ".join(line.split()[0] for line in pending[:3])
        ctx.suggest("snap_updates", "Snap updates available. Update with: sudo snap refresh")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"{len(pending)} snap updates available",
                   note=f"{snap_count} total snaps, pending: {names}", fix_key="snap_updates")
    else:
        ctx.passed(CATEGORY, name, f"{snap_count} snap packages up to date",
                   note="All snap packages updated", info=True)


def run_package_checks(ctx: CheckContext):
    """apt integrity, updates, dpkg lock and snap refreshes."""
    check_integrity(ctx)
    check_updates(ctx)
    check_package_manager(ctx)
    check_snaps(ctx)

"""
Tests for package system checks.

Run: python3 -m pytest tests/test_checks_packages.py -v
"""

from conftest import result_named

from hostcheck.checks.packages import (
    APT_LISTS_DIR,
    DPKG_FRONTEND_LOCK,
    broken_packages,
    check_integrity,
    check_package_manager,
    check_snaps,
    check_updates,
)
from hostcheck.core.diagnostics.models import CheckStatus, Severity

APT_CHECK_BROKEN = """\
Reading package lists...
Building dependency tree...
You might want to run 'apt --fix-broken install' to correct these.
The following packages have unmet dependencies:
 package libfoo1 is not configured yet.
 package bar-utils depends on libfoo1
"""

UPGRADABLE = """\
Listing...
firefox/jammy-updates 119.0+build2 amd64 [upgradable from: 118.0]
openssl/jammy-security 3.0.2-0ubuntu1.12 amd64 [upgradable from: 3.0.2-0ubuntu1.10]
vim/jammy-updates 2:8.2.3995-1ubuntu2.13 amd64 [upgradable from: 2:8.2.3995-1ubuntu2.12]
"""


class TestBrokenPackages:
    """Tests for package name extraction from apt errors."""

    def test_names(self):
        assert broken_packages(APT_CHECK_BROKEN) == ["libfoo1", "bar-utils"]

    def test_limit(self):
        text = "\n".join(f"package pkg{i} broken" for i in range(8))
        assert len(broken_packages(text)) == 5


class TestIntegrity:
    """Tests for apt-get check."""

    def test_no_package_manager(self, context, ledger):
        check_integrity(context)
        assert result_named(ledger, "Package Integrity").status == CheckStatus.SKIP

    def test_clean(self, context, runner, ledger):
        runner.add(['apt-get', 'check'], "Reading package lists...\nBuilding dependency tree...\n")
        check_integrity(context)
        assert result_named(ledger, "Package Integrity").status == CheckStatus.PASS

    def test_falls_back_to_apt(self, context, runner, ledger):
        runner.add(['apt', 'check'], "0 upgraded, 0 newly installed, 0 to remove and 0 not upgraded, 0 broken.\n",
                   returncode=100)
        check_integrity(context)
        assert result_named(ledger, "Package Integrity").status == CheckStatus.PASS

    def test_broken(self, context, runner, ledger):
        runner.add(['apt-get', 'check'], "", returncode=100, stderr=APT_CHECK_BROKEN)

        check_integrity(context)

        result = result_named(ledger, "Package Integrity")
        assert result.status == CheckStatus.FAIL
        assert result.severity == Severity.HIGH
        assert result.detail.splitlines() == APT_CHECK_BROKEN.splitlines()[:3]
        assert "Affected packages: libfoo1 bar-utils" in result.note
        assert "package_fix" in ledger.fix_suggestions

    def test_unprivileged_lock_error_is_skip(self, context, runner, ledger):
        runner.add(['apt-get', 'check'], "", returncode=100,
                   stderr=("E: Could not open lock file /var/lib/dpkg/lock-frontend - open (13: Permission denied)\n"
                           "E: Unable to acquire the dpkg frontend lock (/var/lib/dpkg/lock-frontend), are you root?\n"))

        check_integrity(context)

        result = result_named(ledger, "Package Integrity")
        assert context.is_root is False
        assert result.status == CheckStatus.SKIP
        assert result.message == "Requires root privileges"
        assert ledger.high_issues == []
        assert "package_fix" not in ledger.fix_suggestions

    def test_timeout(self, context, runner, ledger):
        runner.add_timeout(['apt-get', 'check'])
        check_integrity(context)
        assert result_named(ledger, "Package Integrity").status == CheckStatus.SKIP


class TestUpdates:
    """Tests for pending apt updates."""

    def test_no_apt(self, context, ledger):
        check_updates(context)
        assert result_named(ledger, "System Updates").status == CheckStatus.SKIP

    def test_empty_cache(self, context, runner, ledger):
        runner.add_tools(['apt'])
        check_updates(context)
        result = result_named(ledger, "System Updates")
        assert result.status == CheckStatus.WARN
        assert result.fix_key == "update_cache"

    def test_security_updates(self, context, runner, ledger):
        runner.dirs[APT_LISTS_DIR] = ["lock", "partial"]
        runner.add(['apt', 'list', '--upgradable'], UPGRADABLE)

        check_updates(context)

        result = result_named(ledger, "System Updates")
        assert result.status == CheckStatus.FAIL
        assert result.severity == Severity.HIGH
        assert result.message == "3 total updates (1 security)"
        assert result.note == "1 are security updates: openssl"

    def test_regular_updates(self, context, runner, ledger):
        runner.dirs[APT_LISTS_DIR] = ["lock"]
        runner.add(['apt', 'list', '--upgradable'],
                   "\n".join(line for line in UPGRADABLE.splitlines() if 'security' not in line))

        check_updates(context)

        result = result_named(ledger, "System Updates")
        assert result.status == CheckStatus.WARN
        assert result.note == "Available updates: firefox vim"

    def test_up_to_date(self, context, runner, ledger):
        runner.dirs[APT_LISTS_DIR] = ["lock"]
        runner.add(['apt', 'list', '--upgradable'], "Listing...\n")
        check_updates(context)
        assert result_named(ledger, "System Updates").message == "System is up to date"


class TestPackageManager:
    """Tests for the dpkg frontend lock."""

    def test_locked(self, context, runner, ledger):
        runner.paths.add(DPKG_FRONTEND_LOCK)
        runner.add(['fuser', DPKG_FRONTEND_LOCK], " 4242")
        check_package_manager(context)
        assert result_named(ledger, "Package Manager").status == CheckStatus.WARN

    def test_free(self, context, runner, ledger):
        runner.paths.add(DPKG_FRONTEND_LOCK)
        runner.add(['fuser', DPKG_FRONTEND_LOCK], "", returncode=1)
        check_package_manager(context)
        assert result_named(ledger, "Package Manager").status == CheckStatus.PASS


class TestSnaps:
    """Tests for snap refresh checks."""

    SNAP_LIST = "Name  Version  Rev  Tracking  Publisher  Notes\ncore22  20231123  1033  latest/stable  canonical  base\nfirefox  120.0  3358  latest/stable  mozilla  -\n"

    def test_not_installed(self, context, ledger):
        check_snaps(context)
        assert result_named(ledger, "Snap Packages").status == CheckStatus.SKIP

    def test_no_snaps(self, context, runner, ledger):
        runner.add(['snap', 'list'], "", returncode=1, stderr="No snaps are installed yet.")
        check_snaps(context)
        assert result_named(ledger, "Snap Packages").message == "No snap packages installed"

    def test_pending_refresh(self, context, runner, ledger):
        runner.add(['snap', 'list'], self.SNAP_LIST)
        runner.add(['snap', 'refresh', '--list'],
                   "Name     Version  Rev   Size  Publisher  Notes\nfirefox  121.0    3417  250MB mozilla    -\n")

        check_snaps(context)

        result = result_named(ledger, "Snap Packages")
        assert result.status == CheckStatus.WARN
        assert result.note == "2 total snaps, pending: firefox"

    def test_up_to_date(self, context, runner, ledger):
        runner.add(['snap', 'list'], self.SNAP_LIST)
        runner.add(['snap', 'refresh', '--list'], "", stderr="All snaps up to date.")
        check_snaps(context)
        assert result_named(ledger, "Snap Packages").message == "2 snap packages up to date"

    def test_refresh_failed(self, context, runner, ledger):
        runner.add(['snap', 'list'], self.SNAP_LIST)
        runner.add_timeout(['snap', 'refresh', '--list'])
        check_snaps(context)
        assert result_named(ledger, "Snap Packages").message == "Cannot check snap updates"

"""
Tests for boot and hardware checks.

Run: python3 -m pytest tests/test_checks_boot.py -v
"""

from conftest import result_named

from hostcheck.checks.boot import (
    check_boot_errors,
    check_cpu_load,
    check_hardware_inventory,
    check_memory,
    check_temperature,
    read_boot_errors,
    run_boot_checks,
)
from hostcheck.core.diagnostics.models import CheckStatus, Severity

DMESG_LEVEL = ['dmesg', '-T', '--level=err,crit,emerg']

BOOT_ERRORS = """\
[Mon Oct 12 09:00:01 2026] Bluetooth: hci0: Reading supported features failed (-16)
[Mon Oct 12 09:00:02 2026] iwlwifi 0000:00:14.3: firmware: failed to load iwlwifi-8265-36.ucode (-2)
"""


def meminfo(total_kb, available_kb):
    return f"MemTotal:       {total_kb} kB\nMemFree:        1000 kB\nMemAvailable:   {available_kb} kB\n"


class TestReadBootErrors:
    """Tests for the kernel error excerpt."""

    def test_level_filter(self, context, runner):
        runner.add(DMESG_LEVEL, BOOT_ERRORS)
        assert read_boot_errors(context) == BOOT_ERRORS.strip()

    def test_keeps_last_ten_lines(self, context, runner):
        runner.add(DMESG_LEVEL, "\n".join(f"error {i}" for i in range(15)))
        excerpt = read_boot_errors(context).splitlines()
        assert excerpt[0] == "error 5"
        assert len(excerpt) == 10

    def test_keyword_fallback(self, context, runner):
        runner.add(DMESG_LEVEL, "dmesg: unrecognized option", returncode=1)
        runner.add(['dmesg'], "usb 1-1: new device\nata1: failed command: READ\n")
        assert read_boot_errors(context) == "ata1: failed command: READ"

    def test_fallback_keeps_full_log(self, context, runner):
        runner.add(DMESG_LEVEL, "dmesg: unrecognized option", returncode=1)
        runner.add(['dmesg'], "usb 1-1: new device\nata1: failed command: READ\n")

        read_boot_errors(context)
        check_boot_errors(context)

        assert context.kernel_log.startswith("usb 1-1: new device")
        assert runner.call_count(['dmesg']) == 1

    def test_unreadable(self, context, runner):
        runner.add(DMESG_LEVEL, "", returncode=1)
        runner.add(['dmesg'], "dmesg: read kernel buffer failed: Operation not permitted", returncode=1)
        assert read_boot_errors(context) is None


class TestBootErrors:
    """Tests for boot error analysis."""

    def test_no_dmesg(self, context, ledger):
        check_boot_errors(context)
        assert result_named(ledger, "Boot Error Analysis").status == CheckStatus.SKIP

    def test_not_readable(self, context, runner, ledger):
        runner.add(DMESG_LEVEL, "", returncode=1)
        runner.add(['dmesg'], "", returncode=1)
        check_boot_errors(context)
        assert result_named(ledger, "Boot Error Analysis").message == "Kernel log not readable"

    def test_clean_boot(self, context, runner, ledger):
        runner.add(DMESG_LEVEL, "")
        check_boot_errors(context)
        result = result_named(ledger, "Boot Error Analysis")
        assert result.status == CheckStatus.PASS
        assert result.message == "No critical boot errors detected"

    def test_errors_with_detectors(self, context, runner, ledger):
        runner.add(DMESG_LEVEL, BOOT_ERRORS)

        check_boot_errors(context)

        result = result_named(ledger, "Boot Error Analysis")
        assert result.status == CheckStatus.FAIL
        assert result.severity == Severity.HIGH
        assert result.message == "2 hardware errors with driver issues"
        assert "Bluetooth controller issue detected." in result.note
        assert "WiFi firmware issues detected." in result.note
        assert set(ledger.fix_suggestions) == {"bluetooth_fix", "wifi_fix"}
        assert ledger.fix_suggestions["wifi_fix"].startswith("Root Cause: WiFi firmware")
        assert context.boot_log == BOOT_ERRORS.strip()

    def test_errors_without_detector(self, context, runner, ledger):
        runner.add(DMESG_LEVEL, "EXT4-fs error (device sda1): bad block\n")
        check_boot_errors(context)
        result = result_named(ledger, "Boot Error Analysis")
        assert result.note == "Hardware compatibility issues detected"
        assert ledger.fix_suggestions == {}


class TestHardwareInventory:
    """Tests for the hardware inventory check."""

    def test_no_tools(self, context, ledger):
        check_hardware_inventory(context)
        assert result_named(ledger, "Hardware Compatibility").status == CheckStatus.SKIP

    def test_detected_with_driver(self, context, runner, ledger):
        runner.add(['lspci'], "00:14.3 Network controller: Intel Corporation Wireless 8265\n")
        runner.add(['lspci', '-nn'],
                   "00:14.3 Network controller [0280]: Intel Corporation Wireless 8265 [8086:24fd]\n")

        check_hardware_inventory(context)

        result = result_named(ledger, "Hardware Compatibility")
        assert result.status == CheckStatus.PASS
        assert result.note == "Detected: wifi"
        assert ledger.info_items == ["Hardware: Hardware inventory completed"]
        assert ledger.fix_suggestions["wifi_driver"] == "Install drivers: sudo apt install firmware-iwlwifi"

    def test_nothing_matched(self, context, runner, ledger):
        runner.add(['lspci'], "00:00.0 Host bridge: Intel Corporation Xeon\n")
        check_hardware_inventory(context)
        assert result_named(ledger, "Hardware Compatibility").note == "No devices matched"


class TestMemory:
    """Tests for memory usage thresholds."""

    def test_critical(self, context, runner, ledger):
        runner.add_file('/proc/meminfo', meminfo(16000000, 800000))
        check_memory(context)
        result = result_named(ledger, "Memory Usage")
        assert result.status == CheckStatus.FAIL
        assert result.severity == Severity.CRITICAL
        assert result.message == "Critical memory usage: 95.0%"
        assert "memory_fix" in ledger.fix_suggestions

    def test_warning(self, context, runner, ledger):
        runner.add_file('/proc/meminfo', meminfo(16000000, 3200000))
        check_memory(context)
        assert result_named(ledger, "Memory Usage").status == CheckStatus.WARN

    def test_normal(self, context, runner, ledger):
        runner.add_file('/proc/meminfo', meminfo(16000000, 8000000))
        check_memory(context)
        assert result_named(ledger, "Memory Usage").status == CheckStatus.PASS

    def test_missing(self, context, ledger):
        check_memory(context)
        assert result_named(ledger, "Memory Usage").status == CheckStatus.SKIP


class TestCpuLoad:
    """Tests for load relative to core count."""

    def test_overloaded(self, context, runner, ledger):
        runner.add_file('/proc/loadavg', "5.00 4.00 3.00 2/300 1234\n")
        check_cpu_load(context)
        result = result_named(ledger, "CPU Load")
        assert result.status == CheckStatus.FAIL
        assert result.message == "High CPU load: 125.0% of 4 cores"
        assert result.note == "Load avg: 5.00 4.00 3.00"

    def test_elevated(self, context, runner, ledger):
        runner.add_file('/proc/loadavg', "3.20 1.00 1.00 1/200 99\n")
        check_cpu_load(context)
        assert result_named(ledger, "CPU Load").status == CheckStatus.WARN

    def test_normal(self, context, runner, ledger):
        runner.add_file('/proc/loadavg', "0.40 0.30 0.20 1/200 99\n")
        check_cpu_load(context)
        assert result_named(ledger, "CPU Load").status == CheckStatus.PASS


class TestTemperature:
    """Tests for CPU temperature thresholds."""

    ZONE = '/sys/class/thermal/thermal_zone0/temp'

    def test_critical(self, context, runner, ledger):
        runner.add_file(self.ZONE, "90000\n")
        check_temperature(context)
        result = result_named(ledger, "CPU Temperature")
        assert result.severity == Severity.CRITICAL
        assert result.fix_key == "temperature_fix"

    def test_warning(self, context, runner, ledger):
        runner.add_file(self.ZONE, "75000\n")
        check_temperature(context)
        assert result_named(ledger, "CPU Temperature").status == CheckStatus.WARN

    def test_normal(self, context, runner, ledger):
        runner.add_file(self.ZONE, "45000\n")
        check_temperature(context)
        assert result_named(ledger, "CPU Temperature").message == "CPU temperature: 45°C"

    def test_no_reading(self, context, runner, ledger):
        runner.add_file(self.ZONE, "0\n")
        check_temperature(context)
        assert result_named(ledger, "CPU Temperature").status == CheckStatus.SKIP

    def test_no_sensor(self, context, ledger):
        check_temperature(context)
        assert result_named(ledger, "CPU Temperature").status == CheckStatus.SKIP


class TestRunBootChecks:
    """Tests for the whole group on a bare host."""

    def test_one_result_per_check(self, context, ledger):
        run_boot_checks(context)
        assert [r.name for r in ledger.results] == [
            "Boot Error Analysis", "Hardware Compatibility", "Memory Usage", "CPU Load", "CPU Temperature",
        ]

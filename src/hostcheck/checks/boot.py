"""
Boot and hardware checks.

Kernel error analysis with per-subsystem remediation, hardware inventory
with catalog driver hints, memory, CPU load and CPU temperature.
"""

import logging
import re
from typing import Optional

from ..core.diagnostics.models import CheckCategory, CheckStatus, Severity
from ..utils.classifier import detect
from ..utils.parsing import first_field, parse_float, parse_int, round1
from ..utils.probes import ProbeKind
from .base import CheckContext

logger = logging.getLogger(__name__)

CATEGORY = CheckCategory.HARDWARE

BOOT_EXCERPT_LINES = 10
_ERROR_KEYWORDS = re.compile(r'error|critical|emergency|panic|failed|fatal', re.IGNORECASE)

INVENTORY_KINDS = [
    ProbeKind.WIFI,
    ProbeKind.BLUETOOTH,
    ProbeKind.AUDIO,
    ProbeKind.GPU,
    ProbeKind.STORAGE,
]

THERMAL_ZONE = '/sys/class/thermal/thermal_zone0/temp'


def read_boot_errors(ctx: CheckContext) -> Optional[str]:
    """
    Last kernel error lines, or None if the kernel log cannot be read.

    Prefers dmesg's own level filter; older dmesg builds without --level
    fall back to a keyword grep over the full ring buffer.
    """
    timeout = ctx.config.probe_timeout
    output = ctx.runner.run(['dmesg', '-T', '--level=err,crit,emerg'], timeout=timeout)
    if output.ok:
        return "\n".join(output.lines[-BOOT_EXCERPT_LINES:])

    log = read_kernel_log(ctx)
    if log is not None:
        matches = [line for line in log.splitlines() if _ERROR_KEYWORDS.search(line)]
        return "\n".join(matches[-BOOT_EXCERPT_LINES:])

    return None


def read_kernel_log(ctx: CheckContext) -> Optional[str]:
    """Full dmesg output, kept on the context. None if it cannot be read."""
    if ctx.kernel_log is None:
        output = ctx.runner.run(['dmesg'], timeout=ctx.config.probe_timeout)
        if output.ok:
            ctx.kernel_log = output.stdout
    return ctx.kernel_log


def check_boot_errors(ctx: CheckContext):
    name = "Boot Error Analysis"
    if not ctx.runner.exists('dmesg'):
        ctx.skip(CATEGORY, name, "dmesg command not available", note="Unable to check boot messages")
        return

    errors = read_boot_errors(ctx)
    if errors is None:
        ctx.skip(CATEGORY, name, "Kernel log not readable",
                 note="Run with sudo to read kernel messages")
        return

    ctx.boot_log = errors
    read_kernel_log(ctx)
    error_count = len([line for line in errors.splitlines() if line.strip()])
    if error_count == 0:
        ctx.passed(CATEGORY, name, "No critical boot errors detected", note="Clean boot sequence")
        return

    summaries = []
    for detector, excerpt in detect(errors, ctx.catalog.detectors):
        logger.debug(f"Boot detector {detector.key} matched {len(excerpt.splitlines())} line(s)")
        ctx.suggest(detector.key, ctx.resolver.analyze(excerpt))
        if detector.summary:
            summaries.append(detector.summary)

    ctx.record(
        CATEGORY, name, CheckStatus.FAIL,
        f"{error_count} hardware errors with driver issues",
        severity=Severity.HIGH,
        detail=errors,
        note=" ".join(summaries) or "Hardware compatibility issues detected",
    )


def check_hardware_inventory(ctx: CheckContext):
    name = "Hardware Compatibility"
    if not (ctx.runner.exists('lspci') or ctx.runner.exists('lsusb')):
        ctx.skip(CATEGORY, name, "lspci/lsusb not available",
                 note="Install: sudo apt install pciutils usbutils")
        return

    detected = []
    for kind in INVENTORY_KINDS:
        if not ctx.probes.fetch(kind):
            continue
        detected.append(kind.value)
        if kind == ProbeKind.STORAGE:
            continue
        for packages in ctx.resolver.driver_packages(kind):
            ctx.suggest(f"{kind.value}_driver", f"Install drivers: sudo apt install {packages}")

    note = f"Detected: {', '.join(detected)}" if detected else "No devices matched"
    ctx.passed(CATEGORY, name, "Hardware inventory completed", note=note, info=True)


def check_memory(ctx: CheckContext):
    name = "Memory Usage"
    meminfo = ctx.runner.read_file('/proc/meminfo')

    values = {}
    for line in (meminfo or "").splitlines():
        key, _, rest = line.partition(':')
        values[key.strip()] = parse_int(first_field(rest))

    total_kb = values.get('MemTotal', 0)
    available_kb = values.get('MemAvailable', 0)
    if total_kb <= 0 or 'MemAvailable' not in values:
        ctx.skip(CATEGORY, name, "Memory information unavailable")
        return

    used = round1((total_kb - available_kb) / total_kb * 100)
    total_gb = round1(total_kb / 1024 / 1024)
    cfg = ctx.config

    if used > cfg.memory_crit:
        ctx.suggest("memory_fix",
                    "Critical memory usage. 1) Close programs 2) Add swap: sudo fallocate -l 2G /swapfile "
                    "3) Check leaks: ps aux --sort=-%mem | head -10")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"Critical memory usage: {used}%",
                   severity=Severity.CRITICAL, note=f"Total: {total_gb}GB", fix_key="memory_fix")
    elif used > cfg.memory_warn:
        ctx.suggest("memory_warn", "High memory usage. Close unused apps or check: htop")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"High memory usage: {used}%",
                   note=f"Total: {total_gb}GB", fix_key="memory_warn")
    else:
        ctx.passed(CATEGORY, name, f"Memory usage: {used}% of {total_gb}GB",
                   note=f"Total: {total_gb}GB available", info=True)


def check_cpu_load(ctx: CheckContext):
    name = "CPU Load"
    loadavg = ctx.runner.read_file('/proc/loadavg')
    if not loadavg or not loadavg.strip():
        ctx.skip(CATEGORY, name, "Load average unavailable")
        return

    load_1min = parse_float(first_field(loadavg, 0))
    cores = max(ctx.runner.cpu_count(), 1)
    load_pct = round1(load_1min / cores * 100)
    load_avg = " ".join(loadavg.split()[:3])
    cfg = ctx.config

    if load_pct > cfg.load_crit:
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"High CPU load: {load_pct}% of {cores} cores",
                   severity=Severity.HIGH, note=f"Load avg: {load_avg}")
    elif load_pct > cfg.load_warn:
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"Elevated CPU load: {load_pct}% of {cores} cores",
                   note=f"Load avg: {load_avg}")
    else:
        ctx.passed(CATEGORY, name, f"CPU load: {load_pct}% of {cores} cores",
                   note=f"{cores} cores, Load avg: {load_avg}", info=True)


def check_temperature(ctx: CheckContext):
    name = "CPU Temperature"
    raw = ctx.runner.read_file(THERMAL_ZONE)
    if raw is None:
        ctx.skip(CATEGORY, name, "Temperature sensors unavailable", note="No thermal sensors found")
        return

    millidegrees = parse_int(raw)
    if millidegrees <= 0:
        ctx.skip(CATEGORY, name, "Temperature sensor returned no reading")
        return

    celsius = millidegrees // 1000
    cfg = ctx.config

    if celsius > cfg.temp_crit:
        ctx.suggest("temperature_fix",
                    "Critical CPU temperature. 1) Clean dust from heatsinks 2) Improve ventilation "
                    "3) Replace thermal paste 4) Check fan operation")
        ctx.record(CATEGORY, name, CheckStatus.FAIL, f"Critical CPU temperature: {celsius}°C",
                   severity=Severity.CRITICAL, note="Immediate attention required",
                   fix_key="temperature_fix")
    elif celsius > cfg.temp_warn:
        ctx.suggest("temperature_warn", "High CPU temperature. Monitor system load and improve cooling")
        ctx.record(CATEGORY, name, CheckStatus.WARN, f"High CPU temperature: {celsius}°C",
                   note="Monitor system load", fix_key="temperature_warn")
    else:
        ctx.passed(CATEGORY, name, f"CPU temperature: {celsius}°C",
                   note="Normal operating temperature", info=True)


def run_boot_checks(ctx: CheckContext):
    """Boot log, hardware inventory, memory, CPU load and temperature."""
    check_boot_errors(ctx)
    check_hardware_inventory(ctx)
    check_memory(ctx)
    check_cpu_load(ctx)
    check_temperature(ctx)

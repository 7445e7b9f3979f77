"""
Remediation text, kept as data.

FIX_TEMPLATES maps every classifier Category to a FixTemplate. The mapping
is checked for completeness at import time, so adding a Category without a
template fails immediately instead of silently falling through.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .classifier import Category
from .probes import ProbeKind


@dataclass(frozen=True)
class FixTemplate:
    """
    Remediation template for one root cause.

    Attributes:
        root_cause: First line of the rendered fix
        steps: Generic numbered steps
        closing_steps: Steps numbered after any hardware-specific driver steps
        display_probe: Hardware listing shown as "Hardware Detected"
        context_probe: Verbose device excerpt shown as "Hardware Context"
        hardware_probe: Probe whose vendor:device IDs are looked up in the catalog
    """
    root_cause: str
    steps: Tuple[str, ...] = ()
    closing_steps: Tuple[str, ...] = ()
    display_probe: Optional[ProbeKind] = None
    context_probe: Optional[ProbeKind] = None
    hardware_probe: Optional[ProbeKind] = None


DRIVER_STEP = "Install specific driver: sudo apt install {packages}"

BLUETOOTH_TEMPLATE = FixTemplate(
    root_cause="Bluetooth controller firmware/driver issue",
    steps=(
        "Update Bluetooth firmware: sudo apt install bluez-firmware",
        "Reset Bluetooth: sudo systemctl restart bluetooth",
        "Reinstall Bluetooth stack: sudo apt install --reinstall bluez",
    ),
    closing_steps=(
        "Add kernel parameter: btusb.enable_autosuspend=0 to GRUB",
    ),
    display_probe=ProbeKind.BLUETOOTH,
    context_probe=ProbeKind.BLUETOOTH,
    hardware_probe=ProbeKind.BLUETOOTH,
)

TOUCHPAD_TEMPLATE = FixTemplate(
    root_cause="I2C HID touchpad communication error",
    steps=(
        "Install HID drivers: sudo apt install xserver-xorg-input-synaptics",
        "Update kernel: sudo apt upgrade linux-generic",
        "Add kernel parameter: i2c_hid.use_polling_mode=1 to GRUB",
        "Check BIOS settings: Disable 'Fast Boot' and enable 'Legacy USB'",
    ),
    display_probe=ProbeKind.TOUCHPAD,
)

AUDIO_TEMPLATE = FixTemplate(
    root_cause="Audio codec communication timeout/error",
    steps=(
        "Install audio firmware: sudo apt install alsa-firmware-loaders",
        "Reset audio: sudo alsa force-reload",
        "Add model parameter to /etc/modprobe.d/alsa-base.conf\n"
        "   options snd-hda-intel model=auto",
    ),
    display_probe=ProbeKind.AUDIO,
    hardware_probe=ProbeKind.AUDIO,
)

WIFI_TEMPLATE = FixTemplate(
    root_cause="WiFi firmware missing or incompatible",
    steps=(
        "Install WiFi firmware: sudo apt install firmware-iwlwifi firmware-realtek",
        "Check kernel modules: sudo modprobe -r iwlwifi && sudo modprobe iwlwifi",
    ),
    closing_steps=(
        "Check: dmesg | grep -i firmware for specific errors",
    ),
    display_probe=ProbeKind.WIFI,
    hardware_probe=ProbeKind.WIFI,
)

NVIDIA_TEMPLATE = FixTemplate(
    root_cause="NVIDIA GPU driver conflict with nouveau",
    steps=(
        "Install proprietary NVIDIA driver: sudo apt install nvidia-driver-535",
        "Blacklist nouveau driver: echo 'blacklist nouveau' | "
        "sudo tee /etc/modprobe.d/blacklist-nouveau.conf",
        "Update initramfs: sudo update-initramfs -u",
    ),
    closing_steps=(
        "Reboot system: sudo reboot",
    ),
    context_probe=ProbeKind.GPU,
    hardware_probe=ProbeKind.GPU,
)

STORAGE_TEMPLATE = FixTemplate(
    root_cause="Storage device communication error",
    steps=(
        "Check cables and connections",
        "Update storage controller drivers",
        "Check disk health: sudo smartctl -a /dev/sdX",
        "Backup data immediately if disk is failing",
        "Check kernel parameters: add libata.force=noncq to GRUB",
    ),
    display_probe=ProbeKind.STORAGE,
)

THERMAL_TEMPLATE = FixTemplate(
    root_cause="CPU overheating leading to performance throttling",
    steps=(
        "Clean dust from heatsinks and fans",
        "Improve case ventilation",
        "Replace thermal paste on CPU",
        "Check fan operation and replace if necessary",
        "Adjust power settings: sudo apt install cpufrequtils",
        "Monitor temperatures: sudo apt install lm-sensors && sudo sensors-detect",
    ),
)

MEMORY_TEMPLATE = FixTemplate(
    root_cause="Out of Memory condition - system ran out of RAM and swap",
    steps=(
        "Add more physical RAM if possible",
        "Increase swap space: sudo fallocate -l 2G /swapfile",
        "Identify memory-hog processes: ps aux --sort=-%mem | head -10",
        "Adjust swappiness: echo 'vm.swappiness=10' | sudo tee -a /etc/sysctl.conf",
        "Check for memory leaks in applications",
    ),
)

GENERIC_TEMPLATE = FixTemplate(
    root_cause="Generic hardware/driver issue detected",
    steps=(
        "Update system: sudo apt update && sudo apt full-upgrade",
        "Check hardware: lspci -v",
        "Review kernel logs: dmesg | grep -i error",
        "Install firmware: sudo apt install firmware-misc-nonfree",
        "Check Debian documentation for specific hardware",
    ),
)

# Used when no rule matches the diagnostic text at all
FALLBACK_TEMPLATE = FixTemplate(
    root_cause="No specific fix pattern matched. Check hardware compatibility.",
    steps=(
        "Review kernel logs: dmesg | grep -i error",
        "Check hardware: lspci -v",
        "Update system: sudo apt update && sudo apt full-upgrade",
    ),
)

FIX_TEMPLATES: Dict[Category, FixTemplate] = {
    Category.BLUETOOTH_FEATURES_FAILED: BLUETOOTH_TEMPLATE,
    Category.BLUETOOTH_SCO_FAILED: GENERIC_TEMPLATE,
    Category.BLUETOOTH_HCI_TIMEOUT: GENERIC_TEMPLATE,
    Category.AUDIO_SPURIOUS_RESPONSE: AUDIO_TEMPLATE,
    Category.TOUCHPAD_HID_ERROR: TOUCHPAD_TEMPLATE,
    Category.ELAN_TOUCHPAD_ERROR: TOUCHPAD_TEMPLATE,
    Category.WIFI_FIRMWARE_FAILED: WIFI_TEMPLATE,
    Category.GPU_HANG: GENERIC_TEMPLATE,
    Category.NVIDIA_GPU_ERROR: NVIDIA_TEMPLATE,
    Category.STORAGE_ATA_ERROR: STORAGE_TEMPLATE,
    Category.USB_DEVICE_ERROR: GENERIC_TEMPLATE,
    Category.THERMAL_THROTTLING: THERMAL_TEMPLATE,
    Category.CPU_OVERHEAT: THERMAL_TEMPLATE,
    Category.MEMORY_OOM: MEMORY_TEMPLATE,
    Category.JOURNAL_ROTATED: GENERIC_TEMPLATE,
    Category.SERVICE_START_FAILED: GENERIC_TEMPLATE,
    Category.FILESYSTEM_ERROR: GENERIC_TEMPLATE,
}

_missing = [c.value for c in Category if c not in FIX_TEMPLATES]
if _missing:
    raise RuntimeError(f"No fix template for categories: {', '.join(_missing)}")


def template_for(category: Optional[Category]) -> FixTemplate:
    """Template for a category; None gets the fallback template."""
    if category is None:
        return FALLBACK_TEMPLATE
    return FIX_TEMPLATES[category]


# =============================================================================
# Per-check hints
# =============================================================================

def disk_cleanup_hint(mount_point: str) -> str:
    """Cleanup suggestions for a full filesystem."""
    if mount_point == "/":
        return ("1) Clean cache: sudo apt clean && sudo apt autoremove "
                "2) Remove old kernels 3) Clean logs: sudo journalctl --vacuum-time=7d")
    if mount_point.startswith("/home"):
        return "1) Clean user cache: rm -rf ~/.cache/* 2) Check ~/Downloads/ 3) Remove large files"
    return f"1) Check largest dirs: sudo du -h {mount_point} | sort -h | tail -10"


def failed_service_hint(unit: str) -> List[str]:
    """Remediation lines for a failed systemd unit."""
    if 'bluetooth' in unit:
        return [
            "Fix: sudo systemctl restart bluetooth && sudo systemctl enable bluetooth",
            "If persistent: sudo apt install --reinstall bluez",
        ]
    if 'network' in unit.lower():
        return [
            "Fix: sudo systemctl restart NetworkManager",
            "Check config: sudo journalctl -u NetworkManager --since '5 minutes ago'",
        ]
    if unit.startswith('user@'):
        user_id = ''.join(ch for ch in unit.split('@', 1)[1] if ch.isdigit())
        return [f"Fix: sudo loginctl terminate-user {user_id}"]
    return [
        f"Generic fix: sudo systemctl restart {unit}",
        f"Check status: sudo systemctl status {unit}",
    ]


# =============================================================================
# Report sections
# =============================================================================

MAINTENANCE_CHECKLIST = [
    ("Run system updates", "sudo apt update && sudo apt upgrade"),
    ("Clean package cache", "sudo apt autoremove && sudo apt clean"),
    ("Check disk space", "df -h"),
    ("Review system logs", "sudo journalctl -p 3 -b"),
    ("Update firmware", "sudo apt install firmware-linux firmware-linux-nonfree"),
    ("Restart failed services", "sudo systemctl restart [service]"),
]

EMERGENCY_COMMANDS = [
    ("Force filesystem check", "sudo fsck -f /dev/[device]"),
    ("Emergency mode", "sudo systemctl rescue"),
    ("Safe reboot", "sudo systemctl reboot"),
    ("Check hardware errors", "sudo dmesg | grep -i error"),
]


_ELAN_TOUCHPAD = re.compile(r'i2c_hid.*elan', re.IGNORECASE)


def hardware_recommendations(inventory: Dict[str, str], kernel_log: str,
                             alternatives: Dict[str, str]) -> List[Tuple[str, List[str]]]:
    """
    Hardware-specific advice for devices present on this host.

    Args:
        inventory: ProbeCollector.inventory() output
        kernel_log: Full kernel log (or the boot error excerpt when that is all there is)
        alternatives: catalog package_alternatives

    Returns:
        List of (title, lines)
    """
    sections = []
    gpu = inventory.get(ProbeKind.GPU.value, "")
    bluetooth = inventory.get(ProbeKind.BLUETOOTH.value, "")
    wifi = inventory.get(ProbeKind.WIFI.value, "")

    if 'nvidia' in gpu.lower():
        sections.append(("NVIDIA Graphics", [
            "Install proprietary driver: sudo apt install "
            + alternatives.get('nvidia-graphics', 'nvidia-driver'),
            "Blacklist nouveau: sudo bash -c 'echo \"blacklist nouveau\" > "
            "/etc/modprobe.d/blacklist-nouveau.conf'",
            "Update initramfs: sudo update-initramfs -u",
        ]))

    if bluetooth:
        sections.append(("Bluetooth Hardware", [
            "Install firmware: sudo apt install " + alternatives.get('bluetooth', 'bluez-firmware'),
            "Add kernel parameter: btusb.enable_autosuspend=0 to "
            "GRUB_CMDLINE_LINUX_DEFAULT in /etc/default/grub",
            "Update GRUB: sudo update-grub",
        ]))

    if kernel_log and _ELAN_TOUCHPAD.search(kernel_log):
        sections.append(("ELAN Touchpad", [
            "Install drivers: sudo apt install "
            + alternatives.get('touchpad', 'xserver-xorg-input-synaptics'),
            "Add kernel parameter: i2c_hid.use_polling_mode=1 to GRUB_CMDLINE_LINUX_DEFAULT",
            "Update GRUB: sudo update-grub",
        ]))

    if wifi:
        packages = " ".join(
            alternatives.get(key, '') for key in ('intel-wifi', 'realtek-wifi')
        ).strip() or "firmware-iwlwifi firmware-realtek"
        sections.append(("Network Hardware", [
            f"Update drivers: sudo apt install {packages}",
            "Check status: sudo dmesg | grep -i firmware",
        ]))

    return sections

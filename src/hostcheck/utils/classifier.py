"""
Kernel/log text classification

Routes diagnostic text into a closed set of root-cause categories using an
explicitly ordered rule list. First matching rule wins, so the rule order
in the catalog is the precedence order.

Boot logs are handled differently: several unrelated problems show up in
the same dmesg excerpt, so `detect()` applies every boot detector
independently and hands each one only the lines it matched.
"""

import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)


class Category(Enum):
    """Root-cause tags produced by the classifier."""
    BLUETOOTH_FEATURES_FAILED = "bluetooth_features_failed"
    BLUETOOTH_SCO_FAILED = "bluetooth_sco_failed"
    BLUETOOTH_HCI_TIMEOUT = "bluetooth_hci_timeout"
    AUDIO_SPURIOUS_RESPONSE = "audio_spurious_response"
    TOUCHPAD_HID_ERROR = "touchpad_hid_error"
    ELAN_TOUCHPAD_ERROR = "elan_touchpad_error"
    WIFI_FIRMWARE_FAILED = "wifi_firmware_failed"
    GPU_HANG = "gpu_hang"
    NVIDIA_GPU_ERROR = "nvidia_gpu_error"
    STORAGE_ATA_ERROR = "storage_ata_error"
    USB_DEVICE_ERROR = "usb_device_error"
    THERMAL_THROTTLING = "thermal_throttling"
    CPU_OVERHEAT = "cpu_overheat"
    MEMORY_OOM = "memory_oom"
    JOURNAL_ROTATED = "journal_rotated"
    SERVICE_START_FAILED = "service_start_failed"
    FILESYSTEM_ERROR = "filesystem_error"


def compile_pattern(pattern: str) -> Pattern:
    """Compile a catalog regex case-insensitively."""
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class ClassificationRule:
    """A single pattern -> category rule."""
    pattern: Pattern
    category: Category

    @classmethod
    def from_strings(cls, pattern: str, category: str) -> 'ClassificationRule':
        return cls(pattern=compile_pattern(pattern), category=Category(category))

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))


@dataclass(frozen=True)
class BootDetector:
    """
    A boot-log sub-detector.

    Attributes:
        key: Fix-suggestion key written when the detector fires (e.g. "wifi_fix")
        pattern: Trigger regex applied line by line
        summary: One-line note shown under the boot error result
    """
    key: str
    pattern: Pattern
    summary: str

    def excerpt(self, text: str) -> str:
        """Lines of text that trigger this detector."""
        return "\n".join(line for line in text.splitlines() if self.pattern.search(line))


class RuleClassifier:
    """Ordered first-match classifier."""

    def __init__(self, rules: Iterable[ClassificationRule]):
        self.rules: List[ClassificationRule] = list(rules)

    def classify(self, text: Optional[str]) -> Optional[Category]:
        """Category of the first rule matching text, or None."""
        if not text:
            return None
        for rule in self.rules:
            if rule.matches(text):
                logger.debug(f"Classified as {rule.category.value} by /{rule.pattern.pattern}/")
                return rule.category
        return None


def detect(text: Optional[str], detectors: Iterable[BootDetector]) -> List[Tuple[BootDetector, str]]:
    """Apply every detector to text; return (detector, matched lines) for each hit."""
    if not text:
        return []
    hits = []
    for detector in detectors:
        excerpt = detector.excerpt(text)
        if excerpt:
            hits.append((detector, excerpt))
    return hits

"""
Tests for fix templates, per-check hints and hardware recommendations.

Run: python3 -m pytest tests/test_remediation.py -v
"""

from hostcheck.utils.classifier import Category
from hostcheck.utils.remediation import (
    FALLBACK_TEMPLATE,
    FIX_TEMPLATES,
    TOUCHPAD_TEMPLATE,
    disk_cleanup_hint,
    failed_service_hint,
    hardware_recommendations,
    template_for,
)


class TestTemplates:
    """Tests for the category -> template mapping."""

    def test_every_category_has_template(self):
        for category in Category:
            assert category in FIX_TEMPLATES

    def test_every_template_has_steps(self):
        for template in FIX_TEMPLATES.values():
            assert template.root_cause
            assert template.steps

    def test_none_is_fallback(self):
        assert template_for(None) is FALLBACK_TEMPLATE

    def test_touchpad_variants_share_template(self):
        assert template_for(Category.ELAN_TOUCHPAD_ERROR) is TOUCHPAD_TEMPLATE
        assert template_for(Category.TOUCHPAD_HID_ERROR) is TOUCHPAD_TEMPLATE


class TestDiskCleanupHint:
    """Tests for mount-specific cleanup advice."""

    def test_root(self):
        assert "apt clean" in disk_cleanup_hint("/")

    def test_home(self):
        assert "~/.cache" in disk_cleanup_hint("/home")

    def test_other(self):
        assert "sudo du -h /var/lib/docker" in disk_cleanup_hint("/var/lib/docker")


class TestFailedServiceHint:
    """Tests for per-unit service advice."""

    def test_bluetooth(self):
        assert "restart bluetooth" in failed_service_hint("bluetooth.service")[0]

    def test_network(self):
        assert "NetworkManager" in failed_service_hint("NetworkManager-wait-online.service")[0]

    def test_user_session(self):
        assert failed_service_hint("user@1000.service") == ["Fix: sudo loginctl terminate-user 1000"]

    def test_generic(self):
        hint = failed_service_hint("cups.service")
        assert hint[0] == "Generic fix: sudo systemctl restart cups.service"
        assert len(hint) == 2


class TestHardwareRecommendations:
    """Tests for inventory-driven recommendation sections."""

    def test_empty_inventory(self):
        assert hardware_recommendations({}, "", {}) == []

    def test_nvidia(self):
        sections = hardware_recommendations(
            {"gpu": "01:00.0 VGA compatible controller: NVIDIA Corporation TU117"}, "",
            {"nvidia-graphics": "nvidia-driver firmware-misc-nonfree"},
        )
        title, lines = sections[0]
        assert title == "NVIDIA Graphics"
        assert lines[0] == "Install proprietary driver: sudo apt install nvidia-driver firmware-misc-nonfree"

    def test_intel_gpu_has_no_section(self):
        assert hardware_recommendations({"gpu": "00:02.0 VGA: Intel UHD"}, "", {}) == []

    def test_elan_touchpad_from_boot_log(self):
        sections = hardware_recommendations(
            {}, "i2c_hid_acpi i2c-ELAN0001:00: incorrect report", {},
        )
        assert [title for title, _ in sections] == ["ELAN Touchpad"]

    def test_elan_touchpad_from_informational_line(self):
        kernel_log = ("usb 1-1: new high-speed USB device\n"
                      "i2c_hid_acpi i2c-ELAN0001:00: using polling\n")
        assert [title for title, _ in hardware_recommendations({}, kernel_log, {})] == ["ELAN Touchpad"]

    def test_elan_match_stays_on_one_line(self):
        kernel_log = "i2c_hid_acpi i2c-SYNA7DB5:01: incorrect report\nElan USB keyboard attached\n"
        assert hardware_recommendations({}, kernel_log, {}) == []

    def test_order(self):
        inventory = {
            "wifi": "00:14.3 Network controller: Intel Wireless",
            "bluetooth": "Bus 001 Device 003: ID 8087:0a2b Intel Bluetooth",
        }
        titles = [title for title, _ in hardware_recommendations(inventory, "", {})]
        assert titles == ["Bluetooth Hardware", "Network Hardware"]

    def test_wifi_default_packages(self):
        _, lines = hardware_recommendations({"wifi": "Wireless"}, "", {})[0]
        assert "firmware-iwlwifi firmware-realtek" in lines[0]

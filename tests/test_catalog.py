"""
Tests for the fix catalog loader.

Run: python3 -m pytest tests/test_catalog.py -v
"""

import pytest

from hostcheck.utils.catalog import CatalogError, load_catalog, parse_catalog
from hostcheck.utils.classifier import Category


class TestBundledCatalog:
    """Tests for data/catalog.yaml."""

    def test_loads(self, catalog):
        assert catalog.hardware_drivers
        assert catalog.rules
        assert [d.key for d in catalog.detectors] == [
            "bluetooth_fix", "touchpad_fix", "audio_fix", "wifi_fix", "nvidia_fix",
        ]

    def test_known_wifi_id(self, catalog):
        assert catalog.packages_for("8086:24fd") == "firmware-iwlwifi"
        assert catalog.packages_for("8086:24FD") == "firmware-iwlwifi"

    def test_unknown_id(self, catalog):
        assert catalog.packages_for("ffff:0000") is None

    def test_every_rule_has_a_category(self, catalog):
        assert all(isinstance(rule.category, Category) for rule in catalog.rules)

    def test_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog.hardware_drivers["dead:beef"] = "x"


class TestParseCatalog:
    """Tests for catalog validation."""

    def test_empty_catalog(self):
        catalog = parse_catalog({})
        assert catalog.rules == ()
        assert catalog.classifier().classify("anything") is None

    def test_rules_keep_order(self):
        catalog = parse_catalog({"error_patterns": [
            {"pattern": "b", "category": "gpu_hang"},
            {"pattern": "a", "category": "memory_oom"},
        ]})
        assert [r.category for r in catalog.rules] == [Category.GPU_HANG, Category.MEMORY_OOM]

    def test_invalid_hardware_id(self):
        with pytest.raises(CatalogError):
            parse_catalog({"hardware_drivers": {"8086-24fd": "firmware-iwlwifi"}})

    def test_unknown_category(self):
        with pytest.raises(CatalogError):
            parse_catalog({"error_patterns": [{"pattern": "x", "category": "nope"}]})

    def test_bad_regex(self):
        with pytest.raises(CatalogError):
            parse_catalog({"error_patterns": [{"pattern": "(unclosed", "category": "gpu_hang"}]})

    def test_rules_must_be_a_list(self):
        with pytest.raises(CatalogError):
            parse_catalog({"error_patterns": {"x": "gpu_hang"}})


class TestLoadCatalog:
    """Tests for load_catalog file handling."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("error_patterns: [unclosed\n")
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_custom_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text('hardware_drivers:\n  "abcd:1234": some-firmware\n')
        assert load_catalog(path).packages_for("abcd:1234") == "some-firmware"

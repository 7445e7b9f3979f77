"""
Fix catalog loader

The catalog is static configuration data: hardware ID -> package tables,
the ordered error rule list and the boot detectors. It is loaded once at
startup and treated as immutable afterwards.

Usage:
    from hostcheck.utils.catalog import load_catalog
    catalog = load_catalog()                 # bundled data/catalog.yaml
    catalog = load_catalog('/etc/hostcheck/catalog.yaml')
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .classifier import BootDetector, ClassificationRule, RuleClassifier, compile_pattern

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / 'data' / 'catalog.yaml'

_HARDWARE_ID = re.compile(r'^[0-9a-f]{4}:[0-9a-f]{4}$')


class CatalogError(Exception):
    """Raised when the fix catalog cannot be loaded or is invalid."""


@dataclass(frozen=True)
class FixCatalog:
    """Read-only catalog data."""
    hardware_drivers: Mapping[str, str] = field(default_factory=dict)
    rules: Tuple[ClassificationRule, ...] = ()
    detectors: Tuple[BootDetector, ...] = ()
    package_alternatives: Mapping[str, str] = field(default_factory=dict)

    def packages_for(self, hardware_id: str) -> Optional[str]:
        """Package set recommended for a vendor:device identifier."""
        return self.hardware_drivers.get(hardware_id.lower())

    def classifier(self) -> RuleClassifier:
        return RuleClassifier(self.rules)


def _parse_drivers(raw) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise CatalogError("hardware_drivers must be a mapping")
    drivers = {}
    for hw_id, packages in raw.items():
        key = str(hw_id).strip().lower()
        if not _HARDWARE_ID.match(key):
            raise CatalogError(f"Invalid hardware id: {hw_id!r}")
        if not packages or not str(packages).strip():
            raise CatalogError(f"No packages listed for {key}")
        drivers[key] = " ".join(str(packages).split())
    return drivers


def _parse_rules(raw) -> List[ClassificationRule]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CatalogError("error_patterns must be an ordered list")
    rules = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or 'pattern' not in entry or 'category' not in entry:
            raise CatalogError(f"error_patterns[{i}] needs 'pattern' and 'category'")
        try:
            rules.append(ClassificationRule.from_strings(entry['pattern'], entry['category']))
        except re.error as e:
            raise CatalogError(f"error_patterns[{i}]: bad regex: {e}") from e
        except ValueError:
            raise CatalogError(f"error_patterns[{i}]: unknown category {entry['category']!r}") from None
    return rules


def _parse_detectors(raw) -> List[BootDetector]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CatalogError("boot_detectors must be an ordered list")
    detectors = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or not entry.get('key') or not entry.get('pattern'):
            raise CatalogError(f"boot_detectors[{i}] needs 'key' and 'pattern'")
        try:
            pattern = compile_pattern(entry['pattern'])
        except re.error as e:
            raise CatalogError(f"boot_detectors[{i}]: bad regex: {e}") from e
        detectors.append(BootDetector(
            key=str(entry['key']),
            pattern=pattern,
            summary=str(entry.get('summary', '')),
        ))
    return detectors


def parse_catalog(data) -> FixCatalog:
    """Build a FixCatalog from already-parsed YAML data."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CatalogError("Catalog root must be a mapping")

    alternatives = data.get('package_alternatives') or {}
    if not isinstance(alternatives, dict):
        raise CatalogError("package_alternatives must be a mapping")

    return FixCatalog(
        hardware_drivers=MappingProxyType(_parse_drivers(data.get('hardware_drivers'))),
        rules=tuple(_parse_rules(data.get('error_patterns'))),
        detectors=tuple(_parse_detectors(data.get('boot_detectors'))),
        package_alternatives=MappingProxyType(
            {str(k): " ".join(str(v).split()) for k, v in alternatives.items()}
        ),
    )


def load_catalog(path: Optional[Union[str, Path]] = None) -> FixCatalog:
    """Load and validate a catalog YAML file (bundled catalog by default)."""
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise CatalogError(f"Catalog not found: {catalog_path}") from None
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid catalog YAML in {catalog_path}: {e}") from e
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {catalog_path}: {e}") from e

    catalog = parse_catalog(data)
    logger.debug(
        f"Loaded catalog {catalog_path}: {len(catalog.hardware_drivers)} hardware ids, "
        f"{len(catalog.rules)} rules, {len(catalog.detectors)} detectors"
    )
    return catalog

"""
Hardware-aware remediation.

Turns a root-cause Category into fix text, adding one driver step for each
detected vendor:device ID that the catalog knows about. Unknown hardware is
not an error: the generic template steps are always present.
"""

import logging
from typing import List, Optional, Union

from .catalog import FixCatalog
from .classifier import Category, RuleClassifier
from .probes import ProbeCollector, ProbeKind, extract_hardware_ids
from .remediation import DRIVER_STEP, template_for

logger = logging.getLogger(__name__)

__all__ = ['HardwareResolver', 'extract_hardware_ids']


class HardwareResolver:
    """Renders fix templates with catalog driver lookups."""

    def __init__(self, catalog: FixCatalog, probes: ProbeCollector,
                 classifier: Optional[RuleClassifier] = None):
        self.catalog = catalog
        self.probes = probes
        self.classifier = classifier or catalog.classifier()

    def driver_packages(self, kind: Union[ProbeKind, str]) -> List[str]:
        """Catalog package sets for the hardware IDs found for a probe kind."""
        packages = []
        for hw_id in self.probes.hardware_ids(kind):
            found = self.catalog.packages_for(hw_id)
            if found:
                logger.debug(f"Catalog hit {hw_id} -> {found}")
                if found not in packages:
                    packages.append(found)
        return packages

    def resolve_fixes(self, category: Optional[Category]) -> str:
        """Multi-line remediation text for a category (None = fallback)."""
        template = template_for(category)
        lines = [f"Root Cause: {template.root_cause}"]

        if template.display_probe is not None:
            lines.append(f"Hardware Detected: {self.probes.fetch(template.display_probe)}")
        if template.context_probe is not None:
            lines.append(f"Hardware Context: {self.probes.context(template.context_probe)}")

        steps = list(template.steps)
        if template.hardware_probe is not None:
            steps.extend(
                DRIVER_STEP.format(packages=packages)
                for packages in self.driver_packages(template.hardware_probe)
            )
        steps.extend(template.closing_steps)

        lines.append("Recommended Fixes:")
        lines.extend(f"{i}. {step}" for i, step in enumerate(steps, 1))
        return "\n".join(lines)

    def analyze(self, text: Optional[str]) -> str:
        """Classify diagnostic text and render the matching remediation."""
        return self.resolve_fixes(self.classifier.classify(text))

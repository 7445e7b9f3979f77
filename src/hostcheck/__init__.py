"""
hostcheck - Linux host health diagnostics

Runs a fixed battery of read-only checks (boot log, hardware, storage,
packages, services, network, security, uptime), scores the host and
prints prioritized, hardware-aware remediation steps.
"""

from .__version__ import __version__

__all__ = ['__version__']

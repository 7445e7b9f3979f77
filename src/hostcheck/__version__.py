"""Version information for hostcheck"""

__version__ = "5.1.0"
__version_info__ = (5, 1, 0)
__release_date__ = "2026-10-17"


def get_full_version():
    """Get version with release date"""
    return f"{__version__} ({__release_date__})"

"""Terminal rendering for hostcheck reports."""

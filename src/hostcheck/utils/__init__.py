"""Host probing, classification and remediation helpers."""

"""hostcheck core: diagnostic models, ledger, scoring and the run engine."""

"""Download request ledger and release workflow."""

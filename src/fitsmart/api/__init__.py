"""HTTP API for the FitSmart auditor."""

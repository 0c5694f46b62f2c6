"""Operational command-line scripts (run with `python -m venuedir.scripts.<name>`)."""

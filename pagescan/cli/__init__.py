"""Command line interface for PageScan."""

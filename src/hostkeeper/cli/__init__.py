"""Command-line interface for hostkeeper."""

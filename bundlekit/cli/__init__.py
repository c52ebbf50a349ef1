"""Command-line interface for bundlekit."""

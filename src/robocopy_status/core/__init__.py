"""Core option handling, output parsing and process execution."""

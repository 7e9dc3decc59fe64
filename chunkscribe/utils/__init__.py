"""Shared utilities: configuration constants, logging, cancellation, files."""

"""Integration tests for source adapters."""

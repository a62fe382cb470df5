"""Unit tests for core model logic."""

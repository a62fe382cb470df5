"""Fake implementations of core ports for testing.

- FakeSourcePort: In-memory persistence that records every call
"""

from .source import FakeSourcePort

__all__ = ["FakeSourcePort"]

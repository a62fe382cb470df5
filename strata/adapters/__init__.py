"""External adapters for strata.

Adapter Organization:

- source/: Storage backends implementing SourcePort (memory, SQLite,
  PostgreSQL)
"""

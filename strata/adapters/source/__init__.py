"""Source adapters for model persistence and querying.

Implementations support multiple backends:
- Memory (in-process, no persistence, used by tests and prototypes)
- SQLite (zero-config, single-file)
- PostgreSQL (distributed, scalable)
"""

"""Test suite for strata.

Organized into three categories:

1. core/: Unit tests for the model layer
   - Minimal dependencies, fast execution
   - Uses the in-memory fake source

2. adapters/: Integration tests for source adapters
   - Runs the record lifecycle suite against every available backend
   - Validates SQL generation and row handling

3. fakes/: SourcePort implementation for testing
   - Records every call for assertions
"""

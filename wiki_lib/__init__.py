"""Shared library for the Balatro mod wiki tool.

This package contains the catalog pipeline used by the CLI:
- fetch.py: Network fetching helpers
- parse.py: Category listing and mod page parsing
- merge.py: Building a database from scrape results
- refresh.py: Staleness checks and the concurrent refresh
- cache.py: Local JSON cache
- query.py: Browse, search and lookup
"""

# No exports needed - import directly from submodules
__all__ = []

"""
Trip Journal - Three-layer client for the Trip Journal backend.

Layers:
- core: Raw types, HTTP client, credential stores and sessions
- sdk: High-level JournalClient with one operation group per resource
- cli: Command-line interface
"""

from trip_journal.sdk import JournalClient

__version__ = "0.1.0"
__all__ = ["JournalClient"]

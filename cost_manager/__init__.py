"""
Cost Manager - Core Package

Persistence-and-reporting engine for recording cost entries and
producing currency-normalized monthly reports.

DESIGN PRINCIPLES:
1. Entries are append-only - the core never edits or deletes them
2. Fail early, fail visibly
3. No silent substitutions (no default rates, no partial reports)
4. The rates cache is owned by a client instance, never global
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Cost Manager Team"

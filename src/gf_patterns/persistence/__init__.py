"""
Persistence package exposing the file-per-pattern JSON store.
"""

from .store import JsonPatternStore, PatternListing, validate_name

__all__ = ["JsonPatternStore", "PatternListing", "validate_name"]

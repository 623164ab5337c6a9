"""
StoreFinder.

Locates the stores nearest to a map viewport, filtered by required
attributes, and keeps a map view and a side panel in sync.
"""

__version__ = "0.1.0"

"""
Core Package.

Domain types (attributes, locations, geometry), the observable property
store, the map platform abstraction, protocols and configuration.
"""

"""
CLI Package.

Command line tools for querying store data sets.
"""

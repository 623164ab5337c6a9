"""
Services Package.

Data feeds, record ingestion, HTTP-backed geocoding and routing, and the
headless map used outside a GUI.
"""

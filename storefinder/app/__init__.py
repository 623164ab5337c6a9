"""
Application Package.

The ViewController and PanelController that drive the map and side panel.
"""

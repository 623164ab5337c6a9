"""
Application Constants.
Stores property names, default values and display markup.
"""

# Store property names shared between the view and the panel
PROP_LOCATIONS = "locations"
PROP_SELECTED_LOCATION = "selectedLocation"
PROP_FEATURE_FILTER = "featureFilter"
PROP_UPDATE_ON_PAN = "updateOnPan"
PROP_STATUS_MESSAGE = "statusMessage"

# List rendering
MAX_LIST_ITEMS = 10
NO_STORES_HTML = '<li class="no-stores">There are no places in this area.</li>'
NO_STORES_IN_VIEW_HTML = (
    '<li class="no-stores">There are no places in this area. However, places '
    "closest to you are listed below.</li>"
)

# Zoom levels
GEOLOCATION_ZOOM = 11
GEOCODE_ZOOM = 13
ZOOM_HERE_ZOOM = 16

# Geolocation request limits
GEOLOCATION_MAX_AGE_MS = 60 * 1000
GEOLOCATION_TIMEOUT_MS = 10 * 1000

# Status Messages
STATUS_LOOKUP_FAILED = "Could not find '{query}'."
STATUS_DIRECTIONS_FAILED = "No route found to {title}."

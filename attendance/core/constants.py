"""Application constants.

This module contains magic strings and numbers used throughout the engine.
Values that operators are expected to tune live in attendance.core.config.Settings
and only take their defaults from here.
"""

# Geofence
# Mean Earth radius used by the Haversine distance (meters)
EARTH_RADIUS_METERS = 6371000.0
# Radius given to new sessions when none is configured
DEFAULT_GEOFENCE_RADIUS_METERS = 100
# Search radius for the nearby-sessions query
DEFAULT_NEARBY_RADIUS_METERS = 5000

# Check-in tokens
# Payload is "{session_id}:{expiry}" with the expiry in this format
TOKEN_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
TOKEN_PAYLOAD_SEPARATOR = ":"
DEFAULT_TOKEN_TTL_HOURS = 24
# Fernet tokens for short payloads are ~120 chars of URL-safe base64
MAX_TOKEN_LENGTH = 500

# QR code images
QR_BOX_SIZE = 10
QR_BORDER = 4

# Late arrivals
DEFAULT_LATE_CUTOFF_MINUTES = 30

# Recurring sessions
# Templates are expanded this many days past today by the daily job
DEFAULT_DAYS_AHEAD = 7
MAX_RECURRENCE_PATTERN_LENGTH = 100

# Free text limits
MAX_SESSION_NAME_LENGTH = 200
MAX_DEVICE_INFO_LENGTH = 500

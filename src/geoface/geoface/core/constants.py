"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

GEOLOCATION_TIMEOUT_SECONDS = 10.0
GEOLOCATION_MAXIMUM_AGE_SECONDS = 0

DEFAULT_VERIFIER_TIMEOUT_SECONDS = 30.0
DEFAULT_NOTIFICATION_TIMEOUT_SECONDS = 10.0

# Request body cap; a base64 camera frame is well under this.
DEFAULT_MAX_CONTENT_LENGTH = 8 * 1024 * 1024

DEFAULT_SCHOOL_NAME = "Sekolah Digital Indonesia"
# Monas, Jakarta
DEFAULT_SCHOOL_LAT = -6.175392
DEFAULT_SCHOOL_LNG = 106.827153
DEFAULT_RADIUS_METERS = 200.0
DEFAULT_START_TIME = "07:00"
DEFAULT_END_TIME = "15:00"
DEFAULT_NOTIFICATION_TEMPLATE = (
    "Hello, this is to inform you that {student_name} has arrived at {school_name} at {time} on {date}."
)

SELFIE_UNAVAILABLE_NOTE = "AI Verification unavailable, accepted by default."
SELFIE_PENDING_NOTE = "AI Verification unavailable, awaiting manual review."

MSG_PERMISSIONS_DENIED = (
    "Access denied. Please allow Camera, Microphone, and Location permissions in your browser settings to continue."
)
MSG_ID_UNREADABLE = "Could not read ID card. Please try again or use manual entry."
MSG_ID_SERVICE_ERROR = "AI Service error. Please try again or use manual entry."
MSG_NO_FRAME = "No image was captured. Please try again."
MSG_LOCATION_FAILED = "Unable to retrieve your location. Please ensure GPS is enabled."
MSG_SAVE_FAILED = "Your check-in could not be saved. Please start again or contact the administrator."

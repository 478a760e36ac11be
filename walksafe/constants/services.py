# walksafe/constants/services.py

class ServiceConstants:
    """Shared endpoints and defaults for the external services."""

    OSRM_BASE_URL = "https://router.project-osrm.org"
    OSRM_PROFILE = "walking"
    REQUEST_TIMEOUT_SEC = 15

    GEMINI_MODEL = "gemini-2.5-flash"

    FIREBASE_PINS_PATH = "pins"
    LOCAL_PIN_STORE_PATH = "safe_walk_pins_db.json"

    # San Francisco, used when the client does not send a location
    DEFAULT_CENTER_LAT = 37.7749
    DEFAULT_CENTER_LNG = -122.4194

# walksafe/pin_store/exceptions.py

class PinStoreError(Exception):
    """Base exception for hazard collection failures."""
    pass

class StoreConfigurationError(PinStoreError):
    """Raised when a backend cannot be set up from the given configuration."""
    pass

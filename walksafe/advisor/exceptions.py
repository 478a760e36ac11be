# walksafe/advisor/exceptions.py

class AdvisorError(Exception):
    """Base exception for generative-service errors."""
    pass

class AdvisorUnavailable(AdvisorError):
    """Raised when the advisor was built without an API key."""
    pass

class MalformedReply(AdvisorError):
    """Raised when the model's reply cannot be parsed into the requested shape."""
    pass

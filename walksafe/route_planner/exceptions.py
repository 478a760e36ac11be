# walksafe/route_planner/exceptions.py

class RoutePlannerError(Exception):
    """Base exception for route calculation errors."""
    pass

class NoRouteFoundError(RoutePlannerError):
    """Raised when the routing provider has no direct path between the endpoints."""
    pass

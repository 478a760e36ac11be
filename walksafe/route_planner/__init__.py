# walksafe/route_planner/__init__.py
"""
Initializes the route_planner module, defining its public API.

This file makes the core components of the planner directly accessible
to client modules, simplifying imports and hiding the internal structure.
"""
# Core logic classes from core.py
from .core import SafeRoutePlanner
from .osrm_handler import OSRMRouteHandler

# Public data models from data_models.py
from .data_models import Coordinate, SafetyLevel, HazardPin, RawRoute, CandidateRoute, RouteResult
from .exceptions import RoutePlannerError, NoRouteFoundError

# Expose key utility functions as part of the public API
from .utils.coordinates import haversine_distance_m, calculate_bearing, get_destination_point
from .utils.conflicts import find_route_conflicts
from .utils.formatting import format_duration

# walksafe/route_planner/constants.py

class RouteConstants:
    EARTH_RADIUS_M: float = 6371000.0

    # Conflict detection radii
    DANGER_THRESHOLD_M: float = 150.0
    IGNORE_TERMINAL_DISTANCE_M: float = 80.0

    # One avoidable danger zone always outweighs any realistic duration gain.
    CONFLICT_PENALTY: float = 1_000_000.0

    # Perpendicular detour offsets around the focus hazard, in meters.
    DETOUR_OFFSETS_M = (300, 600, 1000, 1500)
    DETOUR_ANGLE_DEG: float = 90.0

    # Walking buffer for crossings and signals
    DURATION_BUFFER: float = 1.2

    DIRECT_ROUTE_TYPE = "direct"
    NO_ROUTE_MESSAGE = "Could not calculate safe route. Please check your internet connection."

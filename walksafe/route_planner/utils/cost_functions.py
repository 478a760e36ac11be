# walksafe/route_planner/utils/cost_functions.py
from ..constants import RouteConstants

def calculate_route_score(conflict_count: int, duration_s: float) -> float:
    """Lower is better. Conflicts dominate; duration only breaks ties between equal conflict counts."""
    return conflict_count * RouteConstants.CONFLICT_PENALTY + duration_s

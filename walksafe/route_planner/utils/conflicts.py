# walksafe/route_planner/utils/conflicts.py
"""
Detects which DANGER reports a walking path passes too close to.

Every path point is checked against every DANGER pin. Paths run to tens or
low hundreds of points and the hazard snapshot to a few dozen pins, so the
full distance matrix stays small.
"""
from typing import List, Sequence

import numpy as np

from ..constants import RouteConstants
from ..data_models import Coordinate, HazardPin
from .coordinates import haversine_distance_m, haversine_matrix_m

def find_route_conflicts(path: Sequence[Coordinate], pins: Sequence[HazardPin],
                         start: Coordinate, end: Coordinate,
                         threshold_m: float = RouteConstants.DANGER_THRESHOLD_M,
                         terminal_m: float = RouteConstants.IGNORE_TERMINAL_DISTANCE_M) -> List[HazardPin]:
    """
    Returns the distinct avoidable DANGER pins within threshold_m of the path.

    A pin within terminal_m of the start or the end cannot be avoided by any
    route and is never reported. The result is ordered by where along the
    path each pin is first reached.
    """
    avoidable = []
    seen_ids = set()
    for pin in pins:
        if not pin.is_danger or pin.id in seen_ids:
            continue
        seen_ids.add(pin.id)
        location = pin.coordinate
        if haversine_distance_m(location, start) <= terminal_m or haversine_distance_m(location, end) <= terminal_m:
            continue
        avoidable.append(pin)

    if not avoidable or not path:
        return []

    within = haversine_matrix_m(path, [p.coordinate for p in avoidable]) < threshold_m
    hit_columns = np.flatnonzero(within.any(axis=0))
    first_hit = within.argmax(axis=0)

    ordered = sorted(hit_columns, key=lambda j: (first_hit[j], j))
    return [avoidable[j] for j in ordered]

# walksafe/route_planner/utils/coordinates.py
"""
Core coordinate geometry on a spherical Earth. Logging is omitted here as
these are high-frequency, low-level functions.
"""
import math
from typing import Sequence

import numpy as np

from ..constants import RouteConstants
from ..data_models import Coordinate

def haversine_distance_m(a: Coordinate, b: Coordinate) -> float:
    lat1_rad, lng1_rad = math.radians(a.lat), math.radians(a.lng)
    lat2_rad, lng2_rad = math.radians(b.lat), math.radians(b.lng)
    dlng = lng2_rad - lng1_rad; dlat = lat2_rad - lat1_rad
    h = math.sin(dlat / 2)**2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2)**2
    h = min(1.0, h)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return RouteConstants.EARTH_RADIUS_M * c

def calculate_bearing(a: Coordinate, b: Coordinate) -> float:
    """Initial compass bearing from a to b in [0, 360). Unstable when a == b."""
    lat1_rad, lng1_rad = math.radians(a.lat), math.radians(a.lng)
    lat2_rad, lng2_rad = math.radians(b.lat), math.radians(b.lng)
    dlng = lng2_rad - lng1_rad
    y = math.sin(dlng) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlng)
    initial_bearing = math.atan2(y, x)
    return (math.degrees(initial_bearing) + 360) % 360

def get_destination_point(origin: Coordinate, distance_m: float, bearing_deg: float) -> Coordinate:
    """Calculates the point reached by travelling distance_m along an initial bearing."""
    ang_dist = distance_m / RouteConstants.EARTH_RADIUS_M
    bearing_rad = math.radians(bearing_deg)
    lat1_rad = math.radians(origin.lat)
    lng1_rad = math.radians(origin.lng)

    lat2_rad = math.asin(math.sin(lat1_rad) * math.cos(ang_dist) +
                         math.cos(lat1_rad) * math.sin(ang_dist) * math.cos(bearing_rad))
    lng2_rad = lng1_rad + math.atan2(math.sin(bearing_rad) * math.sin(ang_dist) * math.cos(lat1_rad),
                                     math.cos(ang_dist) - math.sin(lat1_rad) * math.sin(lat2_rad))
    return Coordinate(lat=math.degrees(lat2_rad), lng=math.degrees(lng2_rad))

def haversine_matrix_m(points: Sequence[Coordinate], targets: Sequence[Coordinate]) -> np.ndarray:
    """
    Pairwise haversine distances in meters.

    Returns an array of shape (len(points), len(targets)); row i holds the
    distances from points[i] to every target.
    """
    if not points or not targets:
        return np.zeros((len(points), len(targets)))

    p = np.radians(np.array([(c.lat, c.lng) for c in points], dtype=float))
    t = np.radians(np.array([(c.lat, c.lng) for c in targets], dtype=float))

    p_lat, p_lng = p[:, 0][:, np.newaxis], p[:, 1][:, np.newaxis]
    t_lat, t_lng = t[:, 0][np.newaxis, :], t[:, 1][np.newaxis, :]

    d_lat = t_lat - p_lat
    d_lng = t_lng - p_lng
    h = np.sin(d_lat / 2)**2 + np.cos(p_lat) * np.cos(t_lat) * np.sin(d_lng / 2)**2
    h = np.clip(h, 0.0, 1.0)
    return RouteConstants.EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))

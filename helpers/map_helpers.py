# helpers/map_helpers.py
from typing import List, Optional

from walksafe.route_planner.data_models import Coordinate, HazardPin, RouteResult, SafetyLevel

def get_color_from_level(level: SafetyLevel) -> str:
    if level is SafetyLevel.SAFE: return "#16a34a"     # Green
    elif level is SafetyLevel.CAUTION: return "#eab308" # Amber
    else: return "#dc2626"                              # Red for danger

def pins_as_geojson(pins: List[HazardPin]) -> dict:
    features = []
    for pin in pins:
        feature = {
            "type": "Feature", "geometry": {"type": "Point", "coordinates": [pin.lng, pin.lat]},
            "properties": { "id": pin.id, "safetyLevel": pin.safety_level.value, "description": pin.description,
                            "timestamp": pin.timestamp, "userId": pin.user_id,
                            "display_color": get_color_from_level(pin.safety_level) }
        }
        features.append(feature)
    return {"type": "FeatureCollection", "features": features}

def route_as_geojson(result: RouteResult) -> Optional[dict]:
    """LineString feature for a found route, None for an empty one."""
    if not result.found:
        return None
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": [[c.lng, c.lat] for c in result.route]},
        "properties": { "duration": result.duration, "safetyNote": result.safety_note,
                        "dangerCount": result.danger_count, "routeType": result.route_type,
                        "display_color": "#dc2626" if result.danger_count else "#2563eb" }
    }

def parse_coordinate(data, field_name: str) -> Coordinate:
    """Reads a {lat, lng} object out of a request body, raising ValueError with the field name."""
    if not isinstance(data, dict):
        raise ValueError(f"'{field_name}' must be an object with 'lat' and 'lng'.")
    try:
        return Coordinate.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid '{field_name}': {e}")

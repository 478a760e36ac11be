# walksafe/route_planner/data_models.py
"""
Defines the core data structures shared by the route planner, the pin store
and the advisor. Hazard pins serialise to the camel-case form used by the
hosted pin collection so that records written by other clients stay readable.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import RouteConstants
from .utils.cost_functions import calculate_route_score


@dataclass(frozen=True)
class Coordinate:
    """A point in degrees. Used as the universal spatial unit."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.lat, 'lng': self.lng}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinate":
        lng = data.get('lng', data.get('lon'))
        if data.get('lat') is None or lng is None:
            raise ValueError(f"Coordinate requires 'lat' and 'lng', got {data!r}")
        return cls(lat=float(data['lat']), lng=float(lng))


class SafetyLevel(Enum):
    SAFE = 'SAFE'
    CAUTION = 'CAUTION'
    DANGER = 'DANGER'


@dataclass(frozen=True)
class HazardPin:
    """A single community safety report. Read-only once created."""
    id: str
    lat: float
    lng: float
    safety_level: SafetyLevel
    description: str
    timestamp: int
    user_id: str

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)

    @property
    def is_danger(self) -> bool:
        return self.safety_level is SafetyLevel.DANGER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'lat': self.lat,
            'lng': self.lng,
            'safetyLevel': self.safety_level.value,
            'description': self.description,
            'timestamp': self.timestamp,
            'userId': self.user_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HazardPin":
        level = data.get('safetyLevel', data.get('safety_level'))
        return cls(
            id=str(data['id']),
            lat=float(data['lat']),
            lng=float(data['lng']),
            safety_level=SafetyLevel(level),
            description=data.get('description', ''),
            timestamp=int(data.get('timestamp', 0)),
            user_id=data.get('userId', data.get('user_id', '')),
        )


@dataclass
class RawRoute:
    """A walking path as returned by the routing provider."""
    coordinates: List[Coordinate]
    duration_s: float
    distance_m: float = 0.0


@dataclass
class CandidateRoute:
    """A scored path considered during a single route calculation."""
    coordinates: List[Coordinate]
    duration_s: float
    route_type: str
    conflicts: List[HazardPin] = field(default_factory=list)

    @property
    def score(self) -> float:
        return calculate_route_score(len(self.conflicts), self.duration_s)

    @property
    def is_detour(self) -> bool:
        return self.route_type != RouteConstants.DIRECT_ROUTE_TYPE


@dataclass
class RouteResult:
    """The outcome of one route calculation, handed back to the caller."""
    route: List[Coordinate]
    duration: Optional[str]
    safety_note: str
    danger_count: int = 0
    route_type: Optional[str] = None

    @property
    def is_detour(self) -> bool:
        return self.route_type is not None and self.route_type != RouteConstants.DIRECT_ROUTE_TYPE

    @property
    def found(self) -> bool:
        return len(self.route) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'route': [c.to_dict() for c in self.route],
            'duration': self.duration,
            'safetyNote': self.safety_note,
            'dangerCount': self.danger_count,
            'routeType': self.route_type,
            'isDetour': self.is_detour,
        }

    @classmethod
    def not_found(cls) -> "RouteResult":
        return cls(route=[], duration=None, safety_note=RouteConstants.NO_ROUTE_MESSAGE)

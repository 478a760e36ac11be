# walksafe/pin_store/base.py
"""
The hazard collection capability. Both backends implement the same three
operations, so callers pick a store once at startup and never branch on it.
"""
import logging
import random
import string
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from walksafe.route_planner.data_models import Coordinate, HazardPin, SafetyLevel

PinsCallback = Callable[[List[HazardPin]], None]
Unsubscribe = Callable[[], None]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_pin_id(length: int = 7) -> str:
    """Short random base-36 identifier."""
    return ''.join(random.choice(_ID_ALPHABET) for _ in range(length))


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


def pins_from_records(records: List[Dict[str, Any]]) -> List[HazardPin]:
    """Parses raw records, dropping (and logging) any that are malformed."""
    pins = []
    for record in records:
        try:
            pins.append(HazardPin.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            logging.warning(f"Skipping malformed pin record {record!r}: {e}")
    return pins


def validate_submission(pin_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalises a user submission into the stored camel-case form, minus the
    id and timestamp the store assigns.

    Raises:
        ValueError: when the coordinate or the safety level is missing or invalid.
    """
    location = Coordinate.from_dict(pin_data)
    level = pin_data.get('safetyLevel', pin_data.get('safety_level'))
    try:
        safety_level = SafetyLevel(level)
    except ValueError:
        raise ValueError(f"Unknown safety level {level!r}; expected one of {[l.value for l in SafetyLevel]}")
    return {
        'lat': location.lat,
        'lng': location.lng,
        'safetyLevel': safety_level.value,
        'description': str(pin_data.get('description', '')),
        'userId': str(pin_data.get('userId', pin_data.get('user_id', 'anonymous'))),
    }


def sample_pins(center: Coordinate) -> List[HazardPin]:
    """One report of each level a couple of hundred meters around the center."""
    now = current_timestamp_ms()
    return [
        HazardPin(id='1', lat=center.lat + 0.001, lng=center.lng + 0.001, safety_level=SafetyLevel.SAFE,
                  description="Well lit street, lots of people walking dogs.", timestamp=now, user_id='system'),
        HazardPin(id='2', lat=center.lat - 0.0015, lng=center.lng - 0.0005, safety_level=SafetyLevel.CAUTION,
                  description="Streetlight flickering near the corner.", timestamp=now, user_id='system'),
        HazardPin(id='3', lat=center.lat + 0.002, lng=center.lng - 0.002, safety_level=SafetyLevel.DANGER,
                  description="Construction site, sidewalk closed, very dark.", timestamp=now, user_id='system'),
    ]


class PinStore(ABC):
    """Capability interface: {subscribe, add, remove}."""

    backend_name = 'abstract'

    @abstractmethod
    def subscribe(self, callback: PinsCallback) -> Unsubscribe:
        """Invokes callback with the full pin list now and on every change. Returns an unsubscribe function."""

    @abstractmethod
    def add_pin(self, pin_data: Dict[str, Any]) -> HazardPin:
        """Stores a submission under a fresh id and timestamp."""

    @abstractmethod
    def remove_pin(self, pin_id: str) -> None:
        """Deletes a pin by id."""

    def seed_data(self, center: Coordinate) -> bool:
        """Writes sample pins when the backend supports it. Returns True if anything was written."""
        return False

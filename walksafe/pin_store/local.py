# walksafe/pin_store/local.py
"""
Pin store backed by a JSON file on local disk. Used when no hosted database
is configured. Subscribers in this process are notified after every write.
"""
import json
import logging
import os
import threading
from typing import Any, Dict, List

from walksafe.route_planner.data_models import Coordinate, HazardPin
from .base import (PinStore, PinsCallback, Unsubscribe, current_timestamp_ms, generate_pin_id,
                   pins_from_records, sample_pins, validate_submission)
from .exceptions import PinStoreError

class LocalPinStore(PinStore):
    backend_name = 'local'

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self._subscribers: List[PinsCallback] = []
        logging.info(f"LocalPinStore using {os.path.abspath(self.path)}")

    def _read_records(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logging.error(f"Could not read pin file {self.path}: {e}")
            return []
        if not isinstance(data, list):
            logging.error(f"Pin file {self.path} does not hold a list; treating it as empty.")
            return []
        return data

    def _write_records(self, records: List[Dict[str, Any]]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, 'w') as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, self.path)
        except IOError as e:
            raise PinStoreError(f"Could not write pin file {self.path}: {e}") from e

    def get_pins(self) -> List[HazardPin]:
        with self._lock:
            return pins_from_records(self._read_records())

    def _notify(self) -> None:
        pins = self.get_pins()
        for callback in list(self._subscribers):
            try:
                callback(pins)
            except Exception as e:
                logging.error(f"Pin subscriber raised: {e}", exc_info=True)

    def subscribe(self, callback: PinsCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)
        callback(self.get_pins())

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)
        return unsubscribe

    def add_pin(self, pin_data: Dict[str, Any]) -> HazardPin:
        record = validate_submission(pin_data)
        record['id'] = generate_pin_id()
        record['timestamp'] = current_timestamp_ms()
        with self._lock:
            records = self._read_records()
            records.append(record)
            self._write_records(records)
        logging.info(f"Added {record['safetyLevel']} pin '{record['id']}' at ({record['lat']:.5f}, {record['lng']:.5f}).")
        self._notify()
        return HazardPin.from_dict(record)

    def remove_pin(self, pin_id: str) -> None:
        with self._lock:
            records = self._read_records()
            remaining = [r for r in records if str(r.get('id')) != pin_id]
            self._write_records(remaining)
        logging.info(f"Removed {len(records) - len(remaining)} pin(s) with id '{pin_id}'.")
        self._notify()

    def seed_data(self, center: Coordinate) -> bool:
        with self._lock:
            if self._read_records():
                return False
            self._write_records([pin.to_dict() for pin in sample_pins(center)])
        logging.info(f"Seeded sample pins around ({center.lat:.4f}, {center.lng:.4f}).")
        self._notify()
        return True

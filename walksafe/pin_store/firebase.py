# walksafe/pin_store/firebase.py
"""
Pin store backed by a Firebase Realtime Database, spoken to over its REST
API. Live updates come from the REST streaming endpoint, which emits
server-sent events whenever anything under the pins path changes.
"""
import json
import logging
import random
import threading
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import requests

from walksafe.constants.services import ServiceConstants
from walksafe.route_planner.data_models import HazardPin
from .base import PinStore, PinsCallback, Unsubscribe, current_timestamp_ms, pins_from_records, validate_submission
from .exceptions import PinStoreError, StoreConfigurationError


def iter_sse_events(lines: Iterable[str]) -> Iterator[Tuple[str, Optional[str]]]:
    """Groups raw event-stream lines into (event, data) pairs."""
    event, data = None, []
    for line in lines:
        if line is None:
            continue
        if isinstance(line, bytes):
            line = line.decode('utf-8')
        if line == '':
            if event is not None:
                yield event, '\n'.join(data) if data else None
            event, data = None, []
        elif line.startswith(':'):
            continue
        elif line.startswith('event:'):
            event = line[len('event:'):].strip()
        elif line.startswith('data:'):
            data.append(line[len('data:'):].strip())
    if event is not None:
        yield event, '\n'.join(data) if data else None


PUSH_KEY_ALPHABET = '-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz'


def generate_push_key(timestamp_ms: int) -> str:
    """
    Chronologically sortable 20-character key in Firebase's push-id format:
    8 characters of millisecond timestamp followed by 12 random characters.
    """
    time_chars = []
    for _ in range(8):
        time_chars.append(PUSH_KEY_ALPHABET[timestamp_ms % 64])
        timestamp_ms //= 64
    random_chars = [random.choice(PUSH_KEY_ALPHABET) for _ in range(12)]
    return ''.join(reversed(time_chars)) + ''.join(random_chars)


class FirebasePinStore(PinStore):
    backend_name = 'firebase'
    RECONNECT_DELAY_SEC = 5.0

    def __init__(self, database_url: str, auth_token: Optional[str] = None,
                 timeout: float = ServiceConstants.REQUEST_TIMEOUT_SEC,
                 session: Optional[requests.Session] = None):
        if not database_url or not database_url.startswith('https://'):
            raise StoreConfigurationError(f"Invalid Firebase database URL: {database_url!r}")
        self.base_url = database_url.rstrip('/')
        self.auth_token = auth_token
        self.timeout = timeout
        self.session = session or requests.Session()
        logging.info(f"FirebasePinStore connected to {self.base_url}")

    def _url(self, *parts: str) -> str:
        path = '/'.join((ServiceConstants.FIREBASE_PINS_PATH,) + parts)
        return f"{self.base_url}/{path}.json"

    def _params(self, **extra: str) -> Dict[str, str]:
        params = dict(extra)
        if self.auth_token:
            params['auth'] = self.auth_token
        return params

    def get_pins(self) -> List[HazardPin]:
        try:
            response = self.session.get(self._url(), params=self._params(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise PinStoreError(f"Could not read pins from Firebase: {e}") from e
        return pins_from_records(list(data.values()) if isinstance(data, dict) else [])

    def add_pin(self, pin_data: Dict[str, Any]) -> HazardPin:
        record = validate_submission(pin_data)
        record['timestamp'] = current_timestamp_ms()
        # The push key doubles as the pin id, so the record is written whole in one request.
        key = generate_push_key(record['timestamp'])
        record['id'] = key
        try:
            response = self.session.put(self._url(key), params=self._params(), json=record, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PinStoreError(f"Could not add pin to Firebase: {e}") from e
        logging.info(f"Added {record['safetyLevel']} pin '{key}' to Firebase.")
        return HazardPin.from_dict(record)

    def remove_pin(self, pin_id: str) -> None:
        # Records written by other clients may use a push key that differs from their id field.
        try:
            response = self.session.get(
                self._url(),
                params=self._params(orderBy=json.dumps('id'), equalTo=json.dumps(pin_id)),
                timeout=self.timeout
            )
            response.raise_for_status()
            matches = response.json() or {}
            if matches:
                for key in matches:
                    self.session.delete(self._url(key), params=self._params(),
                                        timeout=self.timeout).raise_for_status()
                logging.info(f"Removed pin '{pin_id}' via id query ({len(matches)} record(s)).")
                return
            logging.info(f"Pin '{pin_id}' not found via query. Attempting direct path delete.")
        except (requests.exceptions.RequestException, ValueError) as e:
            logging.error(f"Error removing pin '{pin_id}' via query: {e}")

        try:
            self.session.delete(self._url(pin_id), params=self._params(), timeout=self.timeout).raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PinStoreError(f"Direct delete of pin '{pin_id}' failed: {e}") from e
        logging.info(f"Direct path removal executed for pin '{pin_id}'.")

    def subscribe(self, callback: PinsCallback) -> Unsubscribe:
        stop = threading.Event()
        worker = threading.Thread(target=self._stream_worker, args=(callback, stop),
                                  name='firebase-pin-stream', daemon=True)
        worker.start()
        return stop.set

    def _deliver(self, callback: PinsCallback) -> None:
        try:
            pins = self.get_pins()
        except PinStoreError as e:
            logging.error(f"Skipping pin update: {e}")
            return
        try:
            callback(pins)
        except Exception as e:
            logging.error(f"Pin subscriber raised: {e}", exc_info=True)

    def _stream_worker(self, callback: PinsCallback, stop: threading.Event) -> None:
        with requests.Session() as stream_session:
            while not stop.is_set():
                try:
                    with stream_session.get(self._url(), params=self._params(),
                                            headers={'Accept': 'text/event-stream'},
                                            stream=True, timeout=(self.timeout, None)) as response:
                        response.raise_for_status()
                        for event, _ in iter_sse_events(response.iter_lines(decode_unicode=True)):
                            if stop.is_set():
                                return
                            if event in ('put', 'patch'):
                                self._deliver(callback)
                            elif event in ('cancel', 'auth_revoked'):
                                logging.error(f"Firebase closed the pin stream ({event}).")
                                return
                except requests.exceptions.RequestException as e:
                    logging.warning(f"Firebase pin stream dropped: {e}. Reconnecting in {self.RECONNECT_DELAY_SEC}s.")
                stop.wait(self.RECONNECT_DELAY_SEC)

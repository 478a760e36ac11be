#!/usr/bin/env python3
# walksafe/pin_store/tests/test_firebase_store.py

import sys
import threading
from pathlib import Path
import unittest
from unittest.mock import MagicMock, patch

import requests

# Add project root
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from walksafe.pin_store.exceptions import PinStoreError, StoreConfigurationError
from walksafe.pin_store.base import pins_from_records
from walksafe.pin_store.firebase import PUSH_KEY_ALPHABET, FirebasePinStore, generate_push_key, iter_sse_events

DB_URL = "https://walksafe-test-default-rtdb.firebaseio.com/"

def ok(body=None):
    response = MagicMock()
    response.json.return_value = body
    response.raise_for_status.return_value = None
    return response

def failing(message="boom"):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError(message)
    return response

class TestFirebasePinStore(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.store = FirebasePinStore(DB_URL, auth_token='secret', timeout=3, session=self.session)

    def test_rejects_invalid_url(self):
        with self.assertRaises(StoreConfigurationError):
            FirebasePinStore("http://insecure.example", session=self.session)

    def test_get_pins_reads_all_children(self):
        self.session.get.return_value = ok({
            '-Na': {'id': '-Na', 'lat': 1.0, 'lng': 2.0, 'safetyLevel': 'SAFE', 'description': '',
                    'timestamp': 10, 'userId': 'u'},
            '-Nb': {'id': '-Nb', 'lat': 1.5, 'lng': 2.5, 'safetyLevel': 'DANGER', 'description': 'dark',
                    'timestamp': 11, 'userId': 'u'},
        })
        pins = self.store.get_pins()
        self.assertEqual(sorted(p.id for p in pins), ['-Na', '-Nb'])
        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://walksafe-test-default-rtdb.firebaseio.com/pins.json")
        self.assertEqual(kwargs['params'], {'auth': 'secret'})

    def test_get_pins_on_empty_database(self):
        self.session.get.return_value = ok(None)
        self.assertEqual(self.store.get_pins(), [])

    def test_add_writes_whole_record_once(self):
        self.session.put.return_value = ok(None)

        pin = self.store.add_pin({'lat': 37.7, 'lng': -122.4, 'safetyLevel': 'CAUTION',
                                  'description': 'Uneven sidewalk', 'userId': 'u-9'})

        self.assertEqual(len(pin.id), 20)
        self.assertEqual(self.session.put.call_count, 1)
        self.session.post.assert_not_called()
        self.session.patch.assert_not_called()
        put_args, put_kwargs = self.session.put.call_args
        self.assertTrue(put_args[0].endswith(f'/pins/{pin.id}.json'))
        written = put_kwargs['json']
        self.assertEqual(written['id'], pin.id)
        self.assertEqual(written['safetyLevel'], 'CAUTION')
        self.assertIn('timestamp', written)
        self.assertEqual(pins_from_records([written])[0], pin)

    def test_add_failure_leaves_nothing_behind(self):
        self.session.put.return_value = failing("503")
        with self.assertRaises(PinStoreError):
            self.store.add_pin({'lat': 1, 'lng': 1, 'safetyLevel': 'DANGER'})
        self.assertEqual(self.session.put.call_count, 1)
        self.session.post.assert_not_called()

    def test_invalid_submission_sends_nothing(self):
        with self.assertRaises(ValueError):
            self.store.add_pin({'lat': 1, 'lng': 1, 'safetyLevel': 'SCARY'})
        self.session.put.assert_not_called()

    def test_remove_via_id_query(self):
        self.session.get.return_value = ok({'-Nkey': {'id': 'abc123'}})
        self.session.delete.return_value = ok(None)

        self.store.remove_pin('abc123')

        query = self.session.get.call_args[1]['params']
        self.assertEqual(query['orderBy'], '"id"')
        self.assertEqual(query['equalTo'], '"abc123"')
        self.assertEqual(self.session.delete.call_count, 1)
        self.assertTrue(self.session.delete.call_args[0][0].endswith('/pins/-Nkey.json'))

    def test_remove_falls_back_to_direct_path(self):
        self.session.get.return_value = ok({})
        self.session.delete.return_value = ok(None)

        self.store.remove_pin('abc123')

        self.assertTrue(self.session.delete.call_args[0][0].endswith('/pins/abc123.json'))

    def test_query_error_still_tries_direct_path(self):
        self.session.get.return_value = failing("400 index not defined")
        self.session.delete.return_value = ok(None)
        self.store.remove_pin('abc123')
        self.assertTrue(self.session.delete.call_args[0][0].endswith('/pins/abc123.json'))

    def test_direct_delete_failure_raises(self):
        self.session.get.return_value = ok({})
        self.session.delete.return_value = failing("401")
        with self.assertRaises(PinStoreError):
            self.store.remove_pin('abc123')

class TestServerSentEvents(unittest.TestCase):
    def test_events_are_grouped(self):
        lines = [
            'event: put', 'data: {"path": "/", "data": {}}', '',
            'event: keep-alive', 'data: null', '',
            ': comment', 'event: patch', 'data: {"path": "/-N1", "data": {"id": "-N1"}}', '',
        ]
        events = list(iter_sse_events(lines))
        self.assertEqual([e for e, _ in events], ['put', 'keep-alive', 'patch'])
        self.assertEqual(events[0][1], '{"path": "/", "data": {}}')

    def test_trailing_event_without_blank_line(self):
        self.assertEqual(list(iter_sse_events([b'event: cancel', b'data: null'])), [('cancel', 'null')])

class TestPushKey(unittest.TestCase):
    def test_format(self):
        key = generate_push_key(1700000000000)
        self.assertEqual(len(key), 20)
        self.assertTrue(set(key) <= set(PUSH_KEY_ALPHABET))

    def test_keys_sort_by_time(self):
        earlier, later = generate_push_key(1700000000000), generate_push_key(1700000000001)
        self.assertLess(earlier[:8], later[:8])
        self.assertEqual(generate_push_key(0)[:8], '--------')

def stream_response(*lines):
    response = MagicMock()
    response.iter_lines.return_value = iter(lines)
    response.raise_for_status.return_value = None
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response

SNAPSHOT = {'-Na': {'id': '-Na', 'lat': 1.0, 'lng': 2.0, 'safetyLevel': 'DANGER', 'description': 'dark',
                    'timestamp': 10, 'userId': 'u'}}

@patch('walksafe.pin_store.firebase.requests.Session')
class TestPinSubscription(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.get.return_value = ok(SNAPSHOT)
        self.store = FirebasePinStore(DB_URL, session=self.session)
        self.store.RECONNECT_DELAY_SEC = 0
        self.callback = MagicMock()

    def _stream(self, session_cls, *responses):
        stream = MagicMock()
        stream.get.side_effect = list(responses)
        session_cls.return_value.__enter__.return_value = stream
        session_cls.return_value.__exit__.return_value = False
        return stream

    def test_change_events_reread_snapshot(self, session_cls):
        stream = self._stream(session_cls, stream_response(
            'event: put', 'data: {"path": "/", "data": null}', '',
            'event: keep-alive', 'data: null', '',
            'event: patch', 'data: {"path": "/-Na", "data": {}}', '',
            'event: cancel', 'data: null', '',
        ))

        self.store._stream_worker(self.callback, threading.Event())

        self.assertEqual(self.callback.call_count, 2)
        self.assertEqual([p.id for p in self.callback.call_args[0][0]], ['-Na'])
        self.assertEqual(self.session.get.call_count, 2)
        _, kwargs = stream.get.call_args
        self.assertTrue(kwargs['stream'])
        self.assertEqual(kwargs['headers'], {'Accept': 'text/event-stream'})
        self.assertTrue(session_cls.return_value.__exit__.called)

    def test_cancel_ends_worker(self, session_cls):
        stream = self._stream(session_cls, stream_response(
            'event: cancel', 'data: null', '',
            'event: put', 'data: {}', '',
        ))
        self.store._stream_worker(self.callback, threading.Event())
        self.callback.assert_not_called()
        self.assertEqual(stream.get.call_count, 1)

    def test_revoked_auth_ends_worker(self, session_cls):
        stream = self._stream(session_cls, stream_response('event: auth_revoked', 'data: "credential expired"', ''))
        self.store._stream_worker(self.callback, threading.Event())
        self.assertEqual(stream.get.call_count, 1)

    def test_dropped_stream_reconnects(self, session_cls):
        rejected = stream_response()
        rejected.raise_for_status.side_effect = requests.exceptions.HTTPError("503")
        stream = self._stream(
            session_cls,
            requests.exceptions.ConnectionError("reset by peer"),
            rejected,
            stream_response('event: put', 'data: {}', '', 'event: cancel', 'data: null', ''),
        )

        self.store._stream_worker(self.callback, threading.Event())

        self.assertEqual(stream.get.call_count, 3)
        self.assertEqual(self.callback.call_count, 1)

    def test_failed_snapshot_read_skips_update(self, session_cls):
        self.session.get.return_value = failing("500")
        self._stream(session_cls, stream_response('event: put', 'data: {}', '', 'event: cancel', 'data: null', ''))
        self.store._stream_worker(self.callback, threading.Event())
        self.callback.assert_not_called()

    def test_raising_subscriber_keeps_stream_alive(self, session_cls):
        self.callback.side_effect = RuntimeError("ui gone")
        self._stream(session_cls, stream_response(
            'event: put', 'data: {}', '', 'event: patch', 'data: {}', '', 'event: cancel', 'data: null', ''))
        self.store._stream_worker(self.callback, threading.Event())
        self.assertEqual(self.callback.call_count, 2)

    def test_stop_mid_stream_halts_delivery(self, session_cls):
        stop = threading.Event()
        self.callback.side_effect = lambda pins: stop.set()
        stream = self._stream(session_cls, stream_response(
            'event: put', 'data: {}', '', 'event: patch', 'data: {}', '', 'event: put', 'data: {}', ''))

        self.store._stream_worker(self.callback, stop)

        self.assertEqual(self.callback.call_count, 1)
        self.assertEqual(stream.get.call_count, 1)

    def test_subscribe_runs_worker_on_daemon_thread(self, session_cls):
        stream = self._stream(session_cls)
        with patch('walksafe.pin_store.firebase.threading.Thread') as thread_cls:
            unsubscribe = self.store.subscribe(self.callback)

        thread_cls.return_value.start.assert_called_once_with()
        kwargs = thread_cls.call_args[1]
        self.assertTrue(kwargs['daemon'])
        callback, stop = kwargs['args']
        self.assertIs(callback, self.callback)
        self.assertFalse(stop.is_set())

        unsubscribe()
        self.assertTrue(stop.is_set())
        kwargs['target'](*kwargs['args'])
        stream.get.assert_not_called()
        self.callback.assert_not_called()

if __name__ == '__main__':
    unittest.main()

#!/usr/bin/env python3
# walksafe/route_planner/tests/test_osrm_handler.py

import sys
from pathlib import Path
import unittest
from unittest.mock import MagicMock

import requests

# Add project root
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from walksafe.route_planner.constants import RouteConstants
from walksafe.route_planner.core import SafeRoutePlanner
from walksafe.route_planner.data_models import Coordinate
from walksafe.route_planner.osrm_handler import OSRMRouteHandler

def osrm_body(coords, duration=420.5, distance=560.0, code='Ok'):
    return {
        'code': code,
        'routes': [{
            'geometry': {'type': 'LineString', 'coordinates': coords},
            'duration': duration,
            'distance': distance,
        }]
    }

class TestOSRMRouteHandler(unittest.TestCase):
    def setUp(self):
        self.mock_session = MagicMock()
        self.handler = OSRMRouteHandler(base_url="https://osrm.test/", timeout=5, session=self.mock_session)
        self.start = Coordinate(37.7749, -122.4194)
        self.dest = Coordinate(37.7800, -122.4100)

    def _respond_with(self, body):
        response = MagicMock()
        response.json.return_value = body
        response.raise_for_status.return_value = None
        self.mock_session.get.return_value = response
        return response

    def test_url_without_waypoint(self):
        url = self.handler.build_url(self.start, self.dest)
        self.assertEqual(url, "https://osrm.test/route/v1/walking/-122.4194,37.7749;-122.41,37.78")

    def test_url_with_waypoint_is_lng_lat_in_order(self):
        url = self.handler.build_url(self.start, self.dest, Coordinate(37.777, -122.415))
        self.assertTrue(url.endswith("/walking/-122.4194,37.7749;-122.415,37.777;-122.41,37.78"))

    def test_successful_fetch(self):
        self._respond_with(osrm_body([[-122.4194, 37.7749], [-122.415, 37.777], [-122.41, 37.78]]))

        route = self.handler.fetch_route(self.start, self.dest)

        self.assertIsNotNone(route)
        self.assertEqual(route.coordinates[0], Coordinate(37.7749, -122.4194))
        self.assertEqual(route.coordinates[-1], Coordinate(37.78, -122.41))
        self.assertEqual(route.duration_s, 420.5)
        self.assertEqual(route.distance_m, 560.0)
        _, kwargs = self.mock_session.get.call_args
        self.assertEqual(kwargs['params'], {'overview': 'full', 'geometries': 'geojson'})
        self.assertEqual(kwargs['timeout'], 5)

    def test_only_first_alternative_is_used(self):
        body = osrm_body([[0, 0], [0.01, 0]], duration=100)
        body['routes'].append({'geometry': {'coordinates': [[0, 0]]}, 'duration': 1})
        self._respond_with(body)
        self.assertEqual(self.handler.fetch_route(self.start, self.dest).duration_s, 100)

    def test_no_route_yields_none(self):
        self._respond_with({'code': 'NoRoute', 'routes': []})
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_missing_routes_key_yields_none(self):
        self._respond_with({'code': 'Ok'})
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_network_error_is_swallowed(self):
        self.mock_session.get.side_effect = requests.exceptions.ConnectionError("offline")
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_timeout_is_swallowed(self):
        self.mock_session.get.side_effect = requests.exceptions.Timeout("slow")
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_http_error_is_swallowed(self):
        response = self._respond_with({})
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("502")
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_non_json_body_is_swallowed(self):
        response = self._respond_with(None)
        response.json.side_effect = ValueError("Expecting value")
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_malformed_geometry_yields_none(self):
        self._respond_with({'code': 'Ok', 'routes': [{'geometry': None, 'duration': 5}]})
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_null_distance_is_tolerated(self):
        self._respond_with(osrm_body([[-122.4194, 37.7749], [-122.41, 37.78]], duration=300, distance=None))
        route = self.handler.fetch_route(self.start, self.dest)
        self.assertEqual(route.duration_s, 300.0)
        self.assertEqual(route.distance_m, 0.0)

    def test_garbage_distance_yields_none(self):
        self._respond_with(osrm_body([[-122.4194, 37.7749], [-122.41, 37.78]], distance="far"))
        self.assertIsNone(self.handler.fetch_route(self.start, self.dest))

    def test_planner_survives_odd_route_bodies(self):
        planner = SafeRoutePlanner(route_handler=self.handler)

        self._respond_with(osrm_body([[-122.4194, 37.7749], [-122.41, 37.78]], duration=300, distance=None))
        result = planner.get_safe_route(self.start, self.dest, "Ferry Building", [])
        self.assertTrue(result.found)
        self.assertEqual(result.duration, "6 min walk")

        self._respond_with(osrm_body([[-122.4194, 37.7749]], distance=[1, 2]))
        result = planner.get_safe_route(self.start, self.dest, "Ferry Building", [])
        self.assertFalse(result.found)
        self.assertEqual(result.safety_note, RouteConstants.NO_ROUTE_MESSAGE)

if __name__ == '__main__':
    unittest.main()

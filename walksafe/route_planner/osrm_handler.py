# walksafe/route_planner/osrm_handler.py
"""
Handles all interactions with the OSRM routing service.

This module is responsible for fetching raw walking paths between a start
and a destination, optionally forced through a single intermediate waypoint.
"""
import logging
from typing import Optional

import requests
import requests_cache

from walksafe.constants.services import ServiceConstants
from .data_models import Coordinate, RawRoute

class OSRMRouteHandler:
    """
    A dedicated handler for fetching and caching walking routes from OSRM.
    """

    def __init__(self, base_url: str = ServiceConstants.OSRM_BASE_URL,
                 timeout: float = ServiceConstants.REQUEST_TIMEOUT_SEC,
                 cache_enabled: bool = False, session: Optional[requests.Session] = None):
        """
        Initializes the OSRMRouteHandler.

        Args:
            base_url: Root URL of the OSRM server.
            timeout: The timeout in seconds for each route request.
            cache_enabled: If True, route requests are cached to a local
                           SQLite file so repeated calculations between the
                           same points skip the network.
            session: Optional pre-built session, mainly for tests.
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        if session is not None:
            self.session = session
        elif cache_enabled:
            self.session = requests_cache.CachedSession(
                'osrm_cache',
                backend='sqlite',
                expire_after=3600  # Road networks change slowly; an hour is plenty
            )
        else:
            self.session = requests.Session()
        logging.info(f"OSRMRouteHandler initialized for {self.base_url}. Cache enabled: {cache_enabled}")

    def build_url(self, start: Coordinate, destination: Coordinate, waypoint: Optional[Coordinate] = None) -> str:
        """OSRM expects 'lng,lat' pairs joined by ';' in travel order."""
        stops = [start] + ([waypoint] if waypoint else []) + [destination]
        coords = ";".join(f"{c.lng},{c.lat}" for c in stops)
        return f"{self.base_url}/route/v1/{ServiceConstants.OSRM_PROFILE}/{coords}"

    def fetch_route(self, start: Coordinate, destination: Coordinate,
                    waypoint: Optional[Coordinate] = None) -> Optional[RawRoute]:
        """
        Fetches the first walking route alternative through the given stops.

        Returns:
            A RawRoute, or None if the service has no route or the request
            fails for any reason.
        """
        url = self.build_url(start, destination, waypoint)
        params = {'overview': 'full', 'geometries': 'geojson'}

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()  # Raises an HTTPError for bad responses (4xx or 5xx)
            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Failed to fetch route from OSRM: {e}")
            return None
        except ValueError as e:
            logging.error(f"OSRM returned a non-JSON body: {e}")
            return None

        return self.parse_route(data)

    @staticmethod
    def parse_route(data: dict) -> Optional[RawRoute]:
        """Extracts the first route from an OSRM response body."""
        if not isinstance(data, dict):
            return None
        code = data.get('code', 'Ok')
        routes = data.get('routes') or []
        if code != 'Ok' or not routes:
            logging.warning(f"OSRM returned no route (code={code}).")
            return None

        first = routes[0]
        try:
            coordinates = [Coordinate(lat=float(lat), lng=float(lng))
                           for lng, lat in first['geometry']['coordinates']]
            duration = float(first['duration'])
            distance = float(first.get('distance') or 0.0)
        except (KeyError, TypeError, ValueError) as e:
            logging.error(f"Malformed OSRM route: {e}")
            return None

        return RawRoute(coordinates=coordinates, duration_s=duration, distance_m=distance)

# walksafe/route_planner/core.py
"""
The safe-route planner. Fetches the direct walking path, and when it passes
near avoidable danger reports, fans out perpendicular detour candidates around
the first such report and keeps the best-scoring path.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from walksafe.advisor.prompts import fallback_safety_note
from .constants import RouteConstants
from .data_models import CandidateRoute, Coordinate, HazardPin, RawRoute, RouteResult
from .exceptions import NoRouteFoundError, RoutePlannerError
from .osrm_handler import OSRMRouteHandler
from .utils.conflicts import find_route_conflicts
from .utils.coordinates import calculate_bearing, get_destination_point
from .utils.formatting import format_duration

class SafeRoutePlanner:
    """Main class to compute walking routes that steer clear of reported danger."""

    def __init__(self, route_handler: Optional[OSRMRouteHandler] = None, annotator=None):
        """
        Args:
            route_handler: Anything with fetch_route(start, destination, waypoint=None).
            annotator: Anything with generate_safety_note(...); a SafetyAdvisor
                       in production. Without one, the fixed fallback notes are used.
        """
        self.route_handler = route_handler or OSRMRouteHandler()
        self.annotator = annotator
        logging.info("SafeRoutePlanner initialized.")

    def get_safe_route(self, start: Coordinate, destination: Coordinate,
                       destination_name: str, pins: Sequence[HazardPin]) -> RouteResult:
        """The top-level operation. Never raises; a failed calculation yields an empty route."""
        try:
            chosen = self.plan_route(start, destination, pins)
        except RoutePlannerError as e:
            logging.error(f"Route generation failed: {e}")
            return RouteResult.not_found()

        duration = format_duration(chosen.duration_s)
        danger_count = len(chosen.conflicts)
        safety_note = self._annotate(start, destination_name, duration, chosen.is_detour, danger_count)

        return RouteResult(
            route=chosen.coordinates,
            duration=duration,
            safety_note=safety_note,
            danger_count=danger_count,
            route_type=chosen.route_type
        )

    def plan_route(self, start: Coordinate, destination: Coordinate,
                   pins: Sequence[HazardPin]) -> CandidateRoute:
        """Returns the winning candidate. Raises NoRouteFoundError when no direct path exists."""
        pins = list(pins)
        direct_raw = self.route_handler.fetch_route(start, destination)
        if direct_raw is None:
            raise NoRouteFoundError(
                f"No route found from ({start.lat:.5f}, {start.lng:.5f}) to ({destination.lat:.5f}, {destination.lng:.5f})"
            )

        direct = self._evaluate(direct_raw, RouteConstants.DIRECT_ROUTE_TYPE, pins, start, destination)
        logging.info(f"Direct route: {direct.duration_s:.0f}s, {len(direct.conflicts)} danger conflict(s).")
        if not direct.conflicts:
            return direct

        focus = direct.conflicts[0]
        waypoints = self.generate_detour_waypoints(start, destination, focus.coordinate)
        logging.info(f"Avoiding pin '{focus.id}': requesting {len(waypoints)} detour candidates.")

        candidates = [direct]
        for (route_type, _), raw in zip(waypoints, self._fetch_candidates(start, destination, waypoints)):
            if raw is not None:
                candidates.append(self._evaluate(raw, route_type, pins, start, destination))

        # min() keeps the first of equal scores, so generation order breaks ties.
        chosen = min(candidates, key=lambda c: c.score)
        logging.info(f"Selected '{chosen.route_type}' from {len(candidates)} candidates "
                     f"({len(chosen.conflicts)} conflict(s), {chosen.duration_s:.0f}s).")
        return chosen

    @staticmethod
    def generate_detour_waypoints(start: Coordinate, destination: Coordinate,
                                  focus: Coordinate) -> List[Tuple[str, Coordinate]]:
        """Left and right of the travel bearing at each offset, in that order."""
        bearing = calculate_bearing(start, destination)
        waypoints = []
        for offset in RouteConstants.DETOUR_OFFSETS_M:
            left = get_destination_point(focus, offset, (bearing - RouteConstants.DETOUR_ANGLE_DEG) % 360)
            right = get_destination_point(focus, offset, (bearing + RouteConstants.DETOUR_ANGLE_DEG) % 360)
            waypoints.append((f"left-{offset}", left))
            waypoints.append((f"right-{offset}", right))
        return waypoints

    def _fetch_candidates(self, start: Coordinate, destination: Coordinate,
                          waypoints: List[Tuple[str, Coordinate]]) -> List[Optional[RawRoute]]:
        """Issues every waypoint request at once and waits for all of them to settle."""
        with ThreadPoolExecutor(max_workers=len(waypoints)) as pool:
            futures = [pool.submit(self.route_handler.fetch_route, start, destination, waypoint)
                       for _, waypoint in waypoints]
            return [self._settle(route_type, future) for (route_type, _), future in zip(waypoints, futures)]

    @staticmethod
    def _settle(route_type: str, future: Future) -> Optional[RawRoute]:
        try:
            return future.result()
        except Exception as e:
            logging.warning(f"Detour candidate '{route_type}' failed and was skipped: {e}")
            return None

    @staticmethod
    def _evaluate(raw: RawRoute, route_type: str, pins: List[HazardPin],
                  start: Coordinate, destination: Coordinate) -> CandidateRoute:
        conflicts = find_route_conflicts(raw.coordinates, pins, start, destination)
        return CandidateRoute(coordinates=raw.coordinates, duration_s=raw.duration_s,
                              route_type=route_type, conflicts=conflicts)

    def _annotate(self, start: Coordinate, destination_name: str, duration: str,
                  is_detour: bool, danger_count: int) -> str:
        if self.annotator is None:
            return fallback_safety_note(danger_count)
        return self.annotator.generate_safety_note(
            start=start,
            destination_name=destination_name,
            duration=duration,
            is_detour=is_detour,
            danger_count=danger_count
        )

"""
Route planning heuristics.
Greedy nearest-driver assignment under a per-route stop limit, followed by
nearest-neighbor ordering of each driver's stops.

Everything here is pure and works on plain records; persistence lives in
auto_route_service.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from smartwaste.services.geo import haversine_meters

# A route needs at least two stops to describe a path
MIN_STOPS_PER_ROUTE = 2


@dataclass(frozen=True)
class BinPoint:
    """Candidate bin as seen by the planner."""
    id: int
    latitude: float
    longitude: float
    fill_level: int
    overflow: bool


@dataclass(frozen=True)
class DriverStart:
    """Available driver and the position their route starts from."""
    driver_id: int
    latitude: float
    longitude: float


@dataclass
class DriverRoutePlan:
    """Ordered stops planned for one driver."""
    driver_id: int
    stops: List[BinPoint]

    @property
    def bin_ids(self) -> List[int]:
        return [b.id for b in self.stops]


@dataclass
class RoutePlan:
    """Result of a planning pass."""
    routes: List[DriverRoutePlan] = field(default_factory=list)
    bins_considered: int = 0
    unassigned: List[BinPoint] = field(default_factory=list)

    @property
    def bins_used(self) -> int:
        return sum(len(r.stops) for r in self.routes)


def prioritize_bins(bins: Sequence[BinPoint]) -> List[BinPoint]:
    """
    Order candidates for assignment: overflowing bins first, then fuller bins.
    The sort is stable, so ties keep their input order.
    """
    return sorted(bins, key=lambda b: (not b.overflow, -b.fill_level))


def assign_bins_to_drivers(
    bins: Sequence[BinPoint],
    drivers: Sequence[DriverStart],
    max_stops: int,
) -> Tuple[Dict[int, List[BinPoint]], List[BinPoint]]:
    """
    Greedily hand each bin to the nearest driver that still has capacity.

    A driver's position starts at their start location and moves to the last
    bin they received. Equal distances go to the driver listed first.

    Args:
        bins: Candidates in priority order
        drivers: Available drivers in a stable order
        max_stops: Maximum number of bins per driver

    Returns:
        (driver_id -> bins in assignment order, bins no driver could take)
    """
    assignment: Dict[int, List[BinPoint]] = {d.driver_id: [] for d in drivers}
    cursors: Dict[int, Tuple[float, float]] = {
        d.driver_id: (d.latitude, d.longitude) for d in drivers
    }
    unassigned: List[BinPoint] = []

    for bin_point in bins:
        best_driver = None
        best_dist = float("inf")

        for driver in drivers:
            if len(assignment[driver.driver_id]) >= max_stops:
                continue
            lat, lng = cursors[driver.driver_id]
            dist = haversine_meters(lat, lng, bin_point.latitude, bin_point.longitude)
            if dist < best_dist:
                best_dist = dist
                best_driver = driver.driver_id

        if best_driver is None:
            unassigned.append(bin_point)
            continue

        assignment[best_driver].append(bin_point)
        cursors[best_driver] = (bin_point.latitude, bin_point.longitude)

    return assignment, unassigned


def merge_single_stop_routes(
    assignment: Dict[int, List[BinPoint]],
    max_stops: int,
) -> Tuple[Dict[int, List[BinPoint]], List[BinPoint]]:
    """
    Remove routes that would have fewer than two stops.

    Empty assignments are dropped. A lone bin moves to the smallest other
    non-empty route with spare capacity; when there is none, the bin is
    dropped from this run.

    Returns:
        (driver_id -> bins for routes with at least two stops, dropped bins)
    """
    routes = {driver_id: list(stops) for driver_id, stops in assignment.items() if stops}
    dropped: List[BinPoint] = []

    single_drivers = [driver_id for driver_id, stops in routes.items() if len(stops) == 1]
    for driver_id in single_drivers:
        stops = routes[driver_id]
        if len(stops) != 1:
            # Already received a merged bin
            continue

        targets = [
            other_id for other_id, other_stops in routes.items()
            if other_id != driver_id and other_stops and len(other_stops) < max_stops
        ]
        lonely_bin = stops.pop()
        if targets:
            target = min(targets, key=lambda other_id: len(routes[other_id]))
            routes[target].append(lonely_bin)
        else:
            dropped.append(lonely_bin)

    kept = {
        driver_id: stops for driver_id, stops in routes.items()
        if len(stops) >= MIN_STOPS_PER_ROUTE
    }
    for driver_id, stops in routes.items():
        if driver_id not in kept:
            dropped.extend(stops)

    return kept, dropped


def order_stops_by_nearest_neighbor(
    stops: Sequence[BinPoint],
    start_lat: float,
    start_lng: float,
) -> List[BinPoint]:
    """
    Order stops using nearest neighbor heuristic for TSP approximation.

    Args:
        stops: Bins assigned to one driver
        start_lat: Starting latitude (driver position or depot)
        start_lng: Starting longitude

    Returns:
        Ordered list of bins. Equal distances keep input order.
    """
    if len(stops) <= 1:
        return list(stops)

    remaining = list(stops)
    ordered = []
    current_lat, current_lng = start_lat, start_lng

    while remaining:
        # Find nearest bin
        min_dist = float("inf")
        nearest_idx = 0

        for i, candidate in enumerate(remaining):
            dist = haversine_meters(
                current_lat, current_lng,
                candidate.latitude, candidate.longitude,
            )
            if dist < min_dist:
                min_dist = dist
                nearest_idx = i

        # Move to nearest bin
        nearest = remaining.pop(nearest_idx)
        ordered.append(nearest)
        current_lat = nearest.latitude
        current_lng = nearest.longitude

    return ordered


def plan_routes(
    bins: Sequence[BinPoint],
    drivers: Sequence[DriverStart],
    max_stops: int,
) -> RoutePlan:
    """
    Build ordered routes from candidate bins and available drivers.

    Args:
        bins: Candidate bins (already filtered by threshold/overflow)
        drivers: Available drivers with start positions
        max_stops: Maximum stops per route

    Returns:
        RoutePlan with one entry per driver that ends up with 2+ stops,
        in driver order.
    """
    prioritized = prioritize_bins(bins)
    plan = RoutePlan(bins_considered=len(prioritized))

    if not prioritized or not drivers:
        plan.unassigned = list(prioritized)
        return plan

    assignment, unassigned = assign_bins_to_drivers(prioritized, drivers, max_stops)
    merged, dropped = merge_single_stop_routes(assignment, max_stops)
    plan.unassigned = unassigned + dropped

    for driver in drivers:
        stops = merged.get(driver.driver_id)
        if not stops:
            continue
        ordered = order_stops_by_nearest_neighbor(stops, driver.latitude, driver.longitude)
        plan.routes.append(DriverRoutePlan(driver_id=driver.driver_id, stops=ordered))

    return plan

"""
Nearest-neighbor tour builder.

A greedy TSP approximation: from the current position, always move to the
closest stop not yet visited. It does not guarantee the shortest tour, but for
identical input it always returns the same order, which the saved tours and
the calendar rely on.
"""

from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from typing import Optional

from .geo import Coordinate, distance_km


@dataclass(frozen=True)
class Stop:
    id: Hashable
    location: Coordinate


def _nearest_index(origin: Coordinate, candidates: list[Stop]) -> int:
    # Strict comparison keeps the first stop found at the minimum distance
    best_index = 0
    best_distance = distance_km(origin, candidates[0].location)
    for index in range(1, len(candidates)):
        d = distance_km(origin, candidates[index].location)
        if d < best_distance:
            best_index = index
            best_distance = d
    return best_index


def nearest_neighbor_order(stops: Sequence[Stop], start: Optional[Coordinate] = None) -> list:
    """
    Order stops greedily by proximity.

    Args:
        stops: Stops to visit, in the caller's order
        start: Optional starting position; it is not part of the result

    Returns:
        Every stop id exactly once, in visiting order
    """
    if not stops:
        return []

    unvisited = list(stops)
    if start is not None:
        current = unvisited.pop(_nearest_index(start, unvisited))
    else:
        current = unvisited.pop(0)

    route = [current.id]
    while unvisited:
        current = unvisited.pop(_nearest_index(current.location, unvisited))
        route.append(current.id)

    return route


def route_distance_km(order: Sequence, locations: dict) -> float:
    """Sum of consecutive legs along ``order``; ids missing from ``locations`` are skipped"""
    total = 0.0
    for current_id, next_id in zip(order, order[1:]):
        current = locations.get(current_id)
        following = locations.get(next_id)
        if current is not None and following is not None:
            total += distance_km(current, following)
    return total

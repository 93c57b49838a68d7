"""Deduplication logic - Pure functions.

This module handles logic for determining which earthquakes have already
been announced, and for keeping the tracked-id list bounded.
All functions are pure with no side effects.

Note: The actual persistence of tracked IDs is handled by the imperative
shell (TrackedQuakeStore). This module only contains the pure logic.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta

from src.core.earthquake import Earthquake
from src.core.geo import calculate_distance


# Default cap on the number of tracked earthquake IDs
DEFAULT_MAX_TRACKED = 1000

# Two reports from different sources within all of these tolerances are
# taken to be the same earthquake
SAME_EVENT_MAX_TIME_DIFF = timedelta(minutes=2)
SAME_EVENT_MAX_DISTANCE_KM = 100.0
SAME_EVENT_MAX_MAGNITUDE_DIFF = 1.0


def filter_already_tracked(
    earthquakes: list[Earthquake],
    is_tracked: Callable[[str], bool],
) -> list[Earthquake]:
    """Filter out earthquakes that have already been announced.

    Pure function (given a pure membership predicate). Input order is kept.

    Args:
        earthquakes: List of earthquakes to filter
        is_tracked: Membership test for already-announced IDs

    Returns:
        List of earthquakes that haven't been announced yet
    """
    return [e for e in earthquakes if not is_tracked(e.id)]


def compute_ids_to_evict(
    tracked_ids: list[str],
    max_tracked: int = DEFAULT_MAX_TRACKED,
) -> list[str]:
    """Compute which tracked IDs fall outside the cap.

    Pure function.

    Eviction is by insertion order (FIFO), not by last lookup.

    Args:
        tracked_ids: Tracked IDs, oldest first
        max_tracked: Maximum IDs to keep

    Returns:
        The oldest IDs that must be dropped (empty if within the cap)
    """
    excess = len(tracked_ids) - max_tracked
    if excess <= 0:
        return []
    return tracked_ids[:excess]


def append_with_cap(
    tracked_ids: list[str],
    new_id: str,
    max_tracked: int = DEFAULT_MAX_TRACKED,
) -> list[str]:
    """Append an ID to the tracked list and apply the FIFO cap.

    Pure function - returns a new list without modifying the input.
    Appending an ID that is already tracked returns an unchanged copy.

    Args:
        tracked_ids: Tracked IDs, oldest first
        new_id: ID to record
        max_tracked: Maximum IDs to keep

    Returns:
        New list of tracked IDs, oldest first, at most max_tracked long
    """
    if new_id in tracked_ids:
        return list(tracked_ids)

    updated = [*tracked_ids, new_id]
    evicted = len(compute_ids_to_evict(updated, max_tracked))
    return updated[evicted:]


@dataclass
class SourceMerge:
    """Earthquakes merged across sources.

    Attributes:
        earthquakes: One record per physical earthquake, oldest first
        aliases: ID of each dropped duplicate -> ID of the record kept for it
    """
    earthquakes: list[Earthquake] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)


def is_same_event(first: Earthquake, second: Earthquake) -> bool:
    """Check if two reports from different sources describe one earthquake.

    Reports from the same source are never merged: each source already gives
    every event a stable ID of its own.

    Pure function.
    """
    if first.source == second.source:
        return False

    if abs(first.time - second.time) > SAME_EVENT_MAX_TIME_DIFF:
        return False

    if abs(first.magnitude - second.magnitude) > SAME_EVENT_MAX_MAGNITUDE_DIFF:
        return False

    distance = calculate_distance(
        first.latitude, first.longitude,
        second.latitude, second.longitude,
    )
    return distance <= SAME_EVENT_MAX_DISTANCE_KM


def merge_sources(
    earthquakes: list[Earthquake],
    is_tracked: Callable[[str], bool],
) -> SourceMerge:
    """Collapse reports of one earthquake from different sources into one.

    Pure function (given a pure membership predicate).

    An already-announced report wins over a new one, so a late report from a
    second source is not announced again. Otherwise the report listed first
    wins, which makes the source order the priority order.

    Args:
        earthquakes: Reports from all sources, IDs unique
        is_tracked: Membership test for already-announced IDs

    Returns:
        SourceMerge with the kept records oldest first
    """
    # Stable sort: tracked reports first, source order kept within each group
    candidates = sorted(earthquakes, key=lambda e: not is_tracked(e.id))

    kept: list[Earthquake] = []
    aliases: dict[str, str] = {}
    for candidate in candidates:
        match = next((e for e in kept if is_same_event(e, candidate)), None)
        if match is None:
            kept.append(candidate)
        else:
            aliases[candidate.id] = match.id

    return SourceMerge(
        earthquakes=sorted(kept, key=lambda e: e.time),
        aliases=aliases,
    )

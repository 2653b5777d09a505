"""
Activity feed ranking
Blends report recency and proximity to the user into one sort order.
"""

import logging
from typing import List, Optional, Sequence, TypeVar

from communitywatch.core.date_utils import TIME_OF_DAY_PATTERN
from communitywatch.core.geo_utils import Coordinates, distance_between

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24.0

DEFAULT_TIME_WEIGHT = 0.5
DEFAULT_DISTANCE_WEIGHT = 0.5

R = TypeVar("R")


def parse_time_of_day(value: Optional[str]) -> Optional[float]:
    """
    Parse the leading ``HH:MM[:SS]`` of a report time string.

    Args:
        value: Time string such as ``"14:35:12 GMT+0200 (SAST)"``

    Returns:
        Hours since midnight, or None if the string is malformed
    """
    if not isinstance(value, str):
        return None

    match = TIME_OF_DAY_PATTERN.match(value)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        return None

    return hours + minutes / 60.0 + seconds / 3600.0


def _normalize(values: List[float]) -> List[float]:
    peak = max(values) if values else 0.0
    if peak <= 0:
        return [0.0 for _ in values]
    return [v / peak for v in values]


def rank_reports(
    reports: Sequence[R],
    user_coords: Optional[Coordinates],
    time_weight: float = DEFAULT_TIME_WEIGHT,
    distance_weight: float = DEFAULT_DISTANCE_WEIGHT,
    reference_time: Optional[str] = None,
) -> List[R]:
    """
    Order reports for the activity feed, newest and nearest first.

    Each report gets an age in days (reference time minus report time) and a
    haversine distance in kilometers from ``user_coords``. Both are scaled by
    the largest value in the batch, weighted, and summed; reports are sorted
    by that score ascending. The sort is stable, so reports with identical
    time and location keep their input order.

    A report whose time string cannot be parsed contributes a zero time term
    instead of failing the whole feed.

    Args:
        reports: Records exposing ``time`` (str) and ``coords`` (Coordinates)
        user_coords: Position to measure distance from; None drops the
            distance term
        time_weight: Weight of the normalized age
        distance_weight: Weight of the normalized distance
        reference_time: Time string to measure age from; defaults to the
            latest parseable report time

    Returns:
        A new list holding the same reports in ranked order
    """
    if time_weight < 0 or distance_weight < 0:
        raise ValueError("Ranking weights must be non-negative")

    if len(reports) < 2:
        return list(reports)

    times = [parse_time_of_day(getattr(r, "time", None)) for r in reports]
    malformed = sum(1 for t in times if t is None)
    if malformed:
        logger.debug(f"{malformed} report(s) with unparseable time, ranking them on distance only")

    reference = parse_time_of_day(reference_time) if reference_time else None
    if reference is None:
        parsed = [t for t in times if t is not None]
        reference = max(parsed) if parsed else 0.0

    ages = [
        max(0.0, (reference - t) / HOURS_PER_DAY) if t is not None else 0.0
        for t in times
    ]

    if user_coords is None:
        distances = [0.0] * len(reports)
    else:
        distances = [distance_between(user_coords, r.coords) for r in reports]

    age_terms = _normalize(ages)
    distance_terms = _normalize(distances)

    scores = [
        time_weight * a + distance_weight * d
        for a, d in zip(age_terms, distance_terms)
    ]

    order = sorted(range(len(reports)), key=lambda i: scores[i])
    return [reports[i] for i in order]

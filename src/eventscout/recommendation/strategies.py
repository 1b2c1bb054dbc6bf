"""
Tiered server-side recommendation strategies.

Each tier is a named function ``(context) -> list | None`` that queries the
provider with progressively looser filters:

    full      categories + location      accepted with >= 1 event
    location  location only              accepted with >= min(5, limit)
    category  categories only            accepted with >= 1 event
    popular   no filters, soonest first  always accepted

``None`` means the tier did not apply or returned too few events.
``run_tiers`` evaluates them in order and stops at the first accepted
result. A ``SourceError`` in any tier but the last counts as zero results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from eventscout.ingestion.errors import SourceError
from eventscout.schemas.event import Coordinates, Event, LocationDetail, UserPreferences

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = "50"
DEFAULT_UNIT = "miles"
MIN_LOCATION_RESULTS = 5
RELEVANCE_SORT = "relevance,desc"
DATE_SORT = "date,asc"

EventSearch = Callable[[Dict[str, Any]], List[Event]]


@dataclass
class RecommendationContext:
    """
    Everything a tier needs; ``search`` runs one provider query and returns
    normalized upcoming events.
    """
    search: EventSearch
    preferences: Optional[UserPreferences] = None
    limit: int = 10
    location_details: List[LocationDetail] = field(default_factory=list)
    current_coords: Optional[Coordinates] = None
    radius: str = DEFAULT_RADIUS
    unit: str = DEFAULT_UNIT
    min_location_results: int = MIN_LOCATION_RESULTS

    @property
    def categories(self) -> List[str]:
        return list(self.preferences.categories) if self.preferences else []

    @property
    def locations(self) -> List[str]:
        return list(self.preferences.locations) if self.preferences else []

    @property
    def primary_coordinates(self) -> Optional[Tuple[float, float]]:
        """Primary detailed location's coordinates, else the stored current ones."""
        if self.locations and self.location_details:
            primary = self.location_details[0]
            if primary.has_coordinates:
                return primary.latitude, primary.longitude
        if self.current_coords is not None:
            return self.current_coords.lat, self.current_coords.lon
        return None


@dataclass(frozen=True)
class Tier:
    name: str
    run: Callable[[RecommendationContext], Optional[List[Event]]]


# ============================================================================
# QUERY PARAMETERS
# ============================================================================


def common_params(limit: int) -> Dict[str, Any]:
    return {
        "size": limit,
        "sort": RELEVANCE_SORT,
        "includeTBA": "no",
        "includeTBD": "no",
    }


def build_location_params(ctx: RecommendationContext) -> Dict[str, Any]:
    """``geoPoint`` + radius when coordinates are known, else ``city``."""
    coords = ctx.primary_coordinates
    if coords is not None:
        lat, lon = coords
        return {"geoPoint": f"{lat},{lon}", "radius": ctx.radius, "unit": ctx.unit}
    if ctx.locations:
        return {"city": ctx.locations[0]}
    return {}


def build_category_params(ctx: RecommendationContext) -> Dict[str, Any]:
    if not ctx.categories:
        return {}
    return {"classificationId": ",".join(ctx.categories)}


def build_recommendation_query_params(ctx: RecommendationContext) -> Dict[str, Any]:
    """Combined category and location query used by the ``full`` tier."""
    return {
        **common_params(ctx.limit),
        **build_category_params(ctx),
        **build_location_params(ctx),
    }


# ============================================================================
# TIERS
# ============================================================================


def _fetch(ctx: RecommendationContext, params: Dict[str, Any]) -> List[Event]:
    events = ctx.search(dict(params))
    return [e for e in events if not e.is_offsale]


def full_strategy(ctx: RecommendationContext) -> Optional[List[Event]]:
    events = _fetch(ctx, build_recommendation_query_params(ctx))
    return events or None


def location_strategy(ctx: RecommendationContext) -> Optional[List[Event]]:
    if not ctx.locations:
        return None
    events = _fetch(ctx, {**common_params(ctx.limit), **build_location_params(ctx)})
    threshold = min(ctx.min_location_results, ctx.limit)
    if len(events) < threshold:
        logger.info(f"Location tier found {len(events)} events, need {threshold}")
        return None
    return events


def category_strategy(ctx: RecommendationContext) -> Optional[List[Event]]:
    if not ctx.categories:
        return None
    events = _fetch(ctx, {**common_params(ctx.limit), **build_category_params(ctx)})
    return events or None


def popular_strategy(ctx: RecommendationContext) -> Optional[List[Event]]:
    return _fetch(ctx, {**common_params(ctx.limit), "sort": DATE_SORT})


DEFAULT_TIERS: Tuple[Tier, ...] = (
    Tier("full", full_strategy),
    Tier("location", location_strategy),
    Tier("category", category_strategy),
    Tier("popular", popular_strategy),
)


def run_tiers(
    tiers: Sequence[Tier], ctx: RecommendationContext
) -> Tuple[List[Event], str]:
    """
    Evaluate tiers in order and return the first accepted result.

    Returns:
        (events, name of the tier that produced them); the last tier's name
        with an empty list when nothing was accepted

    Raises:
        SourceError: Only when the last tier fails
    """
    if not tiers:
        raise ValueError("At least one recommendation tier is required")

    last = len(tiers) - 1
    for index, tier in enumerate(tiers):
        try:
            events = tier.run(ctx)
        except SourceError as e:
            if index == last:
                raise
            logger.warning(f"Tier {tier.name} failed, treating as empty: {e.message}")
            continue

        if events is not None:
            logger.info(f"Tier {tier.name} produced {len(events)} events")
            return events, tier.name

        logger.info(f"Tier {tier.name} yielded nothing, falling through")

    return [], tiers[last].name

"""
Recommendation engine.

Chooses between the tiered provider strategies (when a search pipeline is
available) and client-side scoring over a given pool. Stores are injected
so the engine never reaches for ambient state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
import logging

from eventscout.configs import Config
from eventscout.ingestion.deduplication import IdDeduplicator
from eventscout.ingestion.pipeline import EventSearchPipeline, SearchRequest
from eventscout.schemas.event import Event, UserPreferences
from eventscout.storage.preferences import (
    FavoritesStore,
    LocationStore,
    PreferenceStore,
    SessionStore,
)
from .scoring import get_client_recommendations
from .strategies import DEFAULT_TIERS, RecommendationContext, Tier, run_tiers

logger = logging.getLogger(__name__)

CLIENT_STRATEGY = "client"


@dataclass
class Recommendation:
    events: List[Event] = field(default_factory=list)
    strategy: str = CLIENT_STRATEGY

    @property
    def count(self) -> int:
        return len(self.events)


class RecommendationEngine:
    """
    Produce ranked, deduplicated recommendations for the stored user.

    Example:
        >>> engine = RecommendationEngine(
        ...     pipeline=EventSearchPipeline(adapter),
        ...     preference_store=PreferenceStore(store),
        ...     favorites_store=FavoritesStore(store),
        ...     location_store=LocationStore(store),
        ... )
        >>> engine.recommend(limit=10).strategy
        'full'
    """

    def __init__(
        self,
        pipeline: Optional[EventSearchPipeline] = None,
        preference_store: Optional[PreferenceStore] = None,
        favorites_store: Optional[FavoritesStore] = None,
        location_store: Optional[LocationStore] = None,
        session_store: Optional[SessionStore] = None,
        tiers: Sequence[Tier] = DEFAULT_TIERS,
    ):
        self.pipeline = pipeline
        self.preference_store = preference_store
        self.favorites_store = favorites_store
        self.location_store = location_store
        self.session_store = session_store
        self.tiers = tuple(tiers)
        self.settings = Config.get_section("recommendations")
        self.deduplicator = IdDeduplicator()

    @property
    def default_limit(self) -> int:
        return int(self.settings.get("default_limit", 10))

    def _load_preferences(self) -> Optional[UserPreferences]:
        if self.preference_store is None:
            return None
        return self.preference_store.get_preferences()

    def _history_ids(self) -> List[str]:
        """Saved ids plus the stored profile's saved and attended events."""
        ids: List[str] = []
        if self.favorites_store is not None:
            ids.extend(self.favorites_store.get_saved_event_ids())
        if self.session_store is not None:
            user = self.session_store.get_user()
            if user is not None:
                ids.extend(user.saved_events)
                ids.extend(user.attended_events)
        return ids

    def recommend(
        self,
        preferences: Optional[UserPreferences] = None,
        limit: Optional[int] = None,
        pool: Optional[Sequence[Event]] = None,
        include_history: bool = False,
        now: Optional[datetime] = None,
    ) -> Recommendation:
        """
        Recommend events.

        Args:
            preferences: Preferences to use (defaults to the stored ones)
            limit: Max events (defaults to the configured limit)
            pool: Already-fetched events; switches to client-side scoring
            include_history: Keep already saved/attended events (pool mode)
            now: Reference instant for upcoming checks

        Returns:
            Recommendation with events and the strategy that produced them

        Raises:
            SourceError: When the final provider tier fails
            ValueError: With neither a pool nor a search pipeline
        """
        if limit is None:
            limit = self.default_limit
        if preferences is None:
            preferences = self._load_preferences()

        if pool is not None:
            events = get_client_recommendations(
                self.deduplicator.deduplicate(list(pool)),
                preferences,
                saved_ids=self._history_ids(),
                limit=limit,
                include_history=include_history,
                now=now,
            )
            return Recommendation(events=events, strategy=CLIENT_STRATEGY)

        if self.pipeline is None:
            raise ValueError("Recommendations need an event pool or a search pipeline")

        ctx = self._build_context(preferences, limit, now)
        self._remember_primary_coordinates(ctx)

        events, strategy = run_tiers(self.tiers, ctx)
        events = self.deduplicator.deduplicate(events)[:limit]
        logger.info(f"Recommended {len(events)} events using '{strategy}' strategy")
        return Recommendation(events=events, strategy=strategy)

    def _build_context(
        self,
        preferences: Optional[UserPreferences],
        limit: int,
        now: Optional[datetime],
    ) -> RecommendationContext:
        pipeline = self.pipeline

        def search(params: Dict[str, Any]) -> List[Event]:
            size = params.pop("size", limit)
            sort = params.pop("sort", None)
            request = SearchRequest(size=size, sort=sort, params=params)
            return pipeline.search(request, now=now).events

        details = []
        coords = None
        if self.location_store is not None:
            details = self.location_store.get_location_details()
            coords = self.location_store.get_current_coords()

        return RecommendationContext(
            search=search,
            preferences=preferences,
            limit=limit,
            location_details=details,
            current_coords=coords,
            radius=str(self.settings.get("radius", "50")),
            unit=self.settings.get("unit", "miles"),
            min_location_results=int(self.settings.get("min_location_results", 5)),
        )

    def _remember_primary_coordinates(self, ctx: RecommendationContext) -> None:
        """The full tier reuses the primary location's coordinates as current."""
        if self.location_store is None or not ctx.locations or not ctx.location_details:
            return
        primary = ctx.location_details[0]
        if primary.has_coordinates:
            self.location_store.set_current_coords(primary.latitude, primary.longitude)

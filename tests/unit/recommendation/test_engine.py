"""
Unit tests for the RecommendationEngine.

The search pipeline is mocked; stores are in-memory.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from eventscout.ingestion.errors import SourceError
from eventscout.ingestion.pipeline import EventSearchPipeline, SearchResult
from eventscout.recommendation import CLIENT_STRATEGY, RecommendationEngine
from eventscout.schemas.event import LocationDetail, PageInfo, UserPreferences, UserProfile
from eventscout.schemas.taxonomy import MUSIC_SEGMENT_ID, SPORTS_SEGMENT_ID
from eventscout.storage import (
    FavoritesStore,
    InMemoryStore,
    LocationStore,
    PreferenceStore,
    SessionStore,
)

NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def stores(store):
    return {
        "preference_store": PreferenceStore(store),
        "favorites_store": FavoritesStore(store),
        "location_store": LocationStore(store),
        "session_store": SessionStore(store),
    }


@pytest.fixture
def pipeline():
    return MagicMock(spec=EventSearchPipeline)


def _answer(pipeline, by_tier):
    """Make the pipeline answer per query shape: full, location, category or popular."""

    def search(request, now=None):
        params = request.params
        if "classificationId" in params and ("city" in params or "geoPoint" in params):
            events = by_tier.get("full", [])
        elif "city" in params or "geoPoint" in params:
            events = by_tier.get("location", [])
        elif "classificationId" in params:
            events = by_tier.get("category", [])
        else:
            events = by_tier.get("popular", [])
        return SearchResult(events=list(events), total=len(events), page=PageInfo())

    pipeline.search.side_effect = search


class TestTieredRecommendations:
    """Tests for recommendations through the pipeline."""

    def test_location_tier_reported(self, pipeline, stores, create_event):
        stores["preference_store"].save_preferences(
            UserPreferences(categories=[MUSIC_SEGMENT_ID], locations=["Chicago"])
        )
        _answer(pipeline, {"location": [create_event(id=f"L{i}") for i in range(6)]})

        engine = RecommendationEngine(pipeline=pipeline, **stores)
        rec = engine.recommend(limit=10, now=NOW)

        assert rec.strategy == "location"
        assert rec.count == 6

    def test_request_shape(self, pipeline, stores, create_event):
        stores["preference_store"].save_preferences(
            UserPreferences(categories=[MUSIC_SEGMENT_ID], locations=["Chicago"])
        )
        _answer(pipeline, {"full": [create_event()]})

        RecommendationEngine(pipeline=pipeline, **stores).recommend(limit=4, now=NOW)

        request = pipeline.search.call_args.args[0]
        assert request.size == 4
        assert request.sort == "relevance,desc"
        assert request.params == {
            "includeTBA": "no",
            "includeTBD": "no",
            "classificationId": MUSIC_SEGMENT_ID,
            "city": "Chicago",
        }
        assert pipeline.search.call_args.kwargs["now"] == NOW

    def test_dedups_and_truncates(self, pipeline, stores, create_event):
        _answer(
            pipeline,
            {"popular": [create_event(id="A"), create_event(id="A"), create_event(id="B"), create_event(id="C")]},
        )

        rec = RecommendationEngine(pipeline=pipeline, **stores).recommend(limit=2, now=NOW)

        assert [e.id for e in rec.events] == ["A", "B"]

    def test_primary_coordinates_become_current(self, pipeline, stores, create_event):
        stores["preference_store"].save_preferences(UserPreferences(locations=["Denver"]))
        stores["location_store"].save_location_details(
            [LocationDetail(city="Denver", latitude=39.74, longitude=-104.99)]
        )
        _answer(pipeline, {"location": [create_event()]})

        RecommendationEngine(pipeline=pipeline, **stores).recommend(now=NOW)

        coords = stores["location_store"].get_current_coords()
        assert (coords.lat, coords.lon) == (39.74, -104.99)
        assert pipeline.search.call_args.args[0].params["geoPoint"] == "39.74,-104.99"

    def test_explicit_preferences_override_store(self, pipeline, stores, create_event):
        stores["preference_store"].save_preferences(UserPreferences(categories=[MUSIC_SEGMENT_ID]))
        _answer(pipeline, {"category": [create_event(id="S")]})

        rec = RecommendationEngine(pipeline=pipeline, **stores).recommend(
            preferences=UserPreferences(categories=[SPORTS_SEGMENT_ID]), now=NOW
        )

        assert rec.strategy == "full"
        assert pipeline.search.call_args.args[0].params["classificationId"] == SPORTS_SEGMENT_ID

    def test_last_tier_failure_propagates(self, pipeline, stores):
        pipeline.search.side_effect = SourceError.upstream_fault("down", 503)

        with pytest.raises(SourceError):
            RecommendationEngine(pipeline=pipeline, **stores).recommend(now=NOW)

    def test_requires_pipeline_or_pool(self, stores):
        with pytest.raises(ValueError):
            RecommendationEngine(**stores).recommend(now=NOW)


class TestClientRecommendations:
    """Tests for recommendations from a given pool."""

    def test_uses_client_strategy(self, stores, create_event):
        stores["preference_store"].save_preferences(UserPreferences(categories=[MUSIC_SEGMENT_ID]))
        pool = [create_event(id="S", category_id=SPORTS_SEGMENT_ID), create_event(id="M")]

        rec = RecommendationEngine(**stores).recommend(pool=pool, now=NOW)

        assert rec.strategy == CLIENT_STRATEGY
        assert [e.id for e in rec.events] == ["M", "S"]

    def test_excludes_saved_and_profile_history(self, stores, create_event):
        stores["favorites_store"].add("saved")
        stores["session_store"].log_in(
            UserProfile(id="u1", saved_events=["profile-saved"], attended_events=["attended"])
        )
        pool = [
            create_event(id=event_id)
            for event_id in ("saved", "profile-saved", "attended", "fresh")
        ]

        rec = RecommendationEngine(**stores).recommend(pool=pool, now=NOW)
        assert [e.id for e in rec.events] == ["fresh"]

        rec = RecommendationEngine(**stores).recommend(pool=pool, include_history=True, now=NOW)
        assert rec.count == 4

    def test_pool_is_deduplicated(self, stores, create_event):
        pool = [create_event(id="A"), create_event(id="A")]
        rec = RecommendationEngine(**stores).recommend(pool=pool, now=NOW)
        assert rec.count == 1

    def test_default_limit_from_settings(self, stores, create_event):
        pool = [create_event(id=f"E{i:02d}") for i in range(15)]
        rec = RecommendationEngine(**stores).recommend(pool=pool, now=NOW)
        assert rec.count == 10

    def test_explicit_zero_limit(self, stores, create_event):
        pool = [create_event(id=f"E{i}") for i in range(3)]
        rec = RecommendationEngine(**stores).recommend(pool=pool, limit=0, now=NOW)
        assert rec.events == []

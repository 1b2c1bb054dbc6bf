"""
Recommendation engine: tiered provider strategies and client-side scoring.
"""

from .engine import CLIENT_STRATEGY, Recommendation, RecommendationEngine
from .scoring import (
    calculate_event_score,
    event_matches_user_preferences,
    get_client_recommendations,
    get_popular_events,
)
from .strategies import (
    DEFAULT_TIERS,
    RecommendationContext,
    Tier,
    build_location_params,
    build_recommendation_query_params,
    run_tiers,
)

__all__ = [
    "CLIENT_STRATEGY",
    "DEFAULT_TIERS",
    "Recommendation",
    "RecommendationContext",
    "RecommendationEngine",
    "Tier",
    "build_location_params",
    "build_recommendation_query_params",
    "calculate_event_score",
    "event_matches_user_preferences",
    "get_client_recommendations",
    "get_popular_events",
    "run_tiers",
]

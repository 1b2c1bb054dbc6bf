# schemas/taxonomy.py
"""
Ticketmaster segment catalogue.

The provider's classification tree is segment -> genre -> subGenre. Only the
five top-level segments are known statically; everything else is resolved
from the classifications endpoint at runtime.
"""

from typing import Dict, FrozenSet, List, Optional, Sequence

from eventscout.schemas.event import CategoryReference, ClassificationSummary

MUSIC_SEGMENT_ID = "KZFzniwnSyZfZ7v7nJ"
SPORTS_SEGMENT_ID = "KZFzniwnSyZfZ7v7nE"
ARTS_THEATRE_SEGMENT_ID = "KZFzniwnSyZfZ7v7na"
FILM_SEGMENT_ID = "KZFzniwnSyZfZ7v7nn"
MISCELLANEOUS_SEGMENT_ID = "KZFzniwnSyZfZ7v7n1"

SEGMENT_NAMES: Dict[str, str] = {
    MUSIC_SEGMENT_ID: "Music",
    SPORTS_SEGMENT_ID: "Sports",
    ARTS_THEATRE_SEGMENT_ID: "Arts & Theatre",
    FILM_SEGMENT_ID: "Film",
    MISCELLANEOUS_SEGMENT_ID: "Miscellaneous",
}

# Segments that match any event filed under them once the user selects the
# segment itself, whatever the event's genre.
UMBRELLA_SEGMENT_IDS: FrozenSet[str] = frozenset(
    {MUSIC_SEGMENT_ID, ARTS_THEATRE_SEGMENT_ID, FILM_SEGMENT_ID}
)


def get_category_name(category_id: str) -> str:
    """Return the readable name for a segment ID, or the ID itself."""
    return SEGMENT_NAMES.get(category_id, category_id)


def get_category_display_name(category_id: str) -> str:
    """
    Return a label suitable for display when category data isn't loaded yet.

    Unknown IDs render as ``Category <last 4 chars>``.
    """
    name = SEGMENT_NAMES.get(category_id)
    if name:
        return name
    return f"Category {category_id[-4:]}"


def is_umbrella_segment(category_id: str) -> bool:
    return category_id in UMBRELLA_SEGMENT_IDS


def get_category_genres(
    categories: Sequence[ClassificationSummary], category_id: str
) -> List[CategoryReference]:
    """
    Get genres for a specific segment.

    Args:
        categories: Classification summaries returned by the provider
        category_id: Segment ID to look up

    Returns:
        Genres listed under that segment (empty when the segment is unknown)
    """
    match: Optional[ClassificationSummary] = next(
        (c for c in categories if c.segment.id == category_id), None
    )
    return list(match.genres) if match else []

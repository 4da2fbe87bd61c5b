# src/search/ranker.py
# Responsibility: Caps datastore matches and shapes them into lean suggestion payloads.

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from src.search.dispatcher import clamp_limit

MIN_SUGGESTIONS = 1
MAX_SUGGESTIONS = 10

# Keys copied straight from the datastore row into each suggestion.
_PASSTHROUGH_KEYS = (
    "title",
    "item_type",
    "price_value",
    "price_currency",
    "dealer_name",
    "dealer_domain",
    "url",
    "cert_type",
    "smith",
    "tosogu_maker",
)


@dataclass
class SuggestionResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0

    @classmethod
    def empty(cls) -> "SuggestionResult":
        return cls(items=[], total=0)


def _first_image(record: Mapping[str, Any]) -> Optional[str]:
    """Prefers our stored copy over the dealer-hosted image."""
    for key in ("stored_images", "images"):
        images = record.get(key)
        if isinstance(images, str):
            return images or None
        if images:
            return images[0]
    return None


def to_suggestion(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Projects a matched listing row into the suggestion shape.

    Args:
        record (Mapping): Row from the listing repository.

    Returns:
        Dict[str, Any]: Suggestion with a string id and a single image_url.
    """
    suggestion: Dict[str, Any] = {"id": str(record.get("id", ""))}
    for key in _PASSTHROUGH_KEYS:
        suggestion[key] = record.get(key)
    suggestion["title"] = suggestion["title"] or ""
    suggestion["dealer_name"] = suggestion["dealer_name"] or ""
    suggestion["url"] = suggestion["url"] or ""
    suggestion["image_url"] = _first_image(record)
    return suggestion


def rank(records: Sequence[Mapping[str, Any]], total: Optional[int], limit: Any) -> SuggestionResult:
    """
    Caps the recency-ordered matches and keeps the datastore's total.

    No re-sorting or scoring is done; the datastore order is final.

    Args:
        records: Rows already ordered by first_seen_at DESC.
        total: Exact match count reported by the datastore.
        limit: Requested cap, clamped to 1..10.

    Returns:
        SuggestionResult
    """
    cap = clamp_limit(limit, minimum=MIN_SUGGESTIONS, maximum=MAX_SUGGESTIONS)
    items = [to_suggestion(record) for record in records[:cap]]
    reported = total if total is not None else len(records)
    return SuggestionResult(items=items, total=max(reported, len(items)))

"""Filtering logic for property listings."""

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def filter_by_min_bedrooms(
    listings: list[dict[str, Any]], min_beds: int | float
) -> list[dict[str, Any]]:
    """Keep listings with at least `min_beds` bedrooms. Unknown counts are dropped."""
    return [
        listing for listing in listings
        if listing.get("beds") is not None and listing["beds"] >= min_beds
    ]


def filter_by_price_range(
    listings: list[dict[str, Any]], min_price: int | float, max_price: int | float
) -> list[dict[str, Any]]:
    """Keep listings priced within [min_price, max_price], both ends inclusive."""
    return [
        listing for listing in listings
        if listing.get("price") is not None and min_price <= listing["price"] <= max_price
    ]


def filter_by_location(
    listings: list[dict[str, Any]], search_term: str
) -> list[dict[str, Any]]:
    """Case-insensitive substring search over the address and location fields."""
    term = search_term.lower()
    result = []
    for listing in listings:
        address = (listing.get("address") or "").lower()
        location = (listing.get("location") or "").lower()
        if term in address or term in location:
            result.append(listing)
    return result


def _to_number(text: str) -> float | None:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_price_range(value: Any) -> tuple[float, float] | None:
    """
    Parse a price range like "500000-1000000" into (min, max).

    The string is split on the first "-", so negative bounds are not
    supported. A (min, max) pair is accepted as already parsed.
    Returns None when the value is malformed.
    """
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            return None
        low, high = value
        if isinstance(low, bool) or isinstance(high, bool):
            return None
        if not isinstance(low, (int, float)) or not isinstance(high, (int, float)):
            return None
        return low, high

    if not isinstance(value, str):
        return None

    low_text, sep, high_text = value.partition("-")
    if not sep:
        return None
    low = _to_number(low_text)
    high = _to_number(high_text)
    if low is None or high is None:
        return None
    return low, high


def parse_min_bedrooms(value: Any) -> int | None:
    """Parse a positive bedroom count from a string like "3" or an int."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdecimal():
        beds = int(value.strip())
        return beds if beds > 0 else None
    return None


def has_active_filters(criteria: dict[str, Any] | None) -> bool:
    """Check whether any filter criterion is set."""
    if not criteria:
        return False
    return bool(
        criteria.get("bedrooms") or criteria.get("price_range") or criteria.get("location")
    )


def apply_filters(
    listings: list[dict[str, Any]], criteria: dict[str, Any] | None
) -> list[dict[str, Any]]:
    """
    Apply bedroom, price range and location filters in that order.

    Each stage narrows the output of the previous one. Empty criteria
    return the listings unchanged. A bedroom count or price range that
    cannot be parsed matches nothing.
    """
    filtered = list(listings)
    if not criteria:
        return filtered

    bedrooms = criteria.get("bedrooms")
    if bedrooms:
        min_beds = parse_min_bedrooms(bedrooms)
        if min_beds is None:
            logger.warning("Unparseable bedrooms filter %r, no listings match", bedrooms)
            return []
        filtered = filter_by_min_bedrooms(filtered, min_beds)

    price_range = criteria.get("price_range")
    if price_range:
        bounds = parse_price_range(price_range)
        if bounds is None:
            logger.warning("Unparseable price range %r, no listings match", price_range)
            return []
        filtered = filter_by_price_range(filtered, *bounds)

    location = criteria.get("location")
    if location:
        filtered = filter_by_location(filtered, str(location))

    return filtered


class ListingFilter:
    """Filter listings based on one set of user criteria."""

    def __init__(self, criteria: dict[str, Any]):
        self.criteria = criteria

    def matches(self, listing: dict[str, Any]) -> bool:
        """Check if a listing matches all filter criteria."""
        return bool(apply_filters([listing], self.criteria))

    def filter_listings(self, listings: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Apply the criteria dict to listings. Unset keys leave listings through."""
        return apply_filters(listings, self.criteria)

"""Market statistics and price trends by area."""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

UNKNOWN_LOCATION = "Unknown"

# Price moves of at least this many percent count as a trend
TREND_THRESHOLD_PERCENT = 5

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class LocationStats:
    average_price: int
    average_price_per_sqft: int
    count: int


@dataclass(frozen=True)
class MarketTrend:
    area: str
    average_price: int
    count: int
    price_change: int
    price_change_percent: int
    average_price_per_sqft: int
    trend: str  # "up", "down" or "stable"


@dataclass(frozen=True)
class MarketStats:
    total_listings: int
    average_price: int
    average_price_per_sqft: int
    average_trend_percent: int
    total_market_value: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def _mean(values: list[float]) -> int:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def _valid_prices(listings: list[dict[str, Any]]) -> list[float]:
    prices = []
    for listing in listings:
        price = listing.get("price")
        if isinstance(price, (int, float)) and not isinstance(price, bool) and price > 0:
            prices.append(price)
    return prices


def _prices_per_sqft(listings: list[dict[str, Any]]) -> list[float]:
    ratios = []
    for listing in listings:
        price = listing.get("price")
        sqft = listing.get("sqft")
        if price and price > 0 and sqft and sqft > 0:
            ratios.append(price / sqft)
    return ratios


def _created_at(listing: dict[str, Any]) -> datetime:
    """Parse a listing's creation time. Missing or invalid values sort as oldest."""
    value = listing.get("created_at")
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_price_per_sqft(price: float | None, sqft: float | None) -> int:
    """Price per square foot, rounded. Zero when the size is unknown."""
    if not sqft or sqft <= 0 or not price:
        return 0
    return round_half_up(price / sqft)


def calculate_price_change(old_price: float | None, new_price: float) -> tuple[float, int]:
    """
    Absolute and percent change between two prices.

    Returns: (change, percent). Both zero when there is no old price.
    """
    if not old_price or old_price <= 0:
        return 0, 0
    change = new_price - old_price
    return change, round_half_up(change / old_price * 100)


def group_by_location(listings: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Group listings by their location field, 'Unknown' when missing."""
    groups: dict[str, list[dict[str, Any]]] = {}
    for listing in listings:
        key = listing.get("location") or UNKNOWN_LOCATION
        groups.setdefault(key, []).append(listing)
    return groups


def location_stats(listings: list[dict[str, Any]]) -> LocationStats:
    """
    Average price and price per sqft for one group of listings.

    Price per sqft is computed per listing and then averaged. Listings
    without a price or size still count toward `count`.
    """
    return LocationStats(
        average_price=_mean(_valid_prices(listings)),
        average_price_per_sqft=_mean(_prices_per_sqft(listings)),
        count=len(listings),
    )


def classify_trend(price_change_percent: int) -> str:
    if price_change_percent >= TREND_THRESHOLD_PERCENT:
        return "up"
    if price_change_percent <= -TREND_THRESHOLD_PERCENT:
        return "down"
    return "stable"


def analyze_trends(listings: list[dict[str, Any]]) -> list[MarketTrend]:
    """
    Compare recent and older listings in each area.

    Listings in an area are ranked newest first. The first half (at least
    one listing) is the recent cohort, the rest is the older cohort, and
    the trend is the change between their average prices.
    """
    trends = []
    for area, group in group_by_location(listings).items():
        if not group:
            continue
        stats = location_stats(group)

        ranked = sorted(group, key=_created_at, reverse=True)
        midpoint = len(ranked) // 2 or 1
        recent = location_stats(ranked[:midpoint])
        older = location_stats(ranked[midpoint:])

        price_change = recent.average_price - older.average_price
        if older.average_price > 0:
            percent = round_half_up(price_change / older.average_price * 100)
        else:
            percent = 0

        trends.append(MarketTrend(
            area=area,
            average_price=stats.average_price,
            count=stats.count,
            price_change=price_change,
            price_change_percent=percent,
            average_price_per_sqft=stats.average_price_per_sqft,
            trend=classify_trend(percent),
        ))
    return trends


def top_movers(trends: list[MarketTrend], limit: int = 5) -> list[MarketTrend]:
    """Areas with at least two listings, biggest percent moves first."""
    candidates = [t for t in trends if t.count >= 2]
    candidates.sort(key=lambda t: abs(t.price_change_percent), reverse=True)
    return candidates[:limit]


def overall_stats(listings: list[dict[str, Any]]) -> MarketStats:
    """Market-wide averages, total value and the mean area trend."""
    prices = _valid_prices(listings)
    trends = analyze_trends(listings)
    return MarketStats(
        total_listings=len(listings),
        average_price=_mean(prices),
        average_price_per_sqft=_mean(_prices_per_sqft(listings)),
        average_trend_percent=_mean([t.price_change_percent for t in trends]),
        total_market_value=sum(prices),
    )

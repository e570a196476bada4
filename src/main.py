"""Main orchestration script for Antigua House Hunter."""

import logging
import os
import sys
from pathlib import Path
from typing import Any

import requests
import yaml

from airtable_client import AirtableClient
from filters import apply_filters, has_active_filters, parse_min_bedrooms, parse_price_range
from location import build_map_markers, get_display_name
from market import analyze_trends, calculate_price_per_sqft, overall_stats, top_movers

CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

logger = logging.getLogger(__name__)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from config.yaml or environment."""
    config_path = config_path or CONFIG_PATH
    if config_path.exists():
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    else:
        config = {
            "property_type": os.environ.get("PROPERTY_TYPE", "residential"),
            "bedrooms": os.environ.get("SEARCH_BEDROOMS", ""),
            "price_range": os.environ.get("SEARCH_PRICE_RANGE", ""),
            "location": os.environ.get("SEARCH_LOCATION", ""),
            "max_listings": int(os.environ.get("MAX_LISTINGS", 10)),
            "top_movers_limit": int(os.environ.get("TOP_MOVERS_LIMIT", 5)),
        }

    config.setdefault("property_type", "residential")
    config.setdefault("max_listings", 10)
    config.setdefault("top_movers_limit", 5)
    return config


def validate_config(config: dict[str, Any]) -> None:
    """Reject search criteria the filters can't parse."""
    bedrooms = config.get("bedrooms")
    if bedrooms and parse_min_bedrooms(bedrooms) is None:
        raise ValueError(f"bedrooms must be a positive whole number, got {bedrooms!r}")

    price_range = config.get("price_range")
    if price_range and parse_price_range(price_range) is None:
        raise ValueError(f"price_range must look like '500000-1000000', got {price_range!r}")

    location = config.get("location")
    if location and not isinstance(location, str):
        raise ValueError(f"location must be text, got {location!r}")


def get_criteria(config: dict[str, Any]) -> dict[str, Any]:
    return {
        "bedrooms": config.get("bedrooms"),
        "price_range": config.get("price_range"),
        "location": config.get("location"),
    }


def format_price(price: float | None) -> str:
    if not price:
        return "Price on request"
    return f"${price:,.0f}"


def format_listing(listing: dict[str, Any]) -> str:
    """One report line for a listing."""
    name = listing.get("title") or get_display_name(listing.get("location"))
    parts = [name, format_price(listing.get("price"))]
    if listing.get("beds") is not None:
        parts.append(f"{listing['beds']} bd")
    ppsf = calculate_price_per_sqft(listing.get("price"), listing.get("sqft"))
    if ppsf:
        parts.append(f"${ppsf:,}/sqft")
    return " | ".join(parts)


def print_market_report(listings: list[dict[str, Any]], movers_limit: int) -> None:
    stats = overall_stats(listings)
    print("Market overview:")
    print(f"  Listings: {stats.total_listings}")
    print(f"  Average price: {format_price(stats.average_price)}")
    print(f"  Average price/sqft: ${stats.average_price_per_sqft:,}")
    print(f"  Total market value: {format_price(stats.total_market_value)}")
    print(f"  Average area trend: {stats.average_trend_percent:+d}%")

    movers = top_movers(analyze_trends(listings), movers_limit)
    if movers:
        print("Fastest moving areas:")
        for i, trend in enumerate(movers):
            print(f"  {i+1}. {get_display_name(trend.area)} - {trend.trend} "
                  f"{trend.price_change_percent:+d}% ({trend.count} listings, "
                  f"avg {format_price(trend.average_price)})")


def main() -> int:
    """Run the house hunter."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    print("Antigua House Hunter starting...")

    try:
        config = load_config()
        validate_config(config)
        client = AirtableClient.for_property_type(config["property_type"])
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    print(f"Fetching {config['property_type']} listings from Airtable...")
    try:
        listings = client.fetch_all()
    except requests.RequestException as e:
        logger.error("Failed to fetch listings: %s", e)
        print(f"Error fetching listings: {e}")
        return 1
    print(f"Found {len(listings)} listings")

    criteria = get_criteria(config)
    if has_active_filters(criteria):
        filtered = apply_filters(listings, criteria)
        print(f"After filtering: {len(filtered)} listings match criteria")
    else:
        filtered = listings

    markers, unmapped = build_map_markers(filtered)
    print(f"Map: {len(markers)} listings placed, {unmapped} without a known location")

    top_listings = sorted(filtered, key=lambda x: x.get("price") or 0, reverse=True)
    top_listings = top_listings[: config["max_listings"]]
    for i, listing in enumerate(top_listings):
        print(f"  {i+1}. {format_listing(listing)}")

    print_market_report(filtered, config["top_movers_limit"])
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())

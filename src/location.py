"""Location utilities for placing Antigua listings on a map."""

import random
import re
from types import MappingProxyType
from typing import Any, Callable

UNKNOWN_DISPLAY_NAME = "Unknown Location"

# Spread markers that share a place name over roughly 800-900 meters
BUFFER_RANGE = 0.008

# Antigua place names (lower case) -> (lat, lon). Order matters: partial
# matches return the first entry that fits.
GAZETTEER = MappingProxyType({
    # Popular areas
    "jolly harbour": (17.065, -61.8862),
    "st. johns": (17.12, -61.845),
    "st johns": (17.12, -61.845),
    "saint johns": (17.12, -61.845),
    "saint john's": (17.12, -61.845),
    "english harbour": (17.0058, -61.7625),
    "falmouth": (17.0167, -61.7833),
    "five islands": (17.1167, -61.8833),
    "cedar grove": (17.1333, -61.8167),
    "crosbies": (17.1, -61.85),
    "pigotts": (17.1167, -61.8333),
    "parham": (17.0833, -61.7833),
    "liberta": (17.05, -61.8),
    "old road": (17.0667, -61.8167),
    "freetown": (17.0833, -61.85),
    "bolans": (17.05, -61.8833),
    "bolands": (17.05, -61.8833),
    "urlings": (17.0667, -61.9),
    "bendals": (17.1, -61.8),
    "willoughby bay": (17.0, -61.7167),
    "dickenson bay": (17.15, -61.8333),
    "runaway bay": (17.1333, -61.85),
    "half moon bay": (17.0167, -61.7167),
    "mamora bay": (17.05, -61.75),
    "nonsuch bay": (17.0716, -61.702),
    "harbour island": (17.065, -61.8862),
    "the gardens": (17.065, -61.8862),
    "antigua": (17.1274, -61.8468),

    # Villages and developments
    "sugar ridge": (17.1, -61.78),
    "sugar ridge homes": (17.1, -61.78),
    "seatons": (17.14, -61.81),
    "valley church": (17.04, -61.87),
    "dark wood": (17.04, -61.87),
    "pearns point": (17.01, -61.73),
    "cedar valley": (17.13, -61.82),
    "galley bay": (17.11, -61.89),
    "galley bay heights": (17.11, -61.89),
    "hodges bay": (17.14, -61.8),
    "ffreys": (17.08, -61.92),
    "turtle bay": (17.09, -61.7),
    "johnsons point": (17.03, -61.89),
    "henry heights": (17.11, -61.86),
    "horsford hill": (17.12, -61.83),
    "big creek": (17.02, -61.75),
    "seaforth": (17.02, -61.75),

    # Jolly Harbour marina fingers
    "north finger": (17.065, -61.8862),
    "south finger": (17.065, -61.8862),
    "sunset lane": (17.065, -61.8862),
})

_TOKEN_SPLIT = re.compile(r"[,\s]+")


def _words_match(key: str, text: str) -> bool:
    tokens = [t for t in _TOKEN_SPLIT.split(text) if t]
    if not tokens:
        return False
    return all(
        any(word in token or token in word for token in tokens)
        for word in key.split(" ")
    )


def get_base_coordinates(text: str | None) -> tuple[float, float] | None:
    """
    Find the gazetteer coordinates for a free-text place, address or title.

    Tries an exact name, then a name contained in the text (or the text
    contained in a name), then a name whose words all show up in the text.
    The first gazetteer entry that fits wins.
    """
    if not text:
        return None
    normalized = text.lower().strip()
    if not normalized:
        return None

    if normalized in GAZETTEER:
        return GAZETTEER[normalized]

    for key, coords in GAZETTEER.items():
        if key in normalized or normalized in key:
            return coords

    # Longer strings such as listing titles
    for key, coords in GAZETTEER.items():
        if _words_match(key, normalized):
            return coords

    return None


def get_coordinates(
    text: str | None, rand: Callable[[], float] = random.random
) -> tuple[float, float] | None:
    """
    Resolve free text to an approximate (lat, lon) with random jitter.

    Each axis is offset by up to half of BUFFER_RANGE so listings in the
    same area don't stack on one marker. Returns None when nothing matches.
    """
    base = get_base_coordinates(text)
    if base is None:
        return None

    lat_buffer = (rand() - 0.5) * BUFFER_RANGE
    lon_buffer = (rand() - 0.5) * BUFFER_RANGE
    return base[0] + lat_buffer, base[1] + lon_buffer


def get_display_name(text: str | None) -> str:
    """Capitalize the first letter of each word, e.g. 'JOLLY harbour' -> 'Jolly Harbour'."""
    if not text:
        return UNKNOWN_DISPLAY_NAME
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def locate_listing(
    listing: dict[str, Any], rand: Callable[[], float] = random.random
) -> tuple[float, float] | None:
    """Place a listing using its address, then location, then title."""
    for field in ("address", "location", "title"):
        value = listing.get(field)
        if not value:
            continue
        coords = get_coordinates(value, rand)
        if coords:
            return coords
    return None


def build_map_markers(
    listings: list[dict[str, Any]], rand: Callable[[], float] = random.random
) -> tuple[list[dict[str, Any]], int]:
    """
    Build map markers for listings.

    Returns: (markers, number of listings that could not be placed)
    """
    markers = []
    unmapped = 0
    for listing in listings:
        coords = locate_listing(listing, rand)
        if coords is None:
            unmapped += 1
            continue
        markers.append({
            "id": listing.get("id"),
            "title": listing.get("title") or "Property",
            "price": listing.get("price"),
            "address": listing.get("address"),
            "latitude": coords[0],
            "longitude": coords[1],
        })
    return markers, unmapped

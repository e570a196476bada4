"""Airtable client for property listings."""

import logging
import os
import re
from typing import Any

import requests

logger = logging.getLogger(__name__)

TABLE_ENV_VARS = {
    "residential": "AIRTABLE_TABLE_NAME",
    "commercial": "AIRTABLE_COMMERCIAL_TABLE_NAME",
}


class AirtableClient:
    """Client for the Airtable REST API, one table of listings."""

    BASE_URL = "https://api.airtable.com/v0"

    def __init__(
        self,
        api_key: str | None = None,
        base_id: str | None = None,
        table_name: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 30,
    ):
        self.api_key = api_key or os.environ.get("AIRTABLE_API_KEY")
        self.base_id = base_id or os.environ.get("AIRTABLE_BASE_ID")
        self.table_name = table_name or os.environ.get("AIRTABLE_TABLE_NAME")
        if not self.api_key or not self.base_id or not self.table_name:
            raise ValueError(
                "AIRTABLE_API_KEY, AIRTABLE_BASE_ID and a table name are required"
            )

        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def for_property_type(cls, property_type: str = "residential", **kwargs) -> "AirtableClient":
        """Create a client for the residential or commercial listings table."""
        env_var = TABLE_ENV_VARS.get(property_type)
        if env_var is None:
            raise ValueError(f"Unknown property type: {property_type!r}")
        table_name = kwargs.pop("table_name", None) or os.environ.get(env_var)
        if not table_name:
            raise ValueError(f"{env_var} is required for {property_type} properties")
        return cls(table_name=table_name, **kwargs)

    @property
    def table_url(self) -> str:
        return f"{self.BASE_URL}/{self.base_id}/{self.table_name}"

    def fetch_records(self) -> list[dict[str, Any]]:
        """
        Fetch every raw record in the table.

        Airtable returns records in pages; each response carries an
        `offset` cursor until the last page.
        """
        records: list[dict[str, Any]] = []
        offset = None
        while True:
            params = {"offset": offset} if offset else None
            response = self.session.get(
                self.table_url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

            page = data.get("records", [])
            records.extend(page)
            logger.debug("Fetched %d records from %s", len(page), self.table_name)

            offset = data.get("offset")
            if not offset:
                break

        logger.info("Fetched %d records from %s", len(records), self.table_name)
        return records

    def fetch_all(self) -> list[dict[str, Any]]:
        """Fetch and parse every listing in the table."""
        return [parse_record(r) for r in self.fetch_records()]

    def fetch_page(self, page: int = 1, limit: int = 24) -> dict[str, Any]:
        """
        Fetch one page of listings.

        Airtable has no page numbers, so everything is fetched and sliced.
        """
        listings = self.fetch_all()
        start = (page - 1) * limit
        end = start + limit
        return {
            "properties": listings[start:end],
            "total": len(listings),
            "has_more": end < len(listings),
            "page": page,
            "limit": limit,
        }


def _parse_number(value: Any) -> float | int | None:
    """Coerce numbers stored as text, e.g. "$450,000", into numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        # "3-4" or "-5" are ranges or negatives, not a single count
        text = value.strip().replace(",", "")
        if text.startswith("-") or len(re.findall(r"[0-9.]+", text)) != 1:
            return None
        cleaned = re.sub(r"[^0-9.]", "", text)
        if cleaned.count(".") > 1 or cleaned == ".":
            return None
        number = float(cleaned)
        return int(number) if number.is_integer() else number
    return None


def parse_record(record: dict[str, Any]) -> dict[str, Any]:
    """Parse a raw Airtable record into a standardized listing."""
    fields = record.get("fields", {})

    # Get first attached photo
    images = fields.get("Image") or []
    photo_url = images[0].get("url") if images and isinstance(images[0], dict) else None

    beds = fields.get("Beds")
    if beds is None:
        beds = fields.get("Bedrooms")
    baths = fields.get("Baths")
    if baths is None:
        baths = fields.get("Bathrooms")
    sqft = fields.get("SquareFootage")
    if sqft is None:
        sqft = fields.get("Square Footage")

    return {
        "id": record.get("id"),
        "title": fields.get("Title"),
        "price": _parse_number(fields.get("Price")),
        "beds": _parse_number(beds),
        "baths": _parse_number(baths),
        "sqft": _parse_number(sqft),
        "address": fields.get("Address"),
        "location": fields.get("Location"),
        "property_type": fields.get("PropertyType"),
        "status": fields.get("Status"),
        "description": fields.get("Description"),
        "photo_url": photo_url,
        "listing_url": fields.get("Property URL"),
        "created_at": record.get("createdTime"),
    }

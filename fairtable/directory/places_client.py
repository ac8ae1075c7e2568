from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..resolution.errors import DirectoryError
from ..resolution.models import Coordinate, Member
from .config import DEFAULT_DIRECTORY_CONFIG, DirectoryConfig
from .local_store import load_listings

logger = logging.getLogger(__name__)

PLACES_FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.priceLevel",
    "places.rating",
    "places.userRatingCount",
    "places.types",
    "places.primaryType",
    "places.formattedAddress",
    "places.location",
    "places.regularOpeningHours.openNow",
    "places.photos.name",
])


def build_text_queries(
    label: str,
    members: list[Member],
    config: DirectoryConfig = DEFAULT_DIRECTORY_CONFIG,
) -> list[str]:
    """One broad query plus one per distinct cuisine, capped."""
    cuisines: list[str] = []
    seen: set[str] = set()
    for member in members:
        for cuisine in member.preferences.cuisine_preferences:
            key = cuisine.strip().lower()
            if key and key not in seen:
                seen.add(key)
                cuisines.append(cuisine.strip())

    queries = [f"restaurants in {label}"]
    queries.extend(
        f"{cuisine} restaurants in {label}"
        for cuisine in cuisines[: config.max_cuisine_queries]
    )
    return queries


def _circle(anchor: Coordinate, radius: float) -> dict[str, Any]:
    return {
        "circle": {
            "center": {"latitude": anchor.lat, "longitude": anchor.lng},
            "radius": radius,
        }
    }


def _text_body(query: str, anchor: Coordinate | None, config: DirectoryConfig) -> dict[str, Any]:
    body: dict[str, Any] = {"textQuery": query, "pageSize": config.page_size}
    if anchor is not None:
        body["locationBias"] = _circle(anchor, config.search_radius_meters)
    return body


def _nearby_body(anchor: Coordinate, config: DirectoryConfig) -> dict[str, Any]:
    return {
        "includedTypes": ["restaurant"],
        "maxResultCount": min(config.page_size, 20),
        "locationRestriction": _circle(anchor, config.search_radius_meters),
    }


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def to_raw_listing(place: dict[str, Any]) -> dict[str, Any]:
    """
    Map a Places (New) result into a raw listing.

    Nothing is validated here; missing ids, names or coordinates are left
    for the normalizer to drop.
    """
    display_name = _as_dict(place.get("displayName"))
    location = _as_dict(place.get("location"))
    hours = _as_dict(place.get("regularOpeningHours"))
    photos = place.get("photos") or []
    first_photo = _as_dict(photos[0]) if isinstance(photos, list) and photos else {}
    types = place.get("types") or ([place["primaryType"]] if place.get("primaryType") else [])

    return {
        "placeId": place.get("id"),
        "name": display_name.get("text"),
        "priceLevel": place.get("priceLevel"),
        "rating": place.get("rating"),
        "userRatingsTotal": place.get("userRatingCount"),
        "types": types,
        "address": place.get("formattedAddress"),
        "lat": location.get("latitude"),
        "lng": location.get("longitude"),
        "isOpenNow": hours.get("openNow"),
        "photoReference": first_photo.get("name"),
    }


async def _places_request(
    client: httpx.AsyncClient,
    path: str,
    body: dict[str, Any],
    config: DirectoryConfig,
) -> list[dict[str, Any]]:
    try:
        response = await client.post(
            f"{config.base_url}:{path}",
            json=body,
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": config.api_key,
                "X-Goog-FieldMask": PLACES_FIELD_MASK,
            },
        )
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as exc:
        raise DirectoryError(
            f"Places API {path} failed with status {exc.response.status_code}: "
            f"{exc.response.text[:200]}"
        ) from exc
    except httpx.HTTPError as exc:
        raise DirectoryError(f"Places API {path} request failed: {exc!r}") from exc
    except ValueError as exc:
        raise DirectoryError(f"Places API {path} returned invalid JSON") from exc

    if not isinstance(payload, dict):
        raise DirectoryError(f"Places API {path} returned an unexpected payload")
    places = payload.get("places") or []
    if not isinstance(places, list):
        raise DirectoryError(f"Places API {path} returned an unexpected payload")
    return [p for p in places if isinstance(p, dict)]


async def fetch_listings(
    label: str,
    anchor: Coordinate | None,
    members: list[Member],
    config: DirectoryConfig = DEFAULT_DIRECTORY_CONFIG,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, Any]]:
    """
    Build the raw candidate pool for a room.

    All queries run concurrently and are joined before returning. If any
    query failed the whole lookup fails with ``DirectoryError``: a partial
    pool would be indistinguishable from a real one.
    """
    if config.listings_csv is not None:
        try:
            listings = load_listings(config.listings_csv)
        except (OSError, ValueError) as exc:
            raise DirectoryError(f"Could not read listings from {config.listings_csv}") from exc
        logger.info("Loaded %d listings from %s", len(listings), config.listings_csv)
        return listings

    if not config.api_key:
        raise DirectoryError("Restaurant directory is not configured (GOOGLE_PLACES_API_KEY)")

    queries = build_text_queries(label, members, config)
    requests: list[tuple[str, dict[str, Any]]] = [
        ("searchText", _text_body(query, anchor, config)) for query in queries
    ]
    if anchor is not None:
        requests.append(("searchNearby", _nearby_body(anchor, config)))

    async with httpx.AsyncClient(timeout=config.timeout, transport=transport) as client:
        results = await asyncio.gather(
            *(_places_request(client, path, body, config) for path, body in requests),
            return_exceptions=True,
        )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        logger.warning("%d of %d directory queries failed", len(failures), len(requests))
        raise failures[0]

    listings = [to_raw_listing(place) for places in results for place in places]
    logger.info(
        "Directory returned %d listings from %d queries (nearby=%s)",
        len(listings),
        len(requests),
        anchor is not None,
    )
    return listings

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import ApiError
from .cache import cache_get, cache_set
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig

logger = logging.getLogger(__name__)

FETCH_ERROR = "FETCH_ERROR"
_CACHEABLE_STATUSES = {"OK", "ZERO_RESULTS"}


@dataclass
class PhotoResult:
    location: str | None = None
    content: bytes = b""
    content_type: str = "image/jpeg"

    @property
    def is_redirect(self) -> bool:
        return self.location is not None


def require_api_key(config: PlacesConfig = DEFAULT_PLACES_CONFIG) -> str:
    if not config.api_key:
        raise ApiError(500, "Missing GOOGLE_MAPS_API_KEY")
    return config.api_key


def maps_url(place_id: str) -> str:
    return f"https://www.google.com/maps/place/?q=place_id:{place_id}"


def safe_fetch_json(
    url: str,
    params: dict[str, Any],
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> dict[str, Any]:
    """
    GET a Places endpoint and return its JSON body.

    Never raises: network errors and undecodable bodies come back as
    ``{"status": "FETCH_ERROR", "results": []}`` so callers can keep
    walking their radius ladders.
    """
    cached = cache_get(url, params, ttl=config.cache_ttl)
    if cached is not None:
        return cached

    try:
        resp = httpx.get(url, params=params, timeout=config.timeout)
        data = resp.json()
    except (httpx.HTTPError, ValueError):
        logger.warning("Places request to %s failed", url, exc_info=True)
        return {"status": FETCH_ERROR, "results": []}

    if not isinstance(data, dict):
        return {"status": FETCH_ERROR, "results": []}

    if data.get("status") in _CACHEABLE_STATUSES:
        cache_set(url, params, data, ttl=config.cache_ttl)
    elif data.get("status"):
        logger.warning(
            "Places returned %s for %s: %s",
            data.get("status"), url, data.get("error_message", ""),
        )
    return data


def nearby_search(
    latitude: float | str,
    longitude: float | str,
    radius: int,
    keyword: str | None = None,
    page_token: str | None = None,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> dict[str, Any]:
    params: dict[str, Any] = {
        "key": require_api_key(config),
        "location": f"{latitude},{longitude}",
        "radius": str(radius),
        "type": "restaurant",
    }
    if keyword:
        params["keyword"] = keyword
    if page_token:
        params["pagetoken"] = page_token
    return safe_fetch_json(f"{config.base_url}/nearbysearch/json", params, config)


def text_search(
    query: str,
    restaurant_only: bool = False,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> dict[str, Any]:
    params: dict[str, Any] = {"key": require_api_key(config), "query": query}
    if restaurant_only:
        params["type"] = "restaurant"
    return safe_fetch_json(f"{config.base_url}/textsearch/json", params, config)


def place_details_photo(
    place_id: str,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> dict[str, Any]:
    """Look up only the photo field of a place; returns ``{status, photo_reference}``."""
    params = {"key": require_api_key(config), "place_id": place_id, "fields": "photo"}
    data = safe_fetch_json(f"{config.base_url}/details/json", params, config)
    photos = (data.get("result") or {}).get("photos") or []
    ref = photos[0].get("photo_reference") if photos else None
    return {"status": data.get("status") or "UNKNOWN", "photo_reference": ref}


def fetch_photo(
    ref: str,
    maxwidth: int | str = 600,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> PhotoResult:
    """
    Request a place photo without following the redirect Google answers with.

    A 3xx response is reported through ``location`` so the caller can hand
    the redirect to the browser; anything else carries the image bytes.
    """
    params = {
        "key": require_api_key(config),
        "photoreference": str(ref),
        "maxwidth": str(maxwidth),
    }
    resp = httpx.get(
        f"{config.base_url}/photo",
        params=params,
        timeout=config.timeout,
        follow_redirects=False,
    )
    if resp.is_redirect and resp.headers.get("location"):
        return PhotoResult(location=resp.headers["location"])
    return PhotoResult(
        content=resp.content,
        content_type=resp.headers.get("content-type") or "image/jpeg",
    )

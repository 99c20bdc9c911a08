from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import ApiError
from .config import DEFAULT_YELP_CONFIG, YelpConfig

logger = logging.getLogger(__name__)

RADIUS_STEPS = [8000, 16000, 24000, 32000]
GENERIC_ALIASES = {"restaurants", "food"}


def _require_api_key(config: YelpConfig) -> str:
    if not config.api_key:
        logger.error("Missing Yelp API Key")
        raise ApiError(500, "Missing Yelp API Key")
    return config.api_key


def _get(path: str, params: dict[str, Any] | None, config: YelpConfig) -> dict[str, Any]:
    resp = httpx.get(
        f"{config.base_url}{path}",
        params=params,
        headers={"Authorization": f"Bearer {_require_api_key(config)}"},
        timeout=config.timeout,
    )
    resp.raise_for_status()
    return resp.json()


def _error_details(exc: httpx.HTTPError) -> tuple[int, Any]:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            raw = exc.response.json()
        except ValueError:
            raw = exc.response.text
        details = raw if isinstance(raw, dict) else {"message": str(raw or exc)}
        return exc.response.status_code, details
    return 500, {"message": str(exc)}


def search_businesses(
    term: str = "food",
    latitude: Any = None,
    longitude: Any = None,
    location: str | None = None,
    limit: int = 40,
    accepted: list[str] | None = None,
    config: YelpConfig = DEFAULT_YELP_CONFIG,
) -> list[dict[str, Any]]:
    """
    Search Yelp businesses sorted by distance, widening the radius until
    something comes back.

    Accepted cuisines are sent as Yelp category aliases. Upstream HTTP
    failures keep their status code.
    """
    _require_api_key(config)

    base_params: dict[str, Any] = {"term": term, "limit": int(limit), "sort_by": "distance"}
    if latitude and longitude:
        base_params["latitude"] = float(latitude)
        base_params["longitude"] = float(longitude)
    else:
        base_params["location"] = location or config.default_location

    if accepted:
        base_params["categories"] = ",".join(a.strip().lower() for a in accepted)

    try:
        for radius in RADIUS_STEPS:
            data = _get("/businesses/search", {**base_params, "radius": radius}, config)
            businesses = data.get("businesses") or []
            if businesses:
                return businesses
    except httpx.HTTPError as exc:
        status, details = _error_details(exc)
        logger.error("Yelp API Error: %s", details)
        raise ApiError(status, "Yelp API call failed", details=details) from exc

    return []


def restaurant_categories(config: YelpConfig = DEFAULT_YELP_CONFIG) -> list[dict[str, Any]]:
    """Return every Yelp category whose parent is ``restaurants``."""
    try:
        data = _get("/categories", None, config)
    except httpx.HTTPError as exc:
        logger.error("Yelp Categories API Error: %s", _error_details(exc)[1])
        raise ApiError(500, "Failed to fetch Yelp categories") from exc

    return [
        cat for cat in data.get("categories") or []
        if "restaurants" in (cat.get("parent_aliases") or [])
    ]


def categories_near(
    latitude: Any,
    longitude: Any,
    config: YelpConfig = DEFAULT_YELP_CONFIG,
) -> list[dict[str, str]]:
    """
    Collect the categories of restaurants around a point.

    Categories are de-duplicated by lowercased alias, first occurrence
    winning, and the generic ``restaurants``/``food`` labels are dropped.
    """
    if not latitude or not longitude:
        raise ApiError(400, "Missing latitude or longitude")

    params = {"latitude": latitude, "longitude": longitude, "term": "restaurants", "limit": 50}
    try:
        data = _get("/businesses/search", params, config)
    except httpx.HTTPError as exc:
        logger.error("Yelp Location Categories Error: %s", _error_details(exc)[1])
        raise ApiError(500, "Failed to fetch location-based categories") from exc

    seen: set[str] = set()
    out: list[dict[str, str]] = []
    for biz in data.get("businesses") or []:
        for cat in biz.get("categories") or []:
            key = str(cat.get("alias", "")).lower()
            if key in seen:
                continue
            seen.add(key)
            if key in GENERIC_ALIASES:
                continue
            out.append({"alias": cat.get("alias"), "title": cat.get("title")})
    return out

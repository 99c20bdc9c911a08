from __future__ import annotations

import logging
import math
from typing import Any
from urllib.parse import quote

from . import client
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .cuisines import extract_cuisines, is_restaurant, matches_accepted, top_types
from .models import (
    Business,
    BusinessLocation,
    CuisineDiscoveryResponse,
    PlacesSearchResponse,
    RestaurantSearchResponse,
    SlimPlace,
    TypeCount,
)

logger = logging.getLogger(__name__)

# Radius ladders, in meters.
CUISINE_RADII = [8000, 16000, 32000, 50000]
RESTAURANT_RADII = [16000, 24000, 32000]
PLACES_RADII = [1000, 2000, 5000, 10000, 20000, 40000, 80000, 120000]

MIN_CUISINES = 8
MAX_PHOTO_LOOKUPS = 16
EARTH_RADIUS_M = 6371000
FAR_AWAY_M = 80467  # 50 miles
FAR_AWAY_WARNING = "Some results are more than 50 miles away."


def parse_coords(latitude: Any, longitude: Any) -> tuple[float, float] | None:
    """Return ``(lat, lon)`` when both parse as finite floats, else ``None``."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


def _to_int(value: Any, default: int) -> int:
    """Parse a query number the lenient way; zero, junk and infinities mean ``default``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return int(number) or default


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def _attempt(step: str, data: dict[str, Any], **extra: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "step": step,
        "status": data.get("status"),
        "results": len(data.get("results") or []),
    }
    entry.update(extra)
    return entry


def _dedupe(places: list[dict[str, Any]], keep: str = "last") -> list[dict[str, Any]]:
    """De-duplicate by place id, keeping first-seen order."""
    merged: dict[Any, dict[str, Any]] = {}
    for place in places:
        pid = place.get("place_id")
        if keep == "first" and pid in merged:
            continue
        merged[pid] = place
    return list(merged.values())


# ---------------------------------------------------------------------------
# Cuisine discovery
# ---------------------------------------------------------------------------


def discover_cuisines(
    latitude: Any = None,
    longitude: Any = None,
    location: str | None = None,
    radius: Any = 8000,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> CuisineDiscoveryResponse:
    """
    Find which cuisines are served around a point or in a named area.

    Nearby searches walk ``CUISINE_RADII`` and stop as soon as at least
    ``MIN_CUISINES`` labels have been collected. If that never happens a
    single text search for the area name is added to the pool.
    """
    client.require_api_key(config)
    location = location or config.default_location

    attempts: list[dict[str, Any]] = []
    collected: list[dict[str, Any]] = []
    used_radius = _to_int(radius, 8000)

    coords = parse_coords(latitude, longitude)
    if coords:
        lat, lon = coords
        for r in CUISINE_RADII:
            used_radius = r
            data = client.nearby_search(lat, lon, r, config=config)
            attempts.append(_attempt(f"nearby-{r}", data, **_error_message(data)))
            collected.extend(data.get("results") or [])

            cuisines = extract_cuisines(collected)
            if len(cuisines) >= MIN_CUISINES:
                return _discovery_payload(collected, cuisines, attempts, used_radius)

    data = client.text_search(f"restaurants in {location}", config=config)
    attempts.append(_attempt("textsearch", data, **_error_message(data)))
    collected.extend(data.get("results") or [])

    cuisines = extract_cuisines(collected)
    if not cuisines:
        logger.info("No cuisines found near %s after %d attempts", location, len(attempts))
    return _discovery_payload(collected, cuisines, attempts, used_radius)


def _error_message(data: dict[str, Any]) -> dict[str, Any]:
    return {"error_message": data["error_message"]} if data.get("error_message") else {}


def _discovery_payload(
    places: list[dict[str, Any]],
    cuisines: list[str],
    attempts: list[dict[str, Any]],
    used_radius: int,
) -> CuisineDiscoveryResponse:
    return CuisineDiscoveryResponse(
        cuisines=cuisines,
        attempts=attempts,
        sampleTypes=[TypeCount(**t) for t in top_types(places)],
        usedRadius=used_radius,
    )


# ---------------------------------------------------------------------------
# Restaurant search with cuisine filtering
# ---------------------------------------------------------------------------


def _restaurant_radii(radius: int, max_radius: int) -> list[int]:
    radii = [r for r in [radius, *RESTAURANT_RADII] if r <= max_radius]
    return radii or [max_radius]


def _search_keywords_nearby(
    lat: float,
    lon: float,
    radius: int,
    keywords: list[str],
    attempts: list[dict[str, Any]],
    config: PlacesConfig,
) -> list[dict[str, Any]]:
    bag: list[dict[str, Any]] = []
    for kw in keywords:
        data = client.nearby_search(lat, lon, radius, keyword=kw, config=config)
        attempts.append(_attempt(f"nearby-{radius}-kw:{kw}", data))
        bag.extend(p for p in data.get("results") or [] if is_restaurant(p))
    return _dedupe(bag)


def ensure_photos(
    places: list[dict[str, Any]],
    attempts: list[dict[str, Any]],
    max_lookups: int = MAX_PHOTO_LOOKUPS,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[dict[str, Any]]:
    """Fill in a photo reference via Place Details for up to ``max_lookups`` places lacking one."""
    out: list[dict[str, Any]] = []
    lookups = 0
    for place in places:
        photos = place.get("photos") or []
        if photos and photos[0].get("photo_reference"):
            out.append(place)
            continue
        if lookups >= max_lookups or not place.get("place_id"):
            out.append(place)
            continue

        details = client.place_details_photo(place["place_id"], config=config)
        attempts.append({
            "step": f"details-photo:{place['place_id']}",
            "status": details["status"],
            "hasPhoto": bool(details["photo_reference"]),
        })
        if details["photo_reference"]:
            place = {**place, "_photo_reference": details["photo_reference"]}
        out.append(place)
        lookups += 1
    return out


def slim_place(place: dict[str, Any]) -> SlimPlace:
    photos = place.get("photos") or []
    photo_ref = (photos[0].get("photo_reference") if photos else None) or place.get("_photo_reference")
    place_id = place.get("place_id")
    return SlimPlace(
        place_id=place_id,
        name=place.get("name"),
        rating=place.get("rating"),
        user_ratings_total=place.get("user_ratings_total"),
        vicinity=place.get("vicinity"),
        price_level=place.get("price_level"),
        types=place.get("types") or [],
        photo_reference=photo_ref,
        maps_url=client.maps_url(place_id) if place_id else None,
    )


def search_restaurants(
    latitude: Any = None,
    longitude: Any = None,
    location: str | None = None,
    accepted: list[str] | None = None,
    limit: Any = 24,
    radius: Any = 8000,
    max_radius: Any = 32000,
    debug: bool = False,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> RestaurantSearchResponse:
    """
    Search restaurants, optionally restricted to accepted cuisines.

    Each rung of the radius ladder replaces the previous result set, so the
    returned list always comes from a single radius. The ladder stops once
    ``limit`` restaurants survive filtering.
    """
    client.require_api_key(config)
    location = location or config.default_location
    accepted = [a.strip().lower() for a in accepted or [] if a.strip()]
    limit = _to_int(limit, 24)
    radii = _restaurant_radii(_to_int(radius, 8000), _to_int(max_radius, 32000))
    coords = parse_coords(latitude, longitude)

    attempts: list[dict[str, Any]] = []
    places: list[dict[str, Any]] = []
    used_radius = radii[0]

    for r in radii:
        used_radius = r
        if coords:
            lat, lon = coords
            if accepted:
                results = _search_keywords_nearby(lat, lon, r, accepted, attempts, config)
            else:
                data = client.nearby_search(lat, lon, r, config=config)
                attempts.append(_attempt(f"nearby-{r}", data))
                results = [p for p in data.get("results") or [] if is_restaurant(p)]
        else:
            results = _text_search_restaurants(location, accepted, attempts, config)

        places = _dedupe(results)
        if accepted:
            places = [p for p in places if matches_accepted(p, accepted)]
        if places:
            places = ensure_photos(places, attempts, config=config)

        if len(places) >= limit:
            break
        if not coords:
            # Text search ignores the radius; another rung would repeat it.
            break

    return RestaurantSearchResponse(
        restaurants=[slim_place(p) for p in places[:limit]],
        usedRadius=used_radius,
        attempts=attempts if debug else None,
    )


def _text_search_restaurants(
    location: str,
    accepted: list[str],
    attempts: list[dict[str, Any]],
    config: PlacesConfig,
) -> list[dict[str, Any]]:
    if not accepted:
        data = client.text_search(f"restaurants in {location}", restaurant_only=True, config=config)
        attempts.append(_attempt("text-generic", data))
        return [p for p in data.get("results") or [] if is_restaurant(p)]

    results: list[dict[str, Any]] = []
    for kw in accepted:
        data = client.text_search(f"{kw} restaurants in {location}", restaurant_only=True, config=config)
        attempts.append(_attempt(f"text-{kw}", data))
        results.extend(p for p in data.get("results") or [] if is_restaurant(p))
    return results


# ---------------------------------------------------------------------------
# Distance-annotated place search
# ---------------------------------------------------------------------------


def _fetch_nearby_or_text(
    coords: tuple[float, float] | None,
    location: str,
    radius: int,
    keyword: str,
    config: PlacesConfig,
) -> list[dict[str, Any]]:
    if coords:
        data = client.nearby_search(coords[0], coords[1], radius, keyword=keyword, config=config)
    else:
        data = client.text_search(f"{keyword} in {location}", config=config)
    return data.get("results") or []


def photo_proxy_url(ref: str, maxwidth: int = 600) -> str:
    return f"/api/googlePhoto?ref={quote(ref, safe='')}&maxwidth={maxwidth}"


def search_places(
    latitude: Any = None,
    longitude: Any = None,
    location: str | None = None,
    limit: Any = 40,
    accepted: list[str] | None = None,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> PlacesSearchResponse:
    """
    Widen the radius from 1 km to 120 km until any restaurant turns up.

    With accepted cuisines every cuisine is searched separately at each
    radius and the results merged, first hit per place id winning.
    """
    client.require_api_key(config)
    location = location or config.default_location
    accepted = [a.strip() for a in accepted or [] if a.strip()]
    limit = _to_int(limit, 40)
    coords = parse_coords(latitude, longitude)

    places: list[dict[str, Any]] = []
    used_radius = PLACES_RADII[0]

    for r in PLACES_RADII:
        used_radius = r
        if accepted:
            merged: list[dict[str, Any]] = []
            for cuisine in accepted:
                merged.extend(_fetch_nearby_or_text(coords, location, r, f"{cuisine} restaurant", config))
            places = _dedupe(merged, keep="first")
        else:
            places = _fetch_nearby_or_text(coords, location, r, "restaurant", config)

        if places:
            break

    max_distance = 0.0
    businesses: list[Business] = []
    for place in places[:limit]:
        distance = None
        point = (place.get("geometry") or {}).get("location")
        if coords and point:
            distance = haversine(coords[0], coords[1], point["lat"], point["lng"])
            max_distance = max(max_distance, distance)

        photos = place.get("photos") or []
        ref = photos[0].get("photo_reference") if photos else None
        businesses.append(Business(
            name=place.get("name"),
            url=client.maps_url(place.get("place_id", "")),
            image_url=photo_proxy_url(ref) if ref else None,
            location=BusinessLocation(
                address1=place.get("vicinity") or place.get("formatted_address") or "",
            ),
            rating=place.get("rating"),
            user_ratings_total=place.get("user_ratings_total"),
            distance_meters=distance,
        ))

    warning = FAR_AWAY_WARNING if max_distance > FAR_AWAY_M else ""
    return PlacesSearchResponse(businesses=businesses, warning=warning, usedRadius=used_radius)

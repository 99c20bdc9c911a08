from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from .errors import ApiError
from .places import client as places_client
from .places.cache import get_cache_stats
from .places.config import DEFAULT_PLACES_CONFIG
from .places.cuisines import parse_accepted
from .places.models import (
    CuisineDiscoveryResponse,
    PlacesSearchResponse,
    RestaurantSearchResponse,
)
from .places.search import discover_cuisines, search_places, search_restaurants
from .preferences.models import (
    AcceptCuisinesRequest,
    PreferencesResponse,
    RejectCuisinesRequest,
    UserPreferences,
)
from .preferences.store import get_user_preferences, update_user_preferences
from .wizard.flow import (
    apply_cuisine_choices,
    build_suggestions,
    cuisine_options,
    dismiss,
    load_state,
    select_meal_type,
)
from .wizard.models import (
    CuisineChoiceRequest,
    CuisineOptionsResponse,
    MealTypeRequest,
    NopeRequest,
    SuggestionsResponse,
    WizardState,
)
from .yelp import client as yelp_client

logger = logging.getLogger(__name__)

app = FastAPI(title="Meal Wizard API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "meal-wizard-secret-change-in-production"),
)

_CACHE_CONTROL = f"public, max-age={DEFAULT_PLACES_CONFIG.cache_max_age}"


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@contextmanager
def _fail_with(message: str) -> Iterator[None]:
    """Turn any unexpected failure into a 500 carrying ``message``."""
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.exception("%s", message)
        raise ApiError(500, message) from exc


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()


# ── Google Places proxies ────────────────────────────────────────────────


@app.get("/api/googleCuisinesByLocation", response_model=CuisineDiscoveryResponse)
def google_cuisines_by_location(
    response: Response,
    latitude: str | None = None,
    longitude: str | None = None,
    location: str = "New York",
    radius: str = "8000",
) -> CuisineDiscoveryResponse:
    with _fail_with("Internal error"):
        payload = discover_cuisines(latitude, longitude, location, radius)
    response.headers["Cache-Control"] = _CACHE_CONTROL
    return payload


@app.get("/api/googleSearchRestaurants", response_model=RestaurantSearchResponse)
def google_search_restaurants(
    latitude: str | None = None,
    longitude: str | None = None,
    location: str = "New York",
    accepted: str = "",
    limit: str = "24",
    radius: str = "8000",
    max_radius: str = Query("32000", alias="maxRadius"),
    debug: str = "0",
) -> JSONResponse:
    with _fail_with("Internal error"):
        payload = search_restaurants(
            latitude,
            longitude,
            location,
            accepted=parse_accepted(accepted),
            limit=limit,
            radius=radius,
            max_radius=max_radius,
            debug=debug == "1",
        )
    body = payload.model_dump()
    if body["attempts"] is None:
        del body["attempts"]
    return JSONResponse(content=body, headers={"Cache-Control": _CACHE_CONTROL})


@app.get("/api/googlePlacesSearch", response_model=PlacesSearchResponse)
def google_places_search(
    latitude: str | None = None,
    longitude: str | None = None,
    location: str = "New York",
    limit: str = "40",
    accepted: str = "",
) -> PlacesSearchResponse:
    with _fail_with("Failed to fetch places"):
        return search_places(
            latitude,
            longitude,
            location,
            limit=limit,
            accepted=parse_accepted(accepted, lowercase=False),
        )


@app.get("/api/googlePhoto")
def google_photo(ref: str | None = None, maxwidth: str = "600") -> Response:
    places_client.require_api_key()
    if not ref:
        raise ApiError(400, "Missing photo reference")

    with _fail_with("Failed to fetch photo"):
        photo = places_client.fetch_photo(ref, maxwidth)

    if photo.is_redirect:
        return RedirectResponse(url=photo.location, status_code=302)
    return Response(content=photo.content, media_type=photo.content_type)


# ── Yelp proxies ─────────────────────────────────────────────────────────


@app.get("/api/yelpAPI")
def yelp_search(
    term: str = "food",
    latitude: str | None = None,
    longitude: str | None = None,
    location: str = "New York",
    limit: int = 40,
    accepted: str = "",
) -> list[dict[str, Any]]:
    with _fail_with("Yelp API call failed"):
        return yelp_client.search_businesses(
            term=term,
            latitude=latitude,
            longitude=longitude,
            location=location,
            limit=limit,
            accepted=parse_accepted(accepted),
        )


@app.get("/api/yelpCategories")
def yelp_categories() -> list[dict[str, Any]]:
    with _fail_with("Failed to fetch Yelp categories"):
        return yelp_client.restaurant_categories()


@app.get("/api/yelpCategoriesByLocation")
def yelp_categories_by_location(
    latitude: str | None = None,
    longitude: str | None = None,
) -> list[dict[str, Any]]:
    with _fail_with("Failed to fetch location-based categories"):
        return yelp_client.categories_near(latitude, longitude)


# ── Cuisine preferences ──────────────────────────────────────────────────


@app.post("/api/cuisines/reject", response_model=PreferencesResponse)
def reject_cuisines(body: RejectCuisinesRequest) -> PreferencesResponse:
    prefs = update_user_preferences(body.user_id, rejected=body.rejected_cuisines)
    return PreferencesResponse(success=True, preferences=prefs)


@app.post("/api/cuisines/accept", response_model=PreferencesResponse)
def accept_cuisines(body: AcceptCuisinesRequest) -> PreferencesResponse:
    prefs = update_user_preferences(body.user_id, accepted=body.accepted_cuisines)
    return PreferencesResponse(success=True, preferences=prefs)


@app.get("/api/cuisines/preferences/{user_id}", response_model=UserPreferences)
def user_preferences(user_id: str) -> UserPreferences:
    return get_user_preferences(user_id)


# ── Wizard ───────────────────────────────────────────────────────────────


def _save_state(request: Request, state: WizardState) -> WizardState:
    request.session["wizard_state"] = state.model_dump(mode="json")
    return state


@app.get("/api/wizard", response_model=WizardState)
def wizard_state(request: Request) -> WizardState:
    return load_state(request.session.get("wizard_state"))


@app.post("/api/wizard/meal-type", response_model=WizardState)
def wizard_meal_type(body: MealTypeRequest, request: Request) -> WizardState:
    state = load_state(request.session.get("wizard_state"))
    return _save_state(request, select_meal_type(state, body.meal_type))


@app.get("/api/wizard/cuisines", response_model=CuisineOptionsResponse)
def wizard_cuisine_options(
    latitude: str | None = None,
    longitude: str | None = None,
) -> CuisineOptionsResponse:
    with _fail_with("Internal error"):
        return cuisine_options(latitude, longitude)


@app.post("/api/wizard/cuisines", response_model=WizardState)
def wizard_choose_cuisines(body: CuisineChoiceRequest, request: Request) -> WizardState:
    state = load_state(request.session.get("wizard_state"))
    if state.meal_type is None:
        raise ApiError(409, "Choose a meal type first")
    state = apply_cuisine_choices(state, body.rejected, body.accepted, body.user_id)
    return _save_state(request, state)


@app.get("/api/wizard/suggestions", response_model=SuggestionsResponse)
def wizard_suggestions(
    request: Request,
    latitude: str | None = None,
    longitude: str | None = None,
) -> SuggestionsResponse:
    state = load_state(request.session.get("wizard_state"))
    with _fail_with("Internal error"):
        return build_suggestions(state, latitude, longitude)


@app.post("/api/wizard/nope", response_model=WizardState)
def wizard_nope(body: NopeRequest, request: Request) -> WizardState:
    state = load_state(request.session.get("wizard_state"))
    return _save_state(request, dismiss(state, body.id))


@app.post("/api/wizard/reset", response_model=WizardState)
def wizard_reset(request: Request) -> WizardState:
    request.session.pop("wizard_state", None)
    return WizardState()

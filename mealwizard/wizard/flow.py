from __future__ import annotations

import logging
from typing import Any

from ..errors import ApiError
from ..places.config import DEFAULT_PLACES_CONFIG, PlacesConfig
from ..places.models import SlimPlace
from ..places.search import discover_cuisines, parse_coords, photo_proxy_url, search_restaurants
from ..preferences.store import update_user_preferences
from .models import (
    CuisineOptionsResponse,
    MealType,
    Suggestion,
    SuggestionsResponse,
    WizardState,
    WizardStep,
)

logger = logging.getLogger(__name__)

DEFAULT_CUISINES = ["Italian", "Mexican", "Chinese", "Japanese", "Korean", "Indian", "Thai", "American"]
DEFAULT_COORDS = (40.7128, -74.0060)  # New York
SUGGESTION_RADIUS = 4000
SUGGESTION_PHOTO_WIDTH = 400
MAX_DISMISSED = 50

NO_MATCHES_MESSAGE = "No matching meals found. Try going back and adjusting your preferences."


def load_state(raw: dict[str, Any] | None) -> WizardState:
    """Rebuild the wizard state from the session, starting over if it is unreadable."""
    if not raw:
        return WizardState()
    try:
        return WizardState(**raw)
    except ValueError:
        logger.warning("Discarding unreadable wizard state", exc_info=True)
        return WizardState()


def select_meal_type(state: WizardState, meal_type: MealType) -> WizardState:
    state.meal_type = meal_type
    state.step = WizardStep.cuisines
    return state


def cuisine_options(
    latitude: Any = None,
    longitude: Any = None,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> CuisineOptionsResponse:
    """
    Offer the cuisines found around the user, or the stock list when no
    position is known or the lookup yields nothing.
    """
    if parse_coords(latitude, longitude) is None:
        return CuisineOptionsResponse(cuisines=DEFAULT_CUISINES, source="default")

    try:
        found = discover_cuisines(latitude, longitude, config=config).cuisines
    except ApiError:
        logger.warning("Cuisine discovery unavailable, offering defaults", exc_info=True)
        found = []

    if not found:
        return CuisineOptionsResponse(cuisines=DEFAULT_CUISINES, source="default")
    return CuisineOptionsResponse(cuisines=found, source="nearby")


def apply_cuisine_choices(
    state: WizardState,
    rejected: list[str],
    accepted: list[str],
    user_id: str | None = None,
) -> WizardState:
    state.rejected_cuisines = [c for c in rejected if c]
    # A cuisine cannot be both rejected and accepted.
    rejected_lower = {c.lower() for c in state.rejected_cuisines}
    state.accepted_cuisines = [c for c in accepted if c and c.lower() not in rejected_lower]
    state.dismissed_ids = []
    state.step = WizardStep.suggestions

    if user_id:
        update_user_preferences(
            user_id,
            rejected=state.rejected_cuisines,
            accepted=state.accepted_cuisines,
        )
    return state


def dismiss(state: WizardState, suggestion_id: str) -> WizardState:
    """Hide a suggestion; only the most recent dismissals are remembered."""
    if suggestion_id not in state.dismissed_ids:
        state.dismissed_ids.append(suggestion_id)
    # The state rides in the session cookie.
    state.dismissed_ids = state.dismissed_ids[-MAX_DISMISSED:]
    return state


def _to_suggestion(place: SlimPlace) -> Suggestion:
    ref = place.photo_reference
    return Suggestion(
        id=place.place_id or "",
        name=place.name or "",
        address=place.vicinity or "",
        photo_url=photo_proxy_url(ref, SUGGESTION_PHOTO_WIDTH) if ref else None,
        url=place.maps_url,
    )


def _heading(meal_type: MealType | None) -> str:
    style = "eat out" if meal_type == MealType.takeout else "restaurant-style"
    return f"Here are some {style} ideas near you:"


def build_suggestions(
    state: WizardState,
    latitude: Any = None,
    longitude: Any = None,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> SuggestionsResponse:
    """
    Gather restaurants for every accepted cuisine and drop the unwanted ones.

    Results for separate cuisines are merged by place id. Any card whose
    name or address mentions a rejected cuisine is removed, as is anything
    the user already dismissed.
    """
    coords = parse_coords(latitude, longitude) or DEFAULT_COORDS

    places: dict[str, SlimPlace] = {}
    if state.accepted_cuisines:
        for cuisine in state.accepted_cuisines:
            found = search_restaurants(
                coords[0], coords[1],
                accepted=[cuisine],
                radius=SUGGESTION_RADIUS,
                config=config,
            )
            for place in found.restaurants:
                places[place.place_id or ""] = place
    else:
        found = search_restaurants(coords[0], coords[1], radius=SUGGESTION_RADIUS, config=config)
        for place in found.restaurants:
            places[place.place_id or ""] = place

    rejected = [c.lower() for c in state.rejected_cuisines if c]
    dismissed = set(state.dismissed_ids)
    suggestions: list[Suggestion] = []
    for place in places.values():
        card = _to_suggestion(place)
        haystack = f"{card.name} {card.address}".lower()
        if any(term in haystack for term in rejected):
            continue
        if card.id in dismissed:
            continue
        suggestions.append(card)

    return SuggestionsResponse(
        meal_type=state.meal_type,
        heading=_heading(state.meal_type),
        suggestions=suggestions,
        message=None if suggestions else NO_MATCHES_MESSAGE,
    )

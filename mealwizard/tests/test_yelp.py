from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from mealwizard.errors import ApiError
from mealwizard.yelp.client import categories_near, restaurant_categories, search_businesses
from mealwizard.yelp.config import YelpConfig

CONFIG = YelpConfig(api_key="yelp-key")


def _response(payload) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = payload
    return resp


def _http_error(status: int, payload) -> httpx.Response:
    request = httpx.Request("GET", "https://api.yelp.com/v3/businesses/search")
    return httpx.Response(status, json=payload, request=request)


# ── Business search ──────────────────────────────────────────────────────


@patch("mealwizard.yelp.client.httpx.get")
def test_search_widens_radius_until_results(mock_get):
    mock_get.side_effect = [
        _response({"businesses": []}),
        _response({"businesses": [{"id": "b1", "name": "Seoul Garden"}]}),
    ]

    result = search_businesses(
        latitude="40.7", longitude="-74.0", accepted=["Korean", " Thai"], config=CONFIG,
    )

    assert result == [{"id": "b1", "name": "Seoul Garden"}]
    assert mock_get.call_count == 2
    kwargs = mock_get.call_args.kwargs
    assert kwargs["params"] == {
        "term": "food",
        "limit": 40,
        "sort_by": "distance",
        "latitude": 40.7,
        "longitude": -74.0,
        "categories": "korean,thai",
        "radius": 16000,
    }
    assert kwargs["headers"] == {"Authorization": "Bearer yelp-key"}


@patch("mealwizard.yelp.client.httpx.get")
def test_search_uses_location_without_coordinates(mock_get):
    mock_get.return_value = _response({"businesses": []})

    result = search_businesses(location="Chicago", config=CONFIG)

    assert result == []
    assert mock_get.call_count == 4
    params = mock_get.call_args.kwargs["params"]
    assert params["location"] == "Chicago"
    assert params["radius"] == 32000
    assert "latitude" not in params
    assert "categories" not in params


@patch("mealwizard.yelp.client.httpx.get")
def test_search_passes_upstream_status_through(mock_get):
    mock_get.return_value = _http_error(400, {"error": {"code": "VALIDATION_ERROR"}})

    with pytest.raises(ApiError) as exc_info:
        search_businesses(location="Nowhere", config=CONFIG)

    assert exc_info.value.status_code == 400
    assert exc_info.value.error == "Yelp API call failed"
    assert exc_info.value.details == {"error": {"code": "VALIDATION_ERROR"}}


@patch("mealwizard.yelp.client.httpx.get")
def test_search_network_error_is_500(mock_get):
    mock_get.side_effect = httpx.ConnectError("down")

    with pytest.raises(ApiError) as exc_info:
        search_businesses(location="Chicago", config=CONFIG)

    assert exc_info.value.status_code == 500
    assert exc_info.value.details == {"message": "down"}


def test_search_requires_api_key():
    with pytest.raises(ApiError) as exc_info:
        search_businesses(config=YelpConfig(api_key=""))
    assert exc_info.value.error == "Missing Yelp API Key"


# ── Categories ───────────────────────────────────────────────────────────


@patch("mealwizard.yelp.client.httpx.get")
def test_restaurant_categories_filters_by_parent(mock_get):
    mock_get.return_value = _response({"categories": [
        {"alias": "korean", "title": "Korean", "parent_aliases": ["restaurants"]},
        {"alias": "yoga", "title": "Yoga", "parent_aliases": ["fitness"]},
        {"alias": "thai", "title": "Thai", "parent_aliases": ["restaurants"]},
    ]})

    result = restaurant_categories(config=CONFIG)

    assert [c["alias"] for c in result] == ["korean", "thai"]
    assert mock_get.call_args.args[0] == "https://api.yelp.com/v3/categories"


@patch("mealwizard.yelp.client.httpx.get")
def test_restaurant_categories_failure(mock_get):
    mock_get.side_effect = httpx.ConnectError("down")

    with pytest.raises(ApiError) as exc_info:
        restaurant_categories(config=CONFIG)

    assert exc_info.value.status_code == 500
    assert exc_info.value.error == "Failed to fetch Yelp categories"


@patch("mealwizard.yelp.client.httpx.get")
def test_categories_near_dedupes_and_drops_generic(mock_get):
    mock_get.return_value = _response({"businesses": [
        {"categories": [{"alias": "korean", "title": "Korean"}, {"alias": "food", "title": "Food"}]},
        {"categories": [{"alias": "Korean", "title": "Korean BBQ"}, {"alias": "tacos", "title": "Tacos"}]},
        {"categories": [{"alias": "restaurants", "title": "Restaurants"}]},
    ]})

    result = categories_near("40.7", "-74.0", config=CONFIG)

    assert result == [
        {"alias": "korean", "title": "Korean"},
        {"alias": "tacos", "title": "Tacos"},
    ]
    params = mock_get.call_args.kwargs["params"]
    assert params["term"] == "restaurants"
    assert params["limit"] == 50


def test_categories_near_requires_coordinates():
    with pytest.raises(ApiError) as exc_info:
        categories_near(None, "-74.0", config=CONFIG)
    assert exc_info.value.status_code == 400
    assert exc_info.value.error == "Missing latitude or longitude"

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TypeCount(BaseModel):
    type: str
    count: int


class CuisineDiscoveryResponse(BaseModel):
    cuisines: list[str]
    attempts: list[dict[str, Any]]
    sampleTypes: list[TypeCount]
    usedRadius: int


class SlimPlace(BaseModel):
    place_id: str | None = None
    name: str | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    vicinity: str | None = None
    price_level: int | None = None
    types: list[str] = Field(default_factory=list)
    photo_reference: str | None = None
    maps_url: str | None = None


class RestaurantSearchResponse(BaseModel):
    restaurants: list[SlimPlace]
    usedRadius: int
    attempts: list[dict[str, Any]] | None = None


class BusinessLocation(BaseModel):
    address1: str = ""


class Business(BaseModel):
    name: str | None = None
    url: str
    image_url: str | None = None
    location: BusinessLocation
    rating: float | None = None
    user_ratings_total: int | None = None
    distance_meters: float | None = None


class PlacesSearchResponse(BaseModel):
    businesses: list[Business]
    warning: str = ""
    usedRadius: int

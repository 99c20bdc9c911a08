from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MealType(str, Enum):
    home_cooked = "home-cooked"
    takeout = "takeout"


class WizardStep(int, Enum):
    meal_type = 1
    cuisines = 2
    suggestions = 3


class WizardState(BaseModel):
    step: WizardStep = WizardStep.meal_type
    meal_type: MealType | None = None
    rejected_cuisines: list[str] = Field(default_factory=list)
    accepted_cuisines: list[str] = Field(default_factory=list)
    dismissed_ids: list[str] = Field(default_factory=list)


class MealTypeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    meal_type: MealType = Field(..., alias="mealType")


class CuisineChoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rejected: list[str] = Field(default_factory=list)
    accepted: list[str] = Field(default_factory=list)
    user_id: str | None = Field(default=None, alias="userId")


class CuisineOptionsResponse(BaseModel):
    cuisines: list[str]
    source: str


class NopeRequest(BaseModel):
    id: str = Field(..., min_length=1)


class Suggestion(BaseModel):
    id: str
    name: str
    address: str
    photo_url: str | None = None
    url: str | None = None


class SuggestionsResponse(BaseModel):
    meal_type: MealType | None
    heading: str
    suggestions: list[Suggestion]
    message: str | None = None

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserPreferences(BaseModel):
    rejectedCuisines: list[str] = Field(default_factory=list)
    acceptedCuisines: list[str] = Field(default_factory=list)


class RejectCuisinesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    rejected_cuisines: list[str] = Field(default_factory=list, alias="rejectedCuisines")


class AcceptCuisinesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    accepted_cuisines: list[str] = Field(default_factory=list, alias="acceptedCuisines")


class PreferencesResponse(BaseModel):
    success: bool
    preferences: UserPreferences

from __future__ import annotations

import threading
from typing import Iterable

from .models import UserPreferences

_preferences: dict[str, UserPreferences] = {}
_lock = threading.Lock()


def _union(existing: list[str], updates: Iterable[str]) -> list[str]:
    merged = list(existing)
    for item in updates:
        if item not in merged:
            merged.append(item)
    return merged


def update_user_preferences(
    user_id: str,
    rejected: Iterable[str] | None = None,
    accepted: Iterable[str] | None = None,
) -> UserPreferences:
    """Merge new rejections/acceptances into a user's preferences and return a copy."""
    with _lock:
        prefs = _preferences.get(user_id) or UserPreferences()
        prefs = UserPreferences(
            rejectedCuisines=_union(prefs.rejectedCuisines, rejected or []),
            acceptedCuisines=_union(prefs.acceptedCuisines, accepted or []),
        )
        _preferences[user_id] = prefs
        return prefs.model_copy(deep=True)


def get_user_preferences(user_id: str) -> UserPreferences:
    with _lock:
        prefs = _preferences.get(user_id)
        return prefs.model_copy(deep=True) if prefs else UserPreferences()


def clear_preferences() -> None:
    with _lock:
        _preferences.clear()

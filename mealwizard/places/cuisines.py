from __future__ import annotations

import re
from collections import Counter
from typing import Any, Iterable

# Place types that say nothing about the kind of food served.
GENERIC_TYPES: frozenset[str] = frozenset({
    "restaurant",
    "food",
    "meal_takeaway",
    "meal_delivery",
    "bar",
    "cafe",
    "bakery",
    "point_of_interest",
    "establishment",
    "store",
    "supermarket",
    "grocery_or_supermarket",
    "liquor_store",
    "pharmacy",
    "gas_station",
    "lodging",
    "night_club",
    "shopping_mall",
    "convenience_store",
    "department_store",
})

# ---------------------------------------------------------------------------
# Name keywords
# ---------------------------------------------------------------------------

_NAME_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bjapanese\b|\bsushi\b|\bramen\b"), "Japanese"),
    (re.compile(r"\bkorean\b"), "Korean"),
    (re.compile(r"\bchinese\b|\bdim sum\b"), "Chinese"),
    (re.compile(r"\bthai\b"), "Thai"),
    (re.compile(r"\bvietnamese\b|\bpho\b|\bba(?:nh|hn?) mi\b"), "Vietnamese"),
    (re.compile(r"\bindian\b|\btandoor\b|\bmasala\b"), "Indian"),
    (re.compile(r"\bmexican\b|\btaqueria\b|\btaco\b"), "Mexican"),
    (re.compile(r"\bitalian\b|\bpizza\b|\bpasta\b"), "Italian"),
    (re.compile(r"\bmediterranean\b|\bgreek\b|\bshawarma\b|\bgyro\b"), "Mediterranean"),
    (re.compile(r"\bburger\b"), "Burgers"),
    (re.compile(r"\bamerican\b"), "American"),
]

_WORD_START_RE = re.compile(r"\b\w")
_RESTAURANT_SUFFIX = "_restaurant"


def title_case(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest alone."""
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text)


def _types_of(place: dict[str, Any]) -> list[str]:
    return [str(t or "").lower() for t in (place.get("types") or [])]


def cuisine_hints_from_name(name: str) -> list[str]:
    """Return cuisine labels whose keywords appear in ``name``, in table order."""
    lower = name.lower()
    hits: list[str] = []
    for pattern, label in _NAME_PATTERNS:
        if pattern.search(lower) and label not in hits:
            hits.append(label)
    return hits


def _label_from_type(place_type: str) -> str | None:
    if not place_type or place_type in GENERIC_TYPES:
        return None
    if place_type.startswith("meal_"):
        return None
    if place_type.endswith("_shop") or place_type.endswith("_store"):
        return None

    label = place_type
    if label.endswith(_RESTAURANT_SUFFIX):
        label = label[: -len(_RESTAURANT_SUFFIX)]
    label = label.replace("_", " ").strip()
    return title_case(label) if label else None


def extract_cuisines(places: Iterable[dict[str, Any]]) -> list[str]:
    """
    Derive the set of cuisine labels present in a batch of places.

    Type tags are the primary signal. Name keywords are only consulted for
    places carrying fewer than two types, since those are the ones Google
    tends to under-describe. The result is sorted case-insensitively.
    """
    found: set[str] = set()

    for place in places:
        types = _types_of(place)
        for place_type in types:
            label = _label_from_type(place_type)
            if label:
                found.add(label)

        if len(types) < 2:
            found.update(cuisine_hints_from_name(str(place.get("name") or "")))

    return sorted(found, key=str.casefold)


def top_types(places: Iterable[dict[str, Any]], limit: int = 30) -> list[dict[str, Any]]:
    counter: Counter[str] = Counter()
    for place in places:
        for place_type in place.get("types") or []:
            counter[place_type] += 1
    return [{"type": t, "count": c} for t, c in counter.most_common(limit)]


def is_restaurant(place: dict[str, Any]) -> bool:
    return "restaurant" in _types_of(place)


def matches_accepted(place: dict[str, Any], accepted: list[str]) -> bool:
    """True if a ``<cuisine>_restaurant`` type or the name/vicinity hits an accepted term."""
    for place_type in _types_of(place):
        if place_type.endswith(_RESTAURANT_SUFFIX):
            label = place_type[: -len(_RESTAURANT_SUFFIX)].replace("_", " ")
            if label in accepted:
                return True

    haystack = f"{place.get('name') or ''} {place.get('vicinity') or ''}".lower()
    return any(term in haystack for term in accepted)


def parse_accepted(raw: str | None, lowercase: bool = True) -> list[str]:
    """Split a comma-separated ``accepted`` query value into clean terms."""
    terms = [part.strip() for part in (raw or "").split(",")]
    if lowercase:
        terms = [t.lower() for t in terms]
    return [t for t in terms if t]

from __future__ import annotations

from mealwizard.places.cuisines import (
    cuisine_hints_from_name,
    extract_cuisines,
    is_restaurant,
    matches_accepted,
    parse_accepted,
    title_case,
    top_types,
)


def _place(name, types, vicinity=""):
    return {"name": name, "types": types, "vicinity": vicinity}


# ── Label extraction ─────────────────────────────────────────────────────


class TestExtractCuisines:
    def test_type_suffix_becomes_label(self):
        places = [_place("Sakura", ["japanese_restaurant", "restaurant", "food", "establishment"])]
        assert extract_cuisines(places) == ["Japanese"]

    def test_generic_and_shop_types_are_ignored(self):
        places = [_place("Corner", ["meal_takeaway", "ice_cream_shop", "liquor_store", "cafe", "bar"])]
        assert extract_cuisines(places) == []

    def test_multi_word_type_is_title_cased(self):
        places = [_place("Zaatar", ["middle_eastern_restaurant", "restaurant"])]
        assert extract_cuisines(places) == ["Middle Eastern"]

    def test_name_hints_only_when_types_are_sparse(self):
        places = [
            _place("Taqueria El Sol", ["restaurant"]),
            _place("Bob's Pizza & Pasta", []),
            _place("Sushi Palace", ["restaurant", "food"]),
        ]
        assert extract_cuisines(places) == ["Italian", "Mexican"]

    def test_result_is_unique_and_sorted_case_insensitively(self):
        places = [
            _place("A", ["thai_restaurant", "restaurant"]),
            _place("B", ["american_restaurant", "restaurant"]),
            _place("C", ["thai_restaurant", "restaurant"]),
            _place("D", ["barbecue_restaurant", "restaurant"]),
        ]
        assert extract_cuisines(places) == ["American", "Barbecue", "Thai"]

    def test_missing_fields_are_tolerated(self):
        assert extract_cuisines([{}, {"types": None, "name": None}]) == []


class TestNameHints:
    def test_table_order_and_synonyms(self):
        assert cuisine_hints_from_name("Pho Banh Mi & Sushi Bar") == ["Japanese", "Vietnamese"]

    def test_misspelled_banh_mi(self):
        assert cuisine_hints_from_name("Bahn Mi Express") == ["Vietnamese"]

    def test_word_boundaries(self):
        assert cuisine_hints_from_name("Thailand Deli") == []

    def test_burger_label(self):
        assert cuisine_hints_from_name("Big Burger Joint") == ["Burgers"]


# ── Helpers ──────────────────────────────────────────────────────────────


def test_title_case_keeps_rest_of_word():
    assert title_case("dim sum") == "Dim Sum"
    assert title_case("bbq") == "Bbq"


def test_top_types_most_common_first():
    places = [
        _place("A", ["restaurant", "food"]),
        _place("B", ["restaurant", "thai_restaurant"]),
        _place("C", ["restaurant"]),
    ]
    result = top_types(places)
    assert result[0] == {"type": "restaurant", "count": 3}
    assert {"type": "food", "count": 1} in result
    assert len(top_types(places, limit=1)) == 1


def test_is_restaurant_is_case_insensitive():
    assert is_restaurant(_place("A", ["Restaurant"]))
    assert not is_restaurant(_place("B", ["bar"]))


class TestMatchesAccepted:
    def test_type_hit(self):
        place = _place("Golden Dragon", ["chinese_restaurant", "restaurant"], "12 Main St")
        assert matches_accepted(place, ["chinese"])

    def test_multi_word_type_hit(self):
        place = _place("Zaatar", ["middle_eastern_restaurant", "restaurant"])
        assert matches_accepted(place, ["middle eastern"])

    def test_vicinity_keyword_hit(self):
        place = _place("Seoul Kitchen", ["restaurant"], "Korean Town Plaza")
        assert matches_accepted(place, ["korean"])

    def test_no_hit(self):
        place = _place("Luigi's", ["italian_restaurant", "restaurant"])
        assert not matches_accepted(place, ["thai"])


def test_parse_accepted():
    assert parse_accepted(" Korean, ,Japanese ") == ["korean", "japanese"]
    assert parse_accepted("Korean,Japanese", lowercase=False) == ["Korean", "Japanese"]
    assert parse_accepted(None) == []

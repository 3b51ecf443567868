"""
Tests for slot classification, seasonal scoring and personalization boosts.
"""
import pytest

from stylist_service.core.slots import (
    TOP, BOTTOM, FOOTWEAR, OUTERWEAR, ACCESSORY, UNKNOWN,
    classify_slot,
    has_required_slots,
    group_by_slot,
    missing_required_slots,
)
from stylist_service.core.seasonal_filter import (
    seasonal_score,
    formality_fits_temperature,
    score_item,
    sort_by_seasonal_fit,
    seasons_for_weather,
    temperature_band,
)
from stylist_service.core.personalization import (
    undertone_boost,
    height_boost,
    outfit_undertone_boost,
    MAX_BOOST,
)

from conftest import make_item, make_weather


# ==================== SLOTS ====================

class TestSlots:
    """Tests for the slot classifier."""

    def test_known_categories(self):
        assert classify_slot("Hoodie") == TOP
        assert classify_slot("jeans") == BOTTOM
        assert classify_slot("sneakers") == FOOTWEAR
        assert classify_slot("blazer") == OUTERWEAR
        assert classify_slot("belt") == ACCESSORY

    def test_subcategory_fallback(self):
        assert classify_slot("clothing", "chinos") == BOTTOM

    def test_unknown_category(self):
        assert classify_slot("widget") == UNKNOWN
        assert classify_slot(None) == UNKNOWN

    def test_required_slot_coverage(self):
        assert has_required_slots(["shirt", "jeans", "boots"])
        assert not has_required_slots(["shirt", "jeans", "coat"])

    def test_grouping_preserves_order(self):
        items = [
            make_item("t1", "shirt"),
            make_item("w1", "widget"),
            make_item("t2", "polo"),
            make_item("b1", "jeans"),
        ]
        groups = group_by_slot(items)
        assert [i.id for i in groups[TOP]] == ["t1", "t2"]
        assert [i.id for i in groups[UNKNOWN]] == ["w1"]
        assert missing_required_slots(groups) == [FOOTWEAR]


# ==================== SEASONAL ====================

class TestSeasonalFilter:
    """Tests for weather scoring."""

    def test_untagged_items(self):
        assert seasonal_score([], "summer") == 0.8

    def test_best_matching_season(self):
        assert seasonal_score(["winter"], "summer") == 0.1
        assert seasonal_score(["winter", "spring"], "summer") == 0.7

    def test_temperature_bands(self):
        assert temperature_band(30) == "hot"
        assert temperature_band(18) == "mild"
        assert temperature_band(-2) == "cold"

    def test_formality_by_temperature(self):
        assert not formality_fits_temperature(9, 30)
        assert formality_fits_temperature(9, 18)
        assert formality_fits_temperature(None, 30)

    def test_wet_weather_penalty(self):
        item = make_item("j1", "suede jacket", seasons=["spring"])
        scored = score_item(item, make_weather(12, "rain", "spring"))
        assert scored.seasonal_score == pytest.approx(0.7)
        assert item.seasonal_score == 0.8

    def test_off_season_is_inappropriate(self):
        item = make_item("s1", "shorts", seasons=["summer"])
        assert not score_item(item, make_weather(0, "snow", "winter")).weather_appropriate

    def test_sort_puts_appropriate_first(self):
        weather = make_weather(30, "clear", "summer")
        items = [
            score_item(make_item("wool", "sweater", seasons=["winter"]), weather),
            score_item(make_item("tee", "t-shirt", seasons=["summer"]), weather),
        ]
        assert [i.id for i in sort_by_seasonal_fit(items)] == ["tee", "wool"]

    def test_seasons_for_weather(self):
        assert seasons_for_weather(make_weather(season="all")) is None
        assert seasons_for_weather(make_weather(season="fall")) == ["fall", "all"]


# ==================== PERSONALIZATION ====================

class TestPersonalization:
    """Tests for undertone and height boosts."""

    def test_undertone_match_and_oppose(self):
        assert undertone_boost("rust", "warm") == pytest.approx(0.12)
        assert undertone_boost("teal", "warm") == pytest.approx(-0.08)
        assert undertone_boost("burgundy", "cool") == pytest.approx(0.12)

    def test_neutral_undertone(self):
        assert undertone_boost("black", "neutral") == pytest.approx(0.05)
        assert undertone_boost("red", "neutral") == 0.0

    def test_no_profile_no_boost(self):
        assert undertone_boost("rust", None) == 0.0
        assert height_boost(None, "oversized") == 0.0
        assert outfit_undertone_boost(["rust"], None) == 0.0

    def test_height_boosts(self):
        assert height_boost("short", "fitted", "cropped") == pytest.approx(0.15)
        assert height_boost("short", "oversized", "longline") == pytest.approx(-0.15)
        assert height_boost("tall", None, None, category="parka") == pytest.approx(0.15)

    def test_boosts_are_bounded(self):
        for undertone in ("warm", "cool", "neutral"):
            for color in ("rust", "teal", "black", "mauve"):
                assert -MAX_BOOST <= undertone_boost(color, undertone) <= MAX_BOOST

"""
Tests for the color harmony scorer.
"""
from itertools import product

import pytest

from stylist_service.core.color_harmony import (
    COLOR_HSL,
    score_pair,
    outfit_harmony,
    colors_are_compatible,
    filter_by_color_compatibility,
    get_complementary_colors,
    get_color_hsl,
    hue_difference,
    classify_harmony,
)
from stylist_service.core.models import ColorInfo

from conftest import make_item


# ==================== PAIR SCORES ====================

class TestScorePair:
    """Tests for pairwise color scores."""

    def test_identical_colors_score_one(self):
        """Every known color matches itself perfectly."""
        for name in COLOR_HSL:
            assert score_pair(name, name) == 1.0

    def test_identity_ignores_case_and_whitespace(self):
        assert score_pair(" Navy ", "navy") == 1.0

    def test_symmetric(self):
        """score(a, b) == score(b, a) for all known and unknown names."""
        names = list(COLOR_HSL) + ["xyzzy", "", None]
        for a, b in product(names, repeat=2):
            assert score_pair(a, b) == score_pair(b, a)

    def test_neutral_pair(self):
        assert score_pair("navy", "red") == 0.95
        assert score_pair("magenta", "white") == 0.95

    def test_unknown_color(self):
        assert score_pair("xyzzy", "red") == 0.7

    def test_complementary_with_similar_saturation(self):
        # red (0, 85) vs teal (180, 70): complementary 0.85 + 0.05
        assert score_pair("red", "teal") == pytest.approx(0.9)

    def test_clash_below_threshold(self):
        # hue distance 20 has no archetype, saturation gap 55 is penalized
        assert score_pair("mauve", "magenta") == pytest.approx(0.4)
        assert not colors_are_compatible("mauve", "magenta")

    def test_scores_stay_in_unit_interval(self):
        for a, b in product(COLOR_HSL, repeat=2):
            assert 0.0 <= score_pair(a, b) <= 1.0


class TestHueHelpers:

    def test_hue_difference_wraps(self):
        assert hue_difference(350, 10) == 20
        assert hue_difference(0, 180) == 180

    def test_classify_harmony(self):
        assert classify_harmony(5) == "monochromatic"
        assert classify_harmony(180) == "complementary"
        assert classify_harmony(120) == "triadic"
        assert classify_harmony(40) == "analogous"
        assert classify_harmony(20) is None

    def test_substring_lookup(self):
        assert get_color_hsl("dark navy") == COLOR_HSL["navy"]
        assert get_color_hsl("xyzzy") is None


# ==================== OUTFIT HARMONY ====================

class TestOutfitHarmony:
    """Tests for outfit-level aggregation."""

    def test_neutral_outfit_scores_high(self):
        colors = [ColorInfo("navy"), ColorInfo("khaki"), ColorInfo("white")]
        assert outfit_harmony(colors) >= 0.85

    def test_single_item(self):
        assert outfit_harmony([ColorInfo("red")]) == 1.0

    def test_missing_primaries(self):
        assert outfit_harmony([ColorInfo("red"), ColorInfo()]) == 0.9

    def test_secondary_clash_penalty(self):
        """A clashing secondary costs 0.1 per clashing primary."""
        clean = outfit_harmony([ColorInfo("magenta"), ColorInfo("white")])
        clashing = outfit_harmony([ColorInfo("magenta", secondary=["mauve"]), ColorInfo("white")])
        assert clean == pytest.approx(0.95)
        assert clashing == pytest.approx(0.85)


# ==================== FILTERING ====================

class TestColorFilter:

    def test_filters_incompatible_candidates(self):
        candidates = [
            make_item("a", "jeans", "mauve"),
            make_item("b", "jeans", "white"),
            make_item("c", "jeans", None),
        ]
        kept = filter_by_color_compatibility(candidates, ["magenta"])
        assert [i.id for i in kept] == ["b", "c"]

    def test_no_used_colors_keeps_all(self):
        candidates = [make_item("a", "jeans", "mauve")]
        assert filter_by_color_compatibility(candidates, [None]) == candidates

    def test_complementary_suggestions(self):
        assert "teal" in get_complementary_colors("red")
        assert len(get_complementary_colors("red")) <= 5

    def test_complementary_unknown_color(self):
        assert get_complementary_colors("xyzzy") == ["black", "white", "gray"]

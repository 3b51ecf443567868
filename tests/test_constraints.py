"""
Tests for occasions, moods and regeneration constraints.
"""
from stylist_service.core.constraints import (
    AVAILABLE_MOODS,
    FEEDBACK_TYPES,
    apply_constraints,
    constraints_from_feedback,
    matches_occasion,
    reorder_by_vibes,
    vibes_for_mood,
)
from stylist_service.core.models import GenerationConstraints
from stylist_service.core.slots import TOP

from conftest import make_item


class TestOccasions:

    def test_formality_band(self):
        assert matches_occasion(make_item("a", "shirt", formality=9), "formal")
        assert not matches_occasion(make_item("a", "shirt", formality=5), "formal")

    def test_missing_formality_counts_as_casual(self):
        assert matches_occasion(make_item("a", "shirt", formality=None), "casual")

    def test_unknown_or_missing_occasion_unrestricted(self):
        item = make_item("a", "shirt", formality=10)
        assert matches_occasion(item, "wedding")
        assert matches_occasion(item, None)


class TestMoods:

    def test_every_mood_has_vibes(self):
        for mood in AVAILABLE_MOODS:
            assert vibes_for_mood(mood["id"])

    def test_unknown_mood(self):
        assert vibes_for_mood("sleepy") == []


class TestFeedback:
    """Tests for feedback -> constraint translation."""

    def test_every_feedback_type_constrains(self):
        for feedback in FEEDBACK_TYPES:
            assert not constraints_from_feedback(feedback).is_empty()

    def test_more_formal(self):
        constraints = constraints_from_feedback("more_formal")
        assert constraints.min_formality == 6
        assert "polished" in constraints.prefer_vibes

    def test_more_casual(self):
        assert constraints_from_feedback("more_casual").max_formality == 4

    def test_swap(self):
        assert constraints_from_feedback("swap_top").must_swap_slots == [TOP]

    def test_unknown_feedback_is_empty(self):
        assert constraints_from_feedback("make_it_pop").is_empty()


class TestApplyConstraints:
    """Tests for candidate filtering."""

    def _pool(self):
        return [
            make_item("top-1", "shirt", "navy", formality=3),
            make_item("top-2", "blouse", "white", formality=7),
            make_item("bottom-1", "jeans", "denim", formality=3),
            make_item("bottom-2", "trousers", "navy", formality=7),
        ]

    def ids(self, items):
        return [i.id for i in items]

    def test_no_constraints_keeps_everything(self):
        assert self.ids(apply_constraints(self._pool(), None)) == ["top-1", "top-2", "bottom-1", "bottom-2"]

    def test_explicit_exclusions(self):
        constraints = GenerationConstraints(exclude_item_ids=["top-2"])
        assert "top-2" not in self.ids(apply_constraints(self._pool(), constraints))

    def test_formality_bounds(self):
        kept = apply_constraints(self._pool(), constraints_from_feedback("more_formal"))
        assert self.ids(kept) == ["top-2", "bottom-2"]

    def test_swap_excludes_previous_item_in_slot_only(self):
        constraints = constraints_from_feedback("swap_top", ["top-1", "bottom-1"])
        kept = self.ids(apply_constraints(self._pool(), constraints))
        assert "top-1" not in kept
        assert "bottom-1" in kept

    def test_completely_different(self):
        constraints = constraints_from_feedback("completely_different", ["top-1", "bottom-1"])
        assert self.ids(apply_constraints(self._pool(), constraints)) == ["top-2", "bottom-2"]

    def test_different_colors(self):
        constraints = constraints_from_feedback("different_colors", ["top-1"])
        kept = self.ids(apply_constraints(self._pool(), constraints))
        # navy was worn by top-1, so both navy items go
        assert kept == ["top-2", "bottom-1"]

    def test_vibes_reorder_without_filtering(self):
        items = [
            make_item("plain", "shirt"),
            make_item("bold", "shirt", style_vibes=["Bold"]),
        ]
        assert self.ids(reorder_by_vibes(items, ["bold"])) == ["bold", "plain"]
        assert self.ids(apply_constraints(items, None, mood="confident")) == ["bold", "plain"]

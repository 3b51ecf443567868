"""
End-to-end tests for the generation orchestrator using in-memory fakes.
"""
import asyncio

import pytest

from stylist_service.core import presentation
from stylist_service.core.constraints import constraints_from_feedback
from stylist_service.core.models import UserContext
from stylist_service.core.slots import TOP, BOTTOM, FOOTWEAR
from stylist_service.db.wardrobe import WardrobeUnavailableError
from stylist_service.observability import get_metrics

from conftest import FakeLLM, FakeWardrobe, make_item


def run(generator, user_id="user-1", **kwargs):
    return asyncio.run(generator.generate(user_id, **kwargs))


def assert_valid_outfit(outfit):
    slots = [item.slot for item in outfit.items]
    assert slots.count(TOP) == 1
    assert slots.count(BOTTOM) == 1
    assert slots.count(FOOTWEAR) == 1
    assert len(set(outfit.item_ids)) == len(outfit.item_ids)


# ==================== HAPPY PATHS ====================

class TestRuleGeneration:
    """Generation with the rule-based composer only."""

    def test_minimal_casual_wardrobe(self, make_generator):
        """navy shirt + khaki chinos + white sneakers make one casual outfit."""
        items = [
            make_item("shirt", "shirt", "navy"),
            make_item("chinos", "chinos", "khaki"),
            make_item("sneakers", "sneakers", "white"),
        ]
        result = run(make_generator(items), occasion="casual", count=1)

        assert len(result.outfits) == 1
        outfit = result.outfits[0]
        assert set(outfit.item_ids) == {"shirt", "chinos", "sneakers"}
        assert outfit.color_harmony_score >= 0.85
        assert outfit.occasion_match is True
        assert outfit.composer == "rule"

    def test_llm_failure_falls_back_to_rules(self, make_generator, basic_wardrobe, unavailable_llm):
        result = run(make_generator(basic_wardrobe, llm=unavailable_llm), count=3)

        assert len(result.outfits) == 3
        assert all(o.composer == "rule" for o in result.outfits)
        for outfit in result.outfits:
            assert_valid_outfit(outfit)
        assert get_metrics()["llm_failures"] == 1

    def test_disabled_llm_is_not_called(self, make_generator, basic_wardrobe):
        llm = FakeLLM(available=False)
        result = run(make_generator(basic_wardrobe, llm=llm), count=2)

        assert len(result.outfits) == 2
        assert llm.calls == []

    def test_outfits_sorted_by_style_score(self, make_generator, basic_wardrobe):
        result = run(make_generator(basic_wardrobe), count=3)
        scores = [o.style_score for o in result.outfits]
        assert scores == sorted(scores, reverse=True)

    def test_batch_outfits_do_not_share_items(self, make_generator, basic_wardrobe):
        result = run(make_generator(basic_wardrobe), count=3)
        ids = [i for o in result.outfits for i in o.item_ids]
        assert len(ids) == len(set(ids))


class TestLLMGeneration:
    """Generation with the LLM composer plus rule backfill."""

    def test_llm_outfits_backfilled(self, make_generator, basic_wardrobe):
        llm = FakeLLM({"outfits": [
            {"top": "top-1", "bottom": "bottom-1", "footwear": "shoes-1", "confidence": 0.8},
            {"top": "top-2", "bottom": "bottom-2", "footwear": "shoes-2", "confidence": 0.8},
        ]})
        result = run(make_generator(basic_wardrobe, llm=llm), count=3)

        composers = sorted(o.composer for o in result.outfits)
        assert composers == ["llm", "llm", "rule"]

        rule_outfit = next(o for o in result.outfits if o.composer == "rule")
        assert set(rule_outfit.item_ids) == {"top-3", "bottom-3", "shoes-3"}
        assert get_metrics()["llm_failures"] == 0
        assert get_metrics()["llm_shortfalls"] == 1

    def test_llm_outfits_sharing_items_backfilled(self, make_generator, basic_wardrobe):
        """Every LLM outfit reuses top-1: only the first is kept, rules fill the rest."""
        llm = FakeLLM({"outfits": [
            {"top": "top-1", "bottom": "bottom-3", "footwear": "shoes-3"},
            {"top": "top-1", "bottom": "bottom-1", "footwear": "shoes-1"},
            {"top": "top-1", "bottom": "bottom-2", "footwear": "shoes-2"},
        ]})
        result = run(make_generator(basic_wardrobe, llm=llm), count=3)

        ids = [i for o in result.outfits for i in o.item_ids]
        assert len(result.outfits) == 3
        assert len(ids) == len(set(ids))
        assert sorted(o.composer for o in result.outfits) == ["llm", "rule", "rule"]
        for outfit in result.outfits:
            assert_valid_outfit(outfit)

    def test_invalid_llm_outfit_discarded(self, make_generator, basic_wardrobe):
        llm = FakeLLM({"outfits": [{"top": "top-1", "bottom": "invented-99", "footwear": "shoes-1"}]})
        result = run(make_generator(basic_wardrobe, llm=llm), count=1)

        assert len(result.outfits) == 1
        assert result.outfits[0].composer == "rule"
        assert get_metrics()["llm_failures"] == 0
        assert get_metrics()["llm_shortfalls"] == 1

    def test_malformed_llm_response(self, make_generator, basic_wardrobe):
        result = run(make_generator(basic_wardrobe, llm=FakeLLM("<html>rate limited</html>")), count=2)
        assert len(result.outfits) == 2
        assert get_metrics()["llm_failures"] == 1


class TipLLM(FakeLLM):
    """Answers outfit requests with no outfits and tip requests with a fixed tip."""

    def __init__(self, tip='"Roll the sleeves once to show the watch."'):
        super().__init__({"outfits": []})
        self.tip = tip

    async def complete(self, messages, max_tokens=None, temperature=None):
        if messages[0]["role"] == "system":
            return await super().complete(messages, max_tokens, temperature)
        self.calls.append(messages)
        return self.tip


class TestPersonalizedTips:
    """LLM styling tips on rule-composed outfits."""

    def test_tip_replaced_for_personalized_user(self, make_generator, basic_wardrobe):
        llm = TipLLM()
        context = UserContext(height_category="short", skin_undertone="warm")
        result = run(make_generator(basic_wardrobe, llm=llm, context=context), count=2)

        assert len(result.outfits) == 2
        assert all(o.composer == "rule" for o in result.outfits)
        assert all(o.styling_tip == "Roll the sleeves once to show the watch." for o in result.outfits)

        tip_prompt = llm.calls[-1][0]["content"]
        assert "Height: short" in tip_prompt
        assert "Skin Undertone: warm" in tip_prompt

    def test_no_tip_request_without_profile(self, make_generator, basic_wardrobe):
        llm = TipLLM()
        result = run(make_generator(basic_wardrobe, llm=llm), count=2)

        assert len(llm.calls) == 1
        assert all(o.styling_tip != "Roll the sleeves once to show the watch." for o in result.outfits)

    def test_failed_tip_keeps_rule_tip(self, make_generator, basic_wardrobe, unavailable_llm):
        context = UserContext(skin_undertone="cool")
        result = run(make_generator(basic_wardrobe, llm=unavailable_llm, context=context), count=2)

        assert len(result.outfits) == 2
        for outfit in result.outfits:
            assert outfit.styling_tip == presentation.generate_styling_tip(
                outfit.items, None, result.weather.temperature
            )
        assert len(unavailable_llm.calls) == 3


# ==================== EMPTY RESULTS AND ERRORS ====================

class TestEmptyResults:

    def test_tiny_wardrobe(self, make_generator):
        items = [make_item("shirt", "shirt", "navy"), make_item("jeans", "jeans", "denim")]
        result = run(make_generator(items))

        assert result.outfits == []
        assert result.weather is not None
        assert result.weather.temperature == 20

    def test_missing_required_slot(self, make_generator):
        items = [
            make_item("shirt", "shirt", "navy"),
            make_item("jeans", "jeans", "denim"),
            make_item("coat", "coat", "camel"),
        ]
        assert run(make_generator(items)).outfits == []

    def test_wardrobe_unavailable_propagates(self, make_generator):
        generator = make_generator(wardrobe=FakeWardrobe(fail=True))

        with pytest.raises(WardrobeUnavailableError):
            run(generator)

        assert get_metrics()["errors"] == 1


# ==================== RETRIEVAL ====================

class TestRetrieval:
    """Vector path, fallback and filters."""

    @pytest.fixture
    def with_taste(self, taste_repo):
        taste_repo.records["user-1"] = {"taste_vector": [1.0, 0.0, 0.0]}

    def test_vector_path_used(self, make_generator, basic_wardrobe, with_taste):
        wardrobe = FakeWardrobe(basic_wardrobe, recently_worn=["top-1"])
        result = run(make_generator(wardrobe=wardrobe), count=1)

        assert len(result.outfits) == 1
        assert wardrobe.eligible_calls == []
        assert wardrobe.vector_calls[0]["exclude_ids"] == ["top-1"]

    def test_few_vector_results_fall_back(self, make_generator, basic_wardrobe, with_taste):
        wardrobe = FakeWardrobe(basic_wardrobe, vector_results=basic_wardrobe[:2])
        result = run(make_generator(wardrobe=wardrobe), count=1)

        assert len(result.outfits) == 1
        assert len(wardrobe.eligible_calls) == 1

    def test_vector_error_falls_back(self, make_generator, basic_wardrobe, with_taste):
        wardrobe = FakeWardrobe(basic_wardrobe, vector_fail=True)
        result = run(make_generator(wardrobe=wardrobe), count=1)

        assert len(result.outfits) == 1
        assert len(wardrobe.eligible_calls) == 1

    def test_no_taste_vector_uses_plain_fetch(self, make_generator, basic_wardrobe):
        wardrobe = FakeWardrobe(basic_wardrobe)
        run(make_generator(wardrobe=wardrobe), count=1)
        assert wardrobe.vector_calls == []

    def test_department_gender_filter(self, make_generator, basic_wardrobe):
        wardrobe = FakeWardrobe(basic_wardrobe)
        context = UserContext(departments=["menswear"])
        run(make_generator(wardrobe=wardrobe, context=context), count=1)

        assert wardrobe.eligible_calls[0][1] == ["male", "unisex"]

    def test_explicit_exclusions(self, make_generator, basic_wardrobe):
        result = run(make_generator(basic_wardrobe), count=2, exclude_item_ids=["top-1", "top-2"])

        assert len(result.outfits) == 1
        assert "top-3" in result.outfits[0].item_ids


class TestConstraints:

    def test_completely_different(self, make_generator, basic_wardrobe):
        previous = ["top-1", "bottom-1", "shoes-1"]
        constraints = constraints_from_feedback("completely_different", previous)
        result = run(make_generator(basic_wardrobe), count=2, constraints=constraints)

        assert len(result.outfits) == 2
        for outfit in result.outfits:
            assert not set(previous) & set(outfit.item_ids)

    def test_more_formal(self, make_generator):
        items = [
            make_item("tee", "t-shirt", "white", formality=2),
            make_item("shirt", "shirt", "white", formality=7),
            make_item("jeans", "jeans", "denim", formality=3),
            make_item("trousers", "trousers", "navy", formality=7),
            make_item("sneakers", "sneakers", "white", formality=2),
            make_item("loafers", "loafers", "brown", formality=7),
        ]
        constraints = constraints_from_feedback("more_formal")
        result = run(make_generator(items), count=1, constraints=constraints)

        assert set(result.outfits[0].item_ids) == {"shirt", "trousers", "loafers"}

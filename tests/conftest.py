"""
Shared fixtures: in-memory stand-ins for the wardrobe store, taste
repository, profiles, outfit store, weather and LLM client.
"""
import json
import random

import pytest

from stylist_service.core.models import WardrobeItem, ColorInfo, UserContext
from stylist_service.core.orchestrator import OutfitGenerator
from stylist_service.core.taste_vector import TasteVectorStore
from stylist_service.db.wardrobe import WardrobeUnavailableError
from stylist_service.llm import LLMUnavailableError
from stylist_service.observability import reset_metrics
from stylist_service.services.weather import WeatherData, default_weather


def make_item(item_id, category, color=None, formality=5, embedding=None, **kwargs) -> WardrobeItem:
    """Build a wardrobe item with sensible defaults."""
    return WardrobeItem(
        id=item_id,
        user_id=kwargs.pop("user_id", "user-1"),
        category=category,
        colors=ColorInfo(primary=color, secondary=kwargs.pop("secondary", [])),
        formality_score=formality,
        embedding=embedding,
        **kwargs,
    )


def make_weather(temperature=20, condition="clear", season="all") -> WeatherData:
    return WeatherData(
        temperature=temperature,
        feels_like=temperature,
        humidity=50,
        condition=condition,
        description=condition,
        wind_speed=3,
        is_rainy=condition in ("rain", "drizzle", "thunderstorm"),
        is_snowy=condition == "snow",
        season_suggestion=season,
    )


class FakeWardrobe:
    """Wardrobe store backed by a list."""

    def __init__(self, items=None, recently_worn=None, vector_results=None, fail=False, vector_fail=False):
        self.items = list(items or [])
        self.recently_worn = list(recently_worn or [])
        self.vector_results = vector_results
        self.fail = fail
        self.vector_fail = vector_fail
        self.vector_calls = []
        self.eligible_calls = []

    def fetch_eligible_items(self, user_id, genders=None):
        self.eligible_calls.append((user_id, list(genders or [])))
        if self.fail:
            raise WardrobeUnavailableError("store down")
        return [i for i in self.items if genders is None or i.gender in genders]

    def fetch_recently_worn(self, user_id, days=3):
        return list(self.recently_worn)

    def fetch_candidates_by_vector(self, user_id, taste_vector, genders=None, per_slot_limit=15,
                                   seasons=None, exclude_ids=None):
        self.vector_calls.append({"seasons": seasons, "exclude_ids": exclude_ids, "genders": genders})
        if self.vector_fail:
            raise RuntimeError("vector index unavailable")
        if self.vector_results is not None:
            return list(self.vector_results)
        return [i for i in self.items if i.id not in set(exclude_ids or [])]

    def get_item_embeddings(self, item_ids):
        return [i.embedding for i in self.items if i.id in item_ids and i.embedding]

    def get_wardrobe_categories(self, user_id):
        return [i.category for i in self.items]


class FakeTasteRepository:
    """Taste persistence backed by dicts."""

    def __init__(self, records=None, references=None, fail_reads=False, fail_writes=False):
        self.records = dict(records or {})
        self.references = dict(references or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get_taste_record(self, user_id):
        if self.fail_reads:
            raise ConnectionError("taste store down")
        return self.records.get(user_id)

    def save_taste_record(self, user_id, taste_vector, interaction_count, initialized_at, last_updated):
        if self.fail_writes:
            raise ConnectionError("taste store down")
        self.records[user_id] = {
            "taste_vector": taste_vector,
            "interaction_count": interaction_count,
            "initialized_at": initialized_at,
            "last_updated": last_updated,
        }
        return True

    def get_reference_embeddings(self, image_ids):
        return [self.references[i] for i in image_ids if i in self.references]


class FakeProfiles:
    def __init__(self, context=None):
        self.context = context or UserContext()

    def get_user_context(self, user_id):
        return self.context


class FakeOutfitStore:
    """Outfit persistence backed by a dict of outfit_id -> record."""

    def __init__(self, outfits=None, active_users=None, locations=None):
        self.outfits = dict(outfits or {})
        self.active_users = list(active_users or [])
        self.locations = dict(locations or {})
        self.saved = []
        self.worn = []
        self.cleared = []

    def save_generated_outfit(self, user_id, outfit, occasion=None, weather=None, source="on_demand", target_date=None):
        outfit_id = f"outfit-{len(self.saved) + 1}"
        self.saved.append({
            "outfit_id": outfit_id,
            "user_id": user_id,
            "items": outfit.item_ids,
            "source": source,
            "target_date": target_date,
        })
        self.outfits[outfit_id] = {"user_id": user_id, "items": outfit.item_ids}
        return outfit_id

    def get_outfit_item_ids(self, user_id, outfit_id):
        record = self.outfits.get(outfit_id)
        if not record or record["user_id"] != user_id:
            return []
        return list(record["items"])

    def get_previous_item_ids(self, user_id, outfit_ids):
        ids = []
        for outfit_id in outfit_ids:
            ids.extend(self.get_outfit_item_ids(user_id, outfit_id))
        return ids

    def count_user_outfits(self, user_id):
        return sum(1 for record in self.outfits.values() if record["user_id"] == user_id)

    def record_wear(self, user_id, outfit_id, item_ids):
        self.worn.append((outfit_id, list(item_ids)))
        return True

    def mark_saved(self, user_id, outfit_id):
        return True

    def get_active_users(self, active_days=7):
        return list(self.active_users)

    def get_user_location(self, user_id):
        return self.locations.get(user_id, {})

    def clear_pre_generated(self, user_id, before=None, on=None):
        self.cleared.append((user_id, before, on))
        return 0


class FakeLLM:
    """LLM client returning a canned response or raising."""

    def __init__(self, response=None, error=None, available=True):
        self.response = response
        self.error = error
        self.available = available
        self.calls = []

    def is_available(self):
        return self.available

    async def complete(self, messages, max_tokens=None, temperature=None):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if isinstance(self.response, (dict, list)):
            return json.dumps(self.response)
        return self.response


def fixed_weather(weather=None):
    """Async weather resolver that ignores coordinates."""
    async def resolve(lat=None, lon=None):
        return weather or default_weather()
    return resolve


@pytest.fixture(autouse=True)
def quiet_observability(monkeypatch):
    """No generation log files and fresh counters per test."""
    monkeypatch.setenv("STYLIST_LOGGING_ENABLED", "false")
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def basic_wardrobe():
    """Three tops, three bottoms, three pairs of shoes, one coat."""
    return [
        make_item("top-1", "shirt", "navy"),
        make_item("top-2", "t-shirt", "white"),
        make_item("top-3", "sweater", "gray"),
        make_item("bottom-1", "chinos", "khaki"),
        make_item("bottom-2", "jeans", "denim"),
        make_item("bottom-3", "trousers", "black"),
        make_item("shoes-1", "sneakers", "white"),
        make_item("shoes-2", "loafers", "brown"),
        make_item("shoes-3", "boots", "black"),
        make_item("coat-1", "coat", "camel"),
    ]


@pytest.fixture
def taste_repo():
    return FakeTasteRepository()


@pytest.fixture
def make_generator(taste_repo):
    """Factory for an OutfitGenerator wired to fakes."""
    def build(items=None, wardrobe=None, llm=None, weather=None, context=None, seed=7):
        return OutfitGenerator(
            wardrobe=wardrobe or FakeWardrobe(items),
            taste_store=TasteVectorStore(taste_repo),
            profiles=FakeProfiles(context),
            resolve_weather=fixed_weather(weather),
            llm_client=llm,
            rng=random.Random(seed),
        )
    return build


@pytest.fixture
def unavailable_llm():
    return FakeLLM(error=LLMUnavailableError("All LLM models failed"))

"""MongoProfileStore query shape, checked against a fake collection."""

from types import SimpleNamespace

import pytest
from pymongo import DESCENDING

from services.mentor_matching import QUICK_POOL_SIZE, quick_recommendations
from services.profile_store import MongoProfileStore

OPEN_SLOT_QUERY = {
    "is_accepting": True,
    "$expr": {"$lt": ["$current_mentees", "$max_mentees"]},
}


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs
        self.calls: list[tuple] = []

    def sort(self, *args):
        self.calls.append(("sort", args))
        return self

    def limit(self, n):
        self.calls.append(("limit", n))
        self.docs = self.docs[:n]
        return self

    async def to_list(self, length=None):
        return list(self.docs)


class FakeCollection:
    def __init__(self, docs):
        self.docs = docs
        self.queries: list[dict] = []
        self.cursor = None

    def find(self, query, projection=None):
        self.queries.append(query)
        self.cursor = FakeCursor(self.docs)
        return self.cursor

    async def find_one(self, query, projection=None):
        self.queries.append(query)
        return next((d for d in self.docs if d["profile_id"] == query["profile_id"]), None)


def _mentor_doc(profile_id, **extra):
    return {"profile_id": profile_id, "industry": "Software", "specializations": ["React"], **extra}


@pytest.mark.asyncio
async def test_matching_pool_query():
    mentors = FakeCollection([_mentor_doc("a"), _mentor_doc("b")])
    store = MongoProfileStore(SimpleNamespace(mentor_profiles=mentors))

    pool = await store.list_accepting_mentors()

    assert [m.profile_id for m in pool] == ["a", "b"]
    assert mentors.queries == [OPEN_SLOT_QUERY]
    assert mentors.cursor.calls == [("sort", ("profile_id", 1))]


@pytest.mark.asyncio
async def test_quick_pool_filters_full_mentors_before_limit():
    # Full mentors never use up the quick pool, so it holds the top rated open mentors
    docs = [_mentor_doc(f"m{i:02d}", avg_rating=4.0) for i in range(QUICK_POOL_SIZE + 5)]
    mentors = FakeCollection(docs)
    store = MongoProfileStore(SimpleNamespace(mentor_profiles=mentors))

    result = await quick_recommendations(store, ["react"], limit=3)

    assert len(result) == 3
    assert mentors.queries == [OPEN_SLOT_QUERY]
    assert mentors.cursor.calls == [
        ("sort", ([("avg_rating", DESCENDING), ("profile_id", 1)],)),
        ("limit", QUICK_POOL_SIZE),
    ]


@pytest.mark.asyncio
async def test_candidate_skill_profile_uses_headline():
    candidates = FakeCollection([
        {"profile_id": "c", "headline": "Fintech analyst", "skills": ["SQL"]},
    ])
    store = MongoProfileStore(SimpleNamespace(candidate_profiles=candidates))

    profile = await store.get_candidate_skill_profile("c")
    assert profile.skills == ["SQL"]
    assert profile.industry_hint == "Fintech analyst"
    assert await store.get_candidate_skill_profile("missing") is None

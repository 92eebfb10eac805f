"""Shared test fixtures and pytest markers."""

import os
from typing import Optional

import pytest

from models.profiles import CandidateSkillProfile, MentorProfile


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: needs a live MongoDB at MONGODB_TEST_URL"
    )


def pytest_collection_modifyitems(config, items):
    if os.getenv("MONGODB_TEST_URL"):
        return
    skip = pytest.mark.skip(reason="MONGODB_TEST_URL not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


def make_mentor(profile_id: str = "m1", **overrides) -> MentorProfile:
    data = {
        "profile_id": profile_id,
        "full_name": f"Mentor {profile_id}",
        "industry": "Software",
        "specializations": ["React", "Node.js"],
        "years_experience": 8,
        "max_mentees": 4,
        "current_mentees": 1,
        "is_accepting": True,
        "total_observations": 0,
        "total_endorsements": 0,
        "avg_rating": None,
    }
    data.update(overrides)
    return MentorProfile(**data)


class InMemoryProfileStore:
    """ProfileStore over plain dicts; records how often it was queried."""

    def __init__(self, candidates=None, mentors=None, fail: Optional[Exception] = None):
        self.candidates: dict[str, CandidateSkillProfile] = candidates or {}
        self.mentors: list[MentorProfile] = mentors or []
        self.fail = fail
        self.mentor_queries: list[dict] = []

    async def get_candidate_skill_profile(self, candidate_id):
        if self.fail:
            raise self.fail
        return self.candidates.get(candidate_id)

    async def list_accepting_mentors(self, order_by_rating=False, limit=None):
        if self.fail:
            raise self.fail
        self.mentor_queries.append({"order_by_rating": order_by_rating, "limit": limit})
        # Like a store that cannot compare two fields: only is_accepting is applied
        pool = [m for m in self.mentors if m.is_accepting]
        if order_by_rating:
            rated = sorted(
                (m for m in pool if m.avg_rating is not None),
                key=lambda m: m.avg_rating,
                reverse=True,
            )
            pool = rated + [m for m in pool if m.avg_rating is None]
        if limit is not None:
            pool = pool[:limit]
        return [m.model_copy(deep=True) for m in pool]


@pytest.fixture
def mentor_factory():
    return make_mentor


@pytest.fixture
def store():
    candidates = {
        "cand-1": CandidateSkillProfile(skills=["JavaScript", "React"], industry_hint="Software Engineering"),
        "cand-empty": CandidateSkillProfile(skills=[], industry_hint=None),
    }
    mentors = [
        make_mentor("m-react", specializations=["Senior React Developer", "Node.js"],
                    industry="Software", avg_rating=4.8, total_endorsements=6),
        make_mentor("m-design", specializations=["Figma", "User Research"],
                    industry="Design", years_experience=2, avg_rating=3.9),
        make_mentor("m-full", specializations=["React"], max_mentees=5, current_mentees=5),
        make_mentor("m-closed", specializations=["React"], is_accepting=False),
        make_mentor("m-finance", specializations=["Python", "SQL"], industry="Finance",
                    years_experience=30, max_mentees=10, current_mentees=0),
    ]
    return InMemoryProfileStore(candidates=candidates, mentors=mentors)

from typing import Optional, Protocol

from pymongo import DESCENDING

from db import get_db
from models.profiles import CandidateProfile, CandidateSkillProfile, MentorProfile


class ProfileStore(Protocol):
    """Read-only view of profile data that mentor matching depends on."""

    async def get_candidate_skill_profile(self, candidate_id: str) -> Optional[CandidateSkillProfile]:
        ...

    async def list_accepting_mentors(
        self,
        order_by_rating: bool = False,
        limit: Optional[int] = None,
    ) -> list[MentorProfile]:
        ...


class MongoProfileStore:
    """ProfileStore backed by the candidate_profiles / mentor_profiles collections."""

    def __init__(self, db):
        self.db = db

    async def get_candidate_skill_profile(self, candidate_id: str) -> Optional[CandidateSkillProfile]:
        doc = await self.db.candidate_profiles.find_one({"profile_id": candidate_id}, {"_id": 0})
        if doc is None:
            return None
        return CandidateSkillProfile.from_candidate(CandidateProfile(**doc))

    async def list_accepting_mentors(
        self,
        order_by_rating: bool = False,
        limit: Optional[int] = None,
    ) -> list[MentorProfile]:
        # Full mentors are dropped server-side; matching filters again anyway
        query = {
            "is_accepting": True,
            "$expr": {"$lt": ["$current_mentees", "$max_mentees"]},
        }
        cursor = self.db.mentor_profiles.find(query, {"_id": 0})
        if order_by_rating:
            # Descending order puts null ratings last
            cursor = cursor.sort([("avg_rating", DESCENDING), ("profile_id", 1)])
        else:
            cursor = cursor.sort("profile_id", 1)
        if limit is not None:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=None)
        return [MentorProfile(**doc) for doc in docs]


def get_profile_store() -> ProfileStore:
    """FastAPI dependency returning the store bound to the live database."""
    return MongoProfileStore(get_db())

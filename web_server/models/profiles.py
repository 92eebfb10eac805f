from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from db import get_db


# ── Stored documents ─────────────────────────────────────────────────────


class MentorProfile(BaseModel):
    """Mentor document as stored in MongoDB.

    Read leniently: out-of-range numbers coming from the store are left for
    the scorers to clamp rather than rejected here.
    """
    profile_id: str
    full_name: Optional[str] = None
    industry: str = ""
    specializations: list[str] = []
    years_experience: float = 0
    company: Optional[str] = None
    job_title: Optional[str] = None
    max_mentees: int = 3
    current_mentees: int = 0
    is_accepting: bool = True
    total_observations: int = 0
    total_endorsements: int = 0
    avg_rating: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("specializations", mode="before")
    @classmethod
    def specializations_default(cls, value):
        # Older documents store missing lists as null
        return [] if value is None else value

    @property
    def has_open_slot(self) -> bool:
        return self.is_accepting and self.current_mentees < self.max_mentees


class CandidateProfile(BaseModel):
    """Candidate document as stored in MongoDB."""
    profile_id: str
    full_name: Optional[str] = None
    headline: Optional[str] = None
    skills: list[str] = []
    experience_years: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("skills", mode="before")
    @classmethod
    def skills_default(cls, value):
        return [] if value is None else value


class CandidateSkillProfile(BaseModel):
    """The slice of a candidate that mentor matching reads."""
    skills: list[str] = []
    industry_hint: Optional[str] = None

    @field_validator("skills", mode="before")
    @classmethod
    def skills_default(cls, value):
        return [] if value is None else value

    @classmethod
    def from_candidate(cls, candidate: CandidateProfile) -> "CandidateSkillProfile":
        # The headline doubles as the industry hint
        return cls(skills=candidate.skills, industry_hint=candidate.headline)


# ── Request / response schemas ──────────────────────────────────────────


class MentorCreate(BaseModel):
    """Body of POST /mentors."""
    full_name: Optional[str] = None
    industry: str = Field(..., min_length=1)
    specializations: list[str] = []
    years_experience: float = Field(..., ge=0)
    company: Optional[str] = None
    job_title: Optional[str] = None
    max_mentees: int = Field(3, gt=0)
    is_accepting: bool = True


class MentorUpdate(BaseModel):
    """Body of PUT /mentors/{profile_id}; every field optional."""
    full_name: Optional[str] = None
    industry: Optional[str] = Field(None, min_length=1)
    specializations: Optional[list[str]] = None
    years_experience: Optional[float] = Field(None, ge=0)
    company: Optional[str] = None
    job_title: Optional[str] = None
    max_mentees: Optional[int] = Field(None, gt=0)
    is_accepting: Optional[bool] = None


class CandidateCreate(BaseModel):
    """Body of POST /candidates."""
    full_name: Optional[str] = None
    headline: Optional[str] = None
    skills: list[str] = []
    experience_years: Optional[int] = Field(None, ge=0)


class CandidateUpdate(BaseModel):
    """Body of PUT /candidates/{profile_id}."""
    full_name: Optional[str] = None
    headline: Optional[str] = None
    skills: Optional[list[str]] = None
    experience_years: Optional[int] = Field(None, ge=0)


# ── Mentor CRUD ──────────────────────────────────────────────────────────


async def create_mentor(data: MentorCreate) -> MentorProfile:
    """Insert a new mentor with empty counters and return it."""
    db = get_db()
    doc = {
        "profile_id": str(uuid4()),
        "created_at": datetime.now(timezone.utc).isoformat(),
        "current_mentees": 0,
        "total_observations": 0,
        "total_endorsements": 0,
        "avg_rating": None,
        **data.model_dump(),
    }
    await db.mentor_profiles.insert_one(doc)
    doc.pop("_id", None)
    return MentorProfile(**doc)


async def get_mentor(profile_id: str) -> Optional[MentorProfile]:
    db = get_db()
    doc = await db.mentor_profiles.find_one({"profile_id": profile_id}, {"_id": 0})
    if doc is None:
        return None
    return MentorProfile(**doc)


async def update_mentor(profile_id: str, data: MentorUpdate) -> Optional[MentorProfile]:
    """Apply only the provided fields. Returns None if the mentor is unknown."""
    db = get_db()
    changes = data.model_dump(exclude_none=True)
    if not changes:
        return await get_mentor(profile_id)

    changes["updated_at"] = datetime.now(timezone.utc).isoformat()
    result = await db.mentor_profiles.find_one_and_update(
        {"profile_id": profile_id},
        {"$set": changes},
        projection={"_id": 0},
        return_document=True,
    )
    if result is None:
        return None
    return MentorProfile(**result)


async def delete_mentor(profile_id: str) -> bool:
    db = get_db()
    result = await db.mentor_profiles.delete_one({"profile_id": profile_id})
    return result.deleted_count > 0


async def reserve_mentor_slot(profile_id: str) -> Optional[MentorProfile]:
    """Atomically take one mentee slot.

    Returns None when the mentor is unknown, not accepting, or already full.
    """
    db = get_db()
    result = await db.mentor_profiles.find_one_and_update(
        {
            "profile_id": profile_id,
            "is_accepting": True,
            "$expr": {"$lt": ["$current_mentees", "$max_mentees"]},
        },
        {"$inc": {"current_mentees": 1}},
        projection={"_id": 0},
        return_document=True,
    )
    if result is None:
        return None
    return MentorProfile(**result)


async def release_mentor_slot(profile_id: str) -> None:
    """Give a mentee slot back, never dropping the counter below zero."""
    db = get_db()
    await db.mentor_profiles.update_one(
        {"profile_id": profile_id, "current_mentees": {"$gt": 0}},
        {"$inc": {"current_mentees": -1}},
    )


# ── Candidate CRUD ───────────────────────────────────────────────────────


async def create_candidate(data: CandidateCreate) -> CandidateProfile:
    db = get_db()
    doc = {
        "profile_id": str(uuid4()),
        "created_at": datetime.now(timezone.utc).isoformat(),
        **data.model_dump(),
    }
    await db.candidate_profiles.insert_one(doc)
    doc.pop("_id", None)
    return CandidateProfile(**doc)


async def get_candidate(profile_id: str) -> Optional[CandidateProfile]:
    db = get_db()
    doc = await db.candidate_profiles.find_one({"profile_id": profile_id}, {"_id": 0})
    if doc is None:
        return None
    return CandidateProfile(**doc)


async def update_candidate(profile_id: str, data: CandidateUpdate) -> Optional[CandidateProfile]:
    db = get_db()
    changes = data.model_dump(exclude_none=True)
    if not changes:
        return await get_candidate(profile_id)

    changes["updated_at"] = datetime.now(timezone.utc).isoformat()
    result = await db.candidate_profiles.find_one_and_update(
        {"profile_id": profile_id},
        {"$set": changes},
        projection={"_id": 0},
        return_document=True,
    )
    if result is None:
        return None
    return CandidateProfile(**result)

from enum import Enum

from pydantic import BaseModel, Field

from models.profiles import MentorProfile


class CompatibilityLevel(str, Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    low = "low"


class MatchScore(BaseModel):
    """Per-factor breakdown, every value on a 0-100 scale."""
    total: int = Field(..., ge=0, le=100)
    skill_match: int = Field(..., ge=0, le=100)
    industry_match: int = Field(..., ge=0, le=100)
    availability_score: int = Field(..., ge=0, le=100)
    experience_score: int = Field(..., ge=0, le=100)
    rating_score: int = Field(..., ge=0, le=100)


class MentorMatch(BaseModel):
    mentor: MentorProfile
    score: MatchScore
    match_reasons: list[str]
    compatibility_level: CompatibilityLevel


class WeightsUsed(BaseModel):
    skill: float
    industry: float
    availability: float
    experience: float
    rating: float


class MentorMatchResponse(BaseModel):
    candidate_id: str
    total_mentors: int
    matches: list[MentorMatch]
    weights_used: WeightsUsed


class QuickMatchRequest(BaseModel):
    """Body of POST /mentor-matches/quick."""
    skills: list[str]
    limit: int = Field(5, ge=1, le=20)


class QuickMatchResponse(BaseModel):
    mentors: list[MentorProfile]

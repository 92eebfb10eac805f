import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from models.matching import CompatibilityLevel, MatchScore, MentorMatch
from models.profiles import CandidateSkillProfile, MentorProfile
from services.profile_store import ProfileStore
from services.taxonomy import industry_groups_for, skill_categories_for

logger = logging.getLogger(__name__)

# ── Tunables ─────────────────────────────────────────────────────────────

DIRECT_MATCH_POINTS = 60
CATEGORY_MATCH_POINTS = 40

NEUTRAL_INDUSTRY_SCORE = 50
EXACT_INDUSTRY_SCORE = 100
RELATED_INDUSTRY_SCORE = 75
OTHER_INDUSTRY_SCORE = 25

BASE_RATING_SCORE = 50
RATING_POINTS = 40
ACTIVITY_POINTS_CAP = 10

STRONG_SKILL_REASON = 70
RELATED_SKILL_REASON = 40
INDUSTRY_REASON = 75
AVAILABILITY_REASON = 70
EXPERIENCE_REASON = 80
RATING_REASON = 4.5
ENDORSEMENT_REASON = 5

# Quick recommendations only look at the best-rated slice of the pool
QUICK_POOL_SIZE = 20


def _round(value: float) -> int:
    """Round half up, so 72.5 -> 73 regardless of parity."""
    return int(math.floor(value + 0.5))


def _normalize(terms: list[str]) -> list[str]:
    normalized = (t.strip().lower() for t in terms if t)
    return [t for t in normalized if t]


# ── Weights ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Weights:
    skill: float = 0.35
    industry: float = 0.20
    availability: float = 0.15
    experience: float = 0.15
    rating: float = 0.15

    def normalized(self) -> "Weights":
        """Scale the weights so they sum to 1.0."""
        total = self.skill + self.industry + self.availability + self.experience + self.rating
        if total <= 0:
            raise ValueError("At least one weight must be positive")
        return Weights(
            skill=self.skill / total,
            industry=self.industry / total,
            availability=self.availability / total,
            experience=self.experience / total,
            rating=self.rating / total,
        )


DEFAULT_WEIGHTS = Weights()

# ── Sub-scores ───────────────────────────────────────────────────────────

@dataclass
class SkillMatch:
    score: int
    matched_skills: list[str] = field(default_factory=list)


def match_skills(candidate_skills: list[str], mentor_specializations: list[str]) -> SkillMatch:
    """Score how well a mentor's specializations cover a candidate's skills.

    Up to 60 points come from direct hits (either string containing the
    other) and up to 40 from shared skill categories. The matched candidate
    skills are returned in their normalized form for reason text.
    """
    skills = _normalize(candidate_skills or [])
    specs = _normalize(mentor_specializations or [])
    if not skills or not specs:
        return SkillMatch(score=0)

    direct = [s for s in skills if any(s in spec or spec in s for spec in specs)]

    candidate_categories = skill_categories_for(skills)
    mentor_categories = skill_categories_for(specs)
    shared = candidate_categories & mentor_categories

    direct_score = min(len(direct) / len(skills) * DIRECT_MATCH_POINTS, DIRECT_MATCH_POINTS)
    category_score = min(
        len(shared) / max(len(candidate_categories), 1) * CATEGORY_MATCH_POINTS,
        CATEGORY_MATCH_POINTS,
    )
    return SkillMatch(score=_round(direct_score + category_score), matched_skills=direct)


def match_industry(candidate_industry: Optional[str], mentor_industry: str) -> int:
    if not candidate_industry or not candidate_industry.strip():
        return NEUTRAL_INDUSTRY_SCORE

    candidate = candidate_industry.strip().lower()
    mentor = (mentor_industry or "").strip().lower()
    if mentor and (mentor in candidate or candidate in mentor):
        return EXACT_INDUSTRY_SCORE

    if industry_groups_for(candidate) & industry_groups_for(mentor):
        return RELATED_INDUSTRY_SCORE

    return OTHER_INDUSTRY_SCORE


def score_availability(mentor: MentorProfile) -> int:
    if not mentor.is_accepting or mentor.max_mentees <= 0:
        return 0
    available_slots = mentor.max_mentees - mentor.current_mentees
    if available_slots <= 0:
        return 0
    return min(_round(available_slots / mentor.max_mentees * 100), 100)


def score_experience(years_experience: float) -> int:
    # Mid-career mentors are preferred over both juniors and veterans
    if 5 <= years_experience <= 15:
        return 100
    if 3 <= years_experience < 5:
        return 80
    if 15 < years_experience <= 25:
        return 85
    if years_experience > 25:
        return 70
    if 1 <= years_experience < 3:
        return 60
    return 40


def score_rating(avg_rating: Optional[float], total_observations: int, total_endorsements: int) -> int:
    score = float(BASE_RATING_SCORE)
    if avg_rating:
        score += min(max(avg_rating, 0.0), 5.0) / 5 * RATING_POINTS
    activity = max(total_observations + total_endorsements, 0)
    score += min(activity / 10, ACTIVITY_POINTS_CAP)
    return _round(min(score, 100))


def compatibility_level(total: int) -> CompatibilityLevel:
    if total >= 80:
        return CompatibilityLevel.excellent
    if total >= 60:
        return CompatibilityLevel.good
    if total >= 40:
        return CompatibilityLevel.fair
    return CompatibilityLevel.low


def match_reasons(mentor: MentorProfile, score: MatchScore, matched_skills: list[str]) -> list[str]:
    """Short justifications, one per threshold the breakdown clears."""
    reasons: list[str] = []

    if score.skill_match >= STRONG_SKILL_REASON:
        reasons.append(f"Strong skill alignment ({', '.join(matched_skills[:3])})")
    elif score.skill_match >= RELATED_SKILL_REASON:
        reasons.append("Related skill background")

    if score.industry_match >= INDUSTRY_REASON:
        reasons.append(f"Industry expertise in {mentor.industry}")

    if score.availability_score >= AVAILABILITY_REASON:
        reasons.append("Highly available for new mentees")

    if score.experience_score >= EXPERIENCE_REASON:
        reasons.append(f"{mentor.years_experience:g}+ years of experience")

    if mentor.avg_rating is not None and mentor.avg_rating >= RATING_REASON:
        reasons.append(f"Highly rated ({mentor.avg_rating:.1f} stars)")

    if mentor.total_endorsements >= ENDORSEMENT_REASON:
        reasons.append(f"{mentor.total_endorsements} successful endorsements")

    return reasons


# ── Scoring ──────────────────────────────────────────────────────────────

def score_mentor(
    candidate: CandidateSkillProfile,
    mentor: MentorProfile,
    weights: Weights = DEFAULT_WEIGHTS,
) -> MentorMatch:
    skill = match_skills(candidate.skills, mentor.specializations)
    industry = match_industry(candidate.industry_hint, mentor.industry)
    availability = score_availability(mentor)
    experience = score_experience(mentor.years_experience)
    rating = score_rating(mentor.avg_rating, mentor.total_observations, mentor.total_endorsements)

    total = (
        weights.skill * skill.score
        + weights.industry * industry
        + weights.availability * availability
        + weights.experience * experience
        + weights.rating * rating
    )

    score = MatchScore(
        total=min(_round(total), 100),
        skill_match=skill.score,
        industry_match=industry,
        availability_score=availability,
        experience_score=experience,
        rating_score=rating,
    )
    return MentorMatch(
        mentor=mentor,
        score=score,
        match_reasons=match_reasons(mentor, score, skill.matched_skills),
        compatibility_level=compatibility_level(score.total),
    )


def rank_pool(
    candidate: CandidateSkillProfile,
    mentors: list[MentorProfile],
    limit: Optional[int] = None,
    weights: Weights = DEFAULT_WEIGHTS,
) -> list[MentorMatch]:
    """Score every mentor with an open slot and sort best first.

    The sort is stable, so ties keep the order the pool was fetched in.
    """
    available = [m for m in mentors if m.has_open_slot]
    matches = [score_mentor(candidate, m, weights) for m in available]
    matches.sort(key=lambda match: match.score.total, reverse=True)
    if limit is None:
        return matches
    return matches[:max(limit, 0)]


# ── Main entry points ────────────────────────────────────────────────────

async def rank_mentors(
    store: ProfileStore,
    candidate_id: str,
    limit: Optional[int] = 10,
    weights: Weights = DEFAULT_WEIGHTS,
) -> tuple[Optional[CandidateSkillProfile], int, list[MentorMatch]]:
    """Return (candidate, open_mentors, ranked_matches).

    candidate is None when the store has no such candidate. Store errors
    propagate to the caller.
    """
    candidate, mentors = await asyncio.gather(
        store.get_candidate_skill_profile(candidate_id),
        store.list_accepting_mentors(),
    )
    if candidate is None:
        logger.debug("No candidate profile for %s", candidate_id)
        return None, 0, []

    # Stores that cannot compare columns may still return full mentors
    available = [m for m in mentors if m.has_open_slot]
    ranked = rank_pool(candidate, available, limit, weights)
    logger.debug(
        "Ranked %d of %d open mentors for candidate %s",
        len(ranked), len(available), candidate_id,
    )
    return candidate, len(available), ranked


async def find_mentor_matches(
    store: ProfileStore,
    candidate_id: str,
    limit: Optional[int] = 10,
    weights: Weights = DEFAULT_WEIGHTS,
) -> list[MentorMatch]:
    """Best mentors for a candidate; empty when the candidate is unknown."""
    _, _, matches = await rank_mentors(store, candidate_id, limit, weights)
    return matches


async def quick_recommendations(
    store: ProfileStore,
    candidate_skills: list[str],
    limit: int = 5,
) -> list[MentorProfile]:
    """Skill-only shortcut for candidates who have no stored profile yet."""
    mentors = await store.list_accepting_mentors(order_by_rating=True, limit=QUICK_POOL_SIZE)
    scored = [
        (mentor, match_skills(candidate_skills, mentor.specializations).score)
        for mentor in mentors
        if mentor.has_open_slot
    ]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return [mentor for mentor, _ in scored[:max(limit, 0)]]


async def check_compatibility(
    store: ProfileStore,
    candidate_id: str,
    mentor_id: str,
) -> Optional[MentorMatch]:
    """The full match of one mentor against a candidate, or None.

    None means the candidate is unknown or the mentor is not in the open pool.
    """
    matches = await find_mentor_matches(store, candidate_id, limit=None)
    return next((m for m in matches if m.mentor.profile_id == mentor_id), None)

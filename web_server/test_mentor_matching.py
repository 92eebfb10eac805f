import pytest

from models.matching import CompatibilityLevel, MatchScore
from models.profiles import CandidateSkillProfile
from services.mentor_matching import (
    Weights,
    compatibility_level,
    match_industry,
    match_reasons,
    match_skills,
    score_availability,
    score_experience,
    score_mentor,
    score_rating,
)


# ── Skill matcher ────────────────────────────────────────────────────────


def test_empty_candidate_skills_score_zero():
    result = match_skills([], ["react", "node.js"])
    assert result.score == 0
    assert result.matched_skills == []


def test_empty_specializations_score_zero():
    result = match_skills(["react"], [])
    assert result.score == 0
    assert result.matched_skills == []


def test_blank_skills_are_ignored():
    assert match_skills(["  ", ""], ["react"]).score == 0


def test_direct_match_is_bidirectional_containment():
    # "react" in "senior react developer" gives 30 direct points;
    # {programming, frontend} vs {frontend, backend} gives 20 category points
    result = match_skills(["javascript", "react"], ["Senior React Developer", "Node.js"])
    assert result.matched_skills == ["react"]
    assert result.score == 50


def test_skills_are_normalized_before_matching():
    result = match_skills(["  React "], ["react.js"])
    assert result.matched_skills == ["react"]
    assert result.score == 100


def test_category_only_overlap():
    # python and sql share no text with javascript but both are programming/data
    result = match_skills(["javascript"], ["Python", "SQL"])
    assert result.matched_skills == []
    assert result.score == 40


def test_skill_score_never_exceeds_100():
    result = match_skills(["react", "react", "css"], ["react", "css", "html"])
    assert 0 <= result.score <= 100


# ── Industry matcher ─────────────────────────────────────────────────────


def test_missing_candidate_industry_is_neutral():
    assert match_industry(None, "Finance") == 50
    assert match_industry("", "Finance") == 50
    assert match_industry("   ", "Finance") == 50


def test_same_industry_case_insensitive():
    assert match_industry("finance", "Finance") == 100
    assert match_industry("Tech", "Technology") == 100


def test_same_industry_group():
    assert match_industry("Investment Banking", "Finance") == 75


def test_unrelated_industries_get_floor():
    assert match_industry("Healthcare", "Software") == 25


# ── Availability ─────────────────────────────────────────────────────────


def test_availability_proportional_to_free_slots(mentor_factory):
    assert score_availability(mentor_factory(max_mentees=4, current_mentees=1)) == 75
    assert score_availability(mentor_factory(max_mentees=3, current_mentees=1)) == 67
    assert score_availability(mentor_factory(max_mentees=2, current_mentees=0)) == 100


def test_availability_zero_when_full_or_closed(mentor_factory):
    assert score_availability(mentor_factory(max_mentees=5, current_mentees=5)) == 0
    assert score_availability(mentor_factory(max_mentees=5, current_mentees=7)) == 0
    assert score_availability(mentor_factory(is_accepting=False, current_mentees=0)) == 0
    assert score_availability(mentor_factory(max_mentees=0, current_mentees=0)) == 0


# ── Experience ───────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "years, expected",
    [
        (10, 100), (5, 100), (15, 100),
        (3, 80), (4, 80),
        (16, 85), (25, 85),
        (26, 70), (30, 70),
        (1, 60), (2, 60),
        (0, 40), (-3, 40),
    ],
)
def test_experience_curve(years, expected):
    assert score_experience(years) == expected


# ── Reputation ───────────────────────────────────────────────────────────


def test_rating_base_without_history():
    assert score_rating(None, 0, 0) == 50


def test_rating_rounds_half_up():
    # 50 + 32 + 0.5
    assert score_rating(4.0, 3, 2) == 83


def test_rating_is_capped():
    assert score_rating(5.0, 100, 100) == 100
    assert score_rating(5.0, 0, 0) == 90


def test_rating_monotonic_in_average():
    scores = [score_rating(r / 10, 4, 1) for r in range(0, 51)]
    assert scores == sorted(scores)


# ── Level and reasons ────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "total, level",
    [
        (100, CompatibilityLevel.excellent), (80, CompatibilityLevel.excellent),
        (79, CompatibilityLevel.good), (60, CompatibilityLevel.good),
        (59, CompatibilityLevel.fair), (40, CompatibilityLevel.fair),
        (39, CompatibilityLevel.low), (0, CompatibilityLevel.low),
    ],
)
def test_compatibility_level_thresholds(total, level):
    assert compatibility_level(total) is level


def test_reasons_for_strong_mentor(mentor_factory):
    mentor = mentor_factory(industry="Software", years_experience=12, avg_rating=4.9, total_endorsements=7)
    score = MatchScore(
        total=90, skill_match=85, industry_match=100,
        availability_score=75, experience_score=100, rating_score=95,
    )
    reasons = match_reasons(mentor, score, ["react", "css", "html", "sass"])
    assert reasons == [
        "Strong skill alignment (react, css, html)",
        "Industry expertise in Software",
        "Highly available for new mentees",
        "12+ years of experience",
        "Highly rated (4.9 stars)",
        "7 successful endorsements",
    ]


def test_reasons_for_weak_mentor(mentor_factory):
    mentor = mentor_factory(avg_rating=4.4, total_endorsements=4)
    score = MatchScore(
        total=30, skill_match=39, industry_match=50,
        availability_score=69, experience_score=60, rating_score=85,
    )
    assert match_reasons(mentor, score, []) == []


def test_related_skill_reason(mentor_factory):
    score = MatchScore(
        total=50, skill_match=40, industry_match=25,
        availability_score=0, experience_score=40, rating_score=50,
    )
    assert match_reasons(mentor_factory(), score, []) == ["Related skill background"]


# ── Combined score ───────────────────────────────────────────────────────


def test_score_mentor_weighted_total(mentor_factory):
    candidate = CandidateSkillProfile(skills=["JavaScript", "React"], industry_hint="Software Engineering")
    mentor = mentor_factory(
        specializations=["Senior React Developer", "Node.js"],
        industry="Software",
        avg_rating=4.8,
        total_endorsements=6,
    )
    match = score_mentor(candidate, mentor)

    assert match.score.skill_match == 50
    assert match.score.industry_match == 100
    assert match.score.availability_score == 75
    assert match.score.experience_score == 100
    assert match.score.rating_score == 89
    # 17.5 + 20 + 11.25 + 15 + 13.35
    assert match.score.total == 77
    assert match.compatibility_level is CompatibilityLevel.good
    assert "Industry expertise in Software" in match.match_reasons


def test_custom_weights_are_normalized(mentor_factory):
    weights = Weights(skill=2, industry=0, availability=0, experience=0, rating=0).normalized()
    assert weights.skill == 1.0
    candidate = CandidateSkillProfile(skills=["react"])
    match = score_mentor(candidate, mentor_factory(specializations=["React"]), weights)
    assert match.score.total == match.score.skill_match


def test_all_zero_weights_rejected():
    with pytest.raises(ValueError):
        Weights(0, 0, 0, 0, 0).normalized()

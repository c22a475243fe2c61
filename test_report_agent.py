"""
Test Report Agent
"""

import pytest

from conftest import CURRENT_YEAR
from talentmatch.agents.report_agent import ReportAgent
from talentmatch.models.ai_analysis import (
    AIInsights,
    CulturalFitAssessment,
    ExperienceValidation,
    LearningAssessment,
    TransferabilityAnalysis,
)
from talentmatch.models.candidate import Candidate, Education, Experience
from talentmatch.models.job import Job
from talentmatch.models.match_result import ExperienceGap, MatchingScore, ScoreBreakdown


# ═══════════════════════════════════════════════════════════════════════════
# TEST DATA
# ═══════════════════════════════════════════════════════════════════════════

JOB = Job(id="job-1", title="Senior React Developer", company="TechCorp Inc.")

CANDIDATE = Candidate(
    id="cand-1",
    name="Sarah Johnson",
    skills=["react", "javascript"],
    experience=[Experience(id="e1", skill_id="react", duration_months=60, complexity_level=4)],
    education=[Education(degree="BSc", institution="Stanford", field="CS", graduation_year=2010)],
)


def make_score(overall=0.62, **breakdown) -> MatchingScore:
    return MatchingScore(
        overall_score=overall,
        skill_match_score=0.5,
        experience_score=0.5,
        transferable_skills_score=0.5,
        potential_score=0.5,
        breakdown=ScoreBreakdown(**breakdown),
    )


def make_gap(skill_id: str, gap: int) -> ExperienceGap:
    return ExperienceGap(
        skill_id=skill_id,
        required_duration_months=gap,
        candidate_duration_months=0,
        gap=gap,
        learnability=0.5,
    )


def live_insights(from_fallback: bool = False) -> AIInsights:
    return AIInsights(
        transferability=[TransferabilityAnalysis(
            source_skill="JavaScript",
            target_skill="TypeScript",
            transferability_score=0.9,
            learning_path=["Learn the type system"],
            estimated_months=2,
            from_fallback=from_fallback,
        )],
        learning_potential=[LearningAssessment(
            skill="AWS",
            learnability=0.7,
            time_to_proficiency_months=5,
            from_fallback=from_fallback,
        )],
        cultural_fit=CulturalFitAssessment(
            fit_score=0.8,
            recommendations=["Meet the platform team"],
            from_fallback=from_fallback,
        ),
        experience_validation=[ExperienceValidation(
            skill="React",
            is_valid=True,
            confidence=0.9,
            complexity_level=4,
            from_fallback=from_fallback,
        )],
    )


@pytest.fixture
def agent(resolver) -> ReportAgent:
    return ReportAgent(resolver=resolver, current_year=CURRENT_YEAR)


# ═══════════════════════════════════════════════════════════════════════════
# EXPLANATION
# ═══════════════════════════════════════════════════════════════════════════

def test_explanation_templates(agent):
    score = make_score(
        matched_skills=["react", "not-a-skill"],
        related_skills=["typescript"],
        experience_gaps=[make_gap("nodejs", 4), make_gap("aws", 10)],
        potential_indicators=["Diverse skill set"],
        risk_factors=["Limited work experience"],
    )

    text = agent.generate_explanation(CANDIDATE, JOB, score)

    assert text.startswith(
        "Based on our analysis, Sarah Johnson has a 62% match for the "
        "Senior React Developer position at TechCorp Inc."
    )
    assert "They have direct experience with React." in text
    assert "They also have related experience with TypeScript." in text
    assert "minor experience gaps" in text
    assert "significant experience gaps" in text
    assert "potential indicators including Diverse skill set." in text
    assert "Considerations include Limited work experience." in text
    assert "AI analysis" not in text


def test_explanation_without_gaps(agent):
    text = agent.generate_explanation(CANDIDATE, JOB, make_score(matched_skills=["react"]))
    assert "Their experience levels align well with the job requirements." in text


def test_explanation_includes_live_ai_sentences(agent):
    text = agent.generate_explanation(CANDIDATE, JOB, make_score(), live_insights())
    assert "JavaScript experience transfers to TypeScript" in text
    assert "80% cultural fit" in text
    assert "about 5 months" in text


def test_explanation_ignores_fallback_insights(agent):
    score = make_score(matched_skills=["react"])
    plain = agent.generate_explanation(CANDIDATE, JOB, score)
    assert agent.generate_explanation(CANDIDATE, JOB, score, live_insights(from_fallback=True)) == plain


# ═══════════════════════════════════════════════════════════════════════════
# RECOMMENDATIONS
# ═══════════════════════════════════════════════════════════════════════════

def test_recommendations(agent):
    score = make_score(missing_skills=["aws", "docker"], experience_gaps=[make_gap("aws", 12)])

    recommendations = agent.generate_recommendations(CANDIDATE, JOB, score)

    assert recommendations == [
        "Consider gaining experience with AWS, Docker",
        "Focus on building deeper experience with AWS",
        "Consider additional training or certification programs",
        "Seek opportunities to demonstrate leadership skills",
        "Consider pursuing additional education or certifications",
    ]


def test_ai_recommendations_come_first_and_list_is_capped(agent):
    score = make_score(missing_skills=["aws"], experience_gaps=[make_gap("aws", 12)])

    recommendations = agent.generate_recommendations(CANDIDATE, JOB, score, live_insights())

    assert len(recommendations) == 5
    assert recommendations[0].startswith("Leverage JavaScript experience to learn TypeScript")
    assert recommendations[1].startswith("Prioritize learning AWS")
    assert recommendations[2] == "Meet the platform team"


def test_recent_education_skips_education_tip(agent):
    candidate = CANDIDATE.model_copy(update={
        "education": [Education(degree="MSc", institution="ETH", field="CS", graduation_year=CURRENT_YEAR - 2)],
    })
    recommendations = agent.generate_recommendations(candidate, JOB, make_score(overall=0.9))
    assert "Consider pursuing additional education or certifications" not in recommendations


# ═══════════════════════════════════════════════════════════════════════════
# CONFIDENCE
# ═══════════════════════════════════════════════════════════════════════════

def test_confidence_is_clamped_low(agent):
    score = make_score(
        missing_skills=["aws", "docker", "kubernetes"],
        experience_gaps=[make_gap(f"skill-{i}", 24) for i in range(10)],
    )
    assert agent.calculate_confidence(score) == 0.3


def test_confidence_is_clamped_high(agent):
    score = make_score(matched_skills=["react"])
    assert agent.calculate_confidence(score) == 1.0
    assert agent.calculate_confidence(score, live_insights()) == 1.0


def test_confidence_adjustments(agent):
    score = make_score(matched_skills=["react"], missing_skills=["aws"], experience_gaps=[make_gap("aws", 18)])
    # 0.8 + 0.1 (matched) - 0.05 (gap > 12)
    assert agent.calculate_confidence(score) == pytest.approx(0.85)


def test_confidence_ai_nudges_only_from_live_analyses(agent):
    score = make_score(missing_skills=["aws"], experience_gaps=[make_gap("aws", 6)])
    base = agent.calculate_confidence(score)

    assert base == pytest.approx(0.7)
    assert agent.calculate_confidence(score, live_insights(from_fallback=True)) == base
    # + 0.9 * 0.1 + 0.8 * 0.05 + 0.9 * 0.05
    assert agent.calculate_confidence(score, live_insights()) == pytest.approx(0.875)

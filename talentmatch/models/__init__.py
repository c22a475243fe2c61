# models package
"""Data models for the skill-aware matching system."""

from talentmatch.models.skill import (
    Skill,
    SkillRelationship,
    SkillExtractionResult,
    SkillSearchResult,
    SkillAnalysis,
    SkillStatistics,
)
from talentmatch.models.candidate import Candidate, Experience, Education
from talentmatch.models.job import Job, JobRequirement
from talentmatch.models.ai_analysis import (
    TransferabilityAnalysis,
    LearningAssessment,
    CulturalFitAssessment,
    ExperienceValidation,
    SkillContext,
    GapAnalysis,
    AIInsights,
)
from talentmatch.models.match_result import (
    ExperienceGap,
    ScoreBreakdown,
    MatchingScore,
    MatchingResult,
    MatchingResponse,
)

__all__ = [
    "Skill",
    "SkillRelationship",
    "SkillExtractionResult",
    "SkillSearchResult",
    "SkillAnalysis",
    "SkillStatistics",
    "Candidate",
    "Experience",
    "Education",
    "Job",
    "JobRequirement",
    "TransferabilityAnalysis",
    "LearningAssessment",
    "CulturalFitAssessment",
    "ExperienceValidation",
    "SkillContext",
    "GapAnalysis",
    "AIInsights",
    "ExperienceGap",
    "ScoreBreakdown",
    "MatchingScore",
    "MatchingResult",
    "MatchingResponse",
]

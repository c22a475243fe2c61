"""Typed payloads returned by the AI augmentation service.

Every payload carries ``from_fallback``: True when the value was computed
locally because the LLM backend was unavailable or returned unusable output.
"""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class TransferabilityAnalysis(BaseModel):
    source_skill: str
    target_skill: str
    transferability_score: float = Field(ge=0.0, le=1.0)
    learning_path: List[str] = []
    estimated_months: int = Field(default=0, ge=0)
    reasoning: str = ""
    from_fallback: bool = False


class LearningAssessment(BaseModel):
    skill: str
    learnability: float = Field(ge=0.0, le=1.0)
    time_to_proficiency_months: int = Field(ge=0)
    recommendations: List[str] = []
    from_fallback: bool = False


class CulturalFitAssessment(BaseModel):
    fit_score: float = Field(ge=0.0, le=1.0)
    strengths: List[str] = []
    concerns: List[str] = []
    recommendations: List[str] = []
    from_fallback: bool = False


class ExperienceValidation(BaseModel):
    experience_id: Optional[str] = None
    skill: str
    is_valid: bool
    confidence: float = Field(ge=0.0, le=1.0)
    complexity_level: int = Field(ge=1, le=5)
    issues: List[str] = []
    from_fallback: bool = False


class SkillContext(BaseModel):
    skill: str
    context: str
    project_complexity: int = Field(ge=1, le=5)
    leadership_indicators: List[str] = []
    learning_potential: float = Field(ge=0.0, le=1.0)
    from_fallback: bool = False


class GapAnalysis(BaseModel):
    gaps: List[str] = []
    recommendations: List[str] = []
    priority: Literal["low", "medium", "high"] = "low"
    from_fallback: bool = False


class AIInsights(BaseModel):
    """Everything the orchestrator asked the AI service for one match."""
    transferability: List[TransferabilityAnalysis] = []
    learning_potential: List[LearningAssessment] = []
    cultural_fit: Optional[CulturalFitAssessment] = None
    experience_validation: List[ExperienceValidation] = []

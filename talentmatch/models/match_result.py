from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from talentmatch.models.candidate import Candidate
from talentmatch.models.job import Job
from talentmatch.models.ai_analysis import AIInsights


class ExperienceGap(BaseModel):
    skill_id: str
    required_duration_months: int
    candidate_duration_months: int
    gap: int = Field(ge=0)              # max(0, required - candidate)
    learnability: float = Field(ge=0.0, le=1.0)


class ScoreBreakdown(BaseModel):
    matched_skills: List[str] = []      # skill ids held directly
    missing_skills: List[str] = []
    related_skills: List[str] = []      # not held, but covered by related experience
    experience_gaps: List[ExperienceGap] = []
    potential_indicators: List[str] = []
    risk_factors: List[str] = []


class MatchingScore(BaseModel):
    # all values in [0, 1], rounded to 2 decimals
    overall_score: float
    skill_match_score: float
    experience_score: float
    transferable_skills_score: float
    potential_score: float
    breakdown: ScoreBreakdown


AugmentationStatus = Literal["disabled", "ai", "degraded"]


class MatchingResult(BaseModel):
    candidate: Candidate
    job: Job
    score: MatchingScore
    explanation: str
    recommendations: List[str] = []
    confidence: float = Field(default=0.8, ge=0.3, le=1.0)
    # "disabled": AI not requested, "ai": at least one live analysis,
    # "degraded": AI requested but every analysis fell back
    augmentation_status: AugmentationStatus = "disabled"
    ai_insights: Optional[AIInsights] = None


class MatchingResponse(BaseModel):
    """Envelope returned by MatchingOrchestrator.match_request."""
    result: MatchingResult
    processing_time_ms: float
    confidence: float

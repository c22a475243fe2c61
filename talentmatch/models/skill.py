from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional


RelationshipType = Literal["prerequisite", "related", "alternative"]


class Skill(BaseModel):
    """Canonical entry of the skill knowledge graph."""
    model_config = ConfigDict(frozen=True)

    id: str                                         # canonical id (e.g. "react")
    canonical_name: str                             # display name (e.g. "React")
    aliases: List[str] = []
    category: str
    related_skills: List[str] = []                  # may contain ids not in the registry
    difficulty_level: int = Field(default=1, ge=1, le=5)
    time_to_proficiency_months: int = Field(default=3, ge=0)


class SkillRelationship(BaseModel):
    """Directed, typed edge between two skill ids."""
    model_config = ConfigDict(frozen=True)

    source_skill: str
    target_skill: str
    relationship_type: RelationshipType
    strength: float = Field(ge=0.0, le=1.0)


class SkillExtractionResult(BaseModel):
    skills: List[str] = []              # canonical names
    confidence: float = 0.0
    matched_terms: List[str] = []
    unmatched_terms: List[str] = []


class SkillSearchResult(BaseModel):
    skill: Skill
    match_type: Literal["exact", "alias", "fuzzy", "partial"]
    confidence: float


class SkillAnalysis(BaseModel):
    skill: Skill
    related_skills: List[Skill] = []
    difficulty_level: int
    time_to_proficiency_months: int
    category_skills: List[Skill] = []   # other skills of the same category


class SkillStatistics(BaseModel):
    total_skills: int
    total_categories: int
    total_relationships: int
    average_difficulty: float
    average_time_to_proficiency: float
    difficulty_distribution: Dict[int, int] = {}
    most_connected_skill: Optional[str] = None

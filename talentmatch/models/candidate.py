from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class Experience(BaseModel):
    """Time spent working with a single skill."""
    id: str
    skill_id: str
    duration_months: int = Field(ge=0)
    complexity_level: int = Field(ge=1, le=5)
    has_leadership_role: bool = False
    project_description: Optional[str] = None
    technologies: List[str] = []


class Education(BaseModel):
    degree: str                         # e.g. "Master of Science"
    institution: str
    field: str                          # e.g. "Computer Science"
    graduation_year: int


class Candidate(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    skills: List[str] = []              # skill ids, no duplicates
    experience: List[Experience] = []
    education: List[Education] = []
    summary: str = ""

    @field_validator("skills")
    @classmethod
    def _dedupe_skills(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

from pydantic import BaseModel, Field
from typing import List, Optional


class JobRequirement(BaseModel):
    """What a job asks for a single skill."""
    skill_id: str
    min_duration_months: int = Field(default=0, ge=0)
    required_level: int = Field(default=3, ge=1, le=5)
    is_required: bool = True            # False = preferred, weighs half
    description: Optional[str] = None


class Job(BaseModel):
    id: str
    title: str
    company: str
    requirements: List[JobRequirement] = []
    responsibilities: List[str] = []
    location: Optional[str] = None
    salary: Optional[str] = None
    description: str = ""
    team_size: Optional[int] = None     # only read by the cultural-fit analysis

"""
Skill Registry
Static skill catalog loaded from CSV:
- skills.csv              -> one row per canonical skill (aliases and related ids comma-separated)
- skill_relationships.csv -> directed, typed edges between skill ids

The registry is read-only after loading; file order is kept and is the
tie-break order used by fuzzy matching.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from talentmatch.models.skill import Skill, SkillRelationship
from talentmatch.services.logging_utils import print_with_prefix


DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_SKILLS_CSV = DATA_DIR / "skills.csv"
DEFAULT_RELATIONSHIPS_CSV = DATA_DIR / "skill_relationships.csv"

PathLike = Union[str, Path]


def _split_cell(value) -> List[str]:
    """Split a comma-separated CSV cell, tolerating empty/NaN cells."""
    if not pd.notna(value) or not str(value).strip():
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


class SkillRegistry:
    """
    Catalog of canonical skills and their relationships.

    Used by SkillResolver (lookups) and ScoringAgent (difficulty, relatedness).
    """

    def __init__(
        self,
        skills: List[Skill],
        relationships: Optional[List[SkillRelationship]] = None,
        verbose: bool = False,
    ):
        self.verbose = verbose
        self._skills: Tuple[Skill, ...] = tuple(skills)
        self._relationships: Tuple[SkillRelationship, ...] = tuple(relationships or [])

        self._by_id: Dict[str, Skill] = {}
        for skill in self._skills:
            if skill.id in self._by_id:
                raise ValueError(f"Duplicate skill id in registry: {skill.id}")
            self._by_id[skill.id] = skill

        self._log(f"{len(self._skills)} skills, {len(self._relationships)} relationships")

    @classmethod
    def from_csv(
        cls,
        skills_path: PathLike = DEFAULT_SKILLS_CSV,
        relationships_path: Optional[PathLike] = DEFAULT_RELATIONSHIPS_CSV,
        verbose: bool = False,
    ) -> "SkillRegistry":
        """
        Load the registry from CSV files.

        Args:
            skills_path: CSV with columns skill_id, name, aliases, category,
                related_skills, difficulty_level, time_to_proficiency
            relationships_path: CSV with columns source_skill, target_skill,
                relationship_type, strength (None = no relationships)
            verbose: Log loading summary

        Returns:
            A populated SkillRegistry
        """
        skills_df = pd.read_csv(skills_path)

        skills: List[Skill] = []
        for _, row in skills_df.iterrows():
            difficulty = row.get("difficulty_level")
            months = row.get("time_to_proficiency")
            skills.append(Skill(
                id=str(row["skill_id"]).strip(),
                canonical_name=str(row["name"]).strip(),
                aliases=_split_cell(row.get("aliases")),
                category=str(row["category"]).strip(),
                related_skills=_split_cell(row.get("related_skills")),
                difficulty_level=int(difficulty) if pd.notna(difficulty) else 1,
                time_to_proficiency_months=int(months) if pd.notna(months) else 3,
            ))

        relationships: List[SkillRelationship] = []
        if relationships_path is not None and Path(relationships_path).exists():
            rel_df = pd.read_csv(relationships_path)
            for _, row in rel_df.iterrows():
                relationships.append(SkillRelationship(
                    source_skill=str(row["source_skill"]).strip(),
                    target_skill=str(row["target_skill"]).strip(),
                    relationship_type=str(row["relationship_type"]).strip(),
                    strength=float(row["strength"]),
                ))

        return cls(skills, relationships, verbose=verbose)

    @classmethod
    def default(cls, verbose: bool = False) -> "SkillRegistry":
        """Registry built from the CSV files shipped with the package."""
        return cls.from_csv(DEFAULT_SKILLS_CSV, DEFAULT_RELATIONSHIPS_CSV, verbose=verbose)

    @property
    def skills(self) -> Tuple[Skill, ...]:
        return self._skills

    @property
    def relationships(self) -> Tuple[SkillRelationship, ...]:
        return self._relationships

    def get(self, skill_id: str) -> Optional[Skill]:
        return self._by_id.get(skill_id)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._by_id

    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self):
        return iter(self._skills)

    def relationships_for(self, skill_id: str) -> List[SkillRelationship]:
        """Edges where the skill is either source or target."""
        return [
            rel for rel in self._relationships
            if rel.source_skill == skill_id or rel.target_skill == skill_id
        ]

    def relationships_by_type(self, relationship_type: str) -> List[SkillRelationship]:
        return [rel for rel in self._relationships if rel.relationship_type == relationship_type]

    def relationship_between(self, skill_a: str, skill_b: str) -> Optional[SkillRelationship]:
        """First edge linking the two skills, in either direction."""
        for rel in self._relationships:
            if (rel.source_skill, rel.target_skill) in ((skill_a, skill_b), (skill_b, skill_a)):
                return rel
        return None

    def _log(self, message: str) -> None:
        print_with_prefix("[SkillRegistry]", message, enabled=self.verbose)

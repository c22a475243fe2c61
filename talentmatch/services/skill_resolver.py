"""
Skill Resolver
Normalizes free-text skill names to the canonical ids of the registry.

Strategy (in order):
1. Exact match on id / canonical name (case-insensitive)
2. Exact match on an alias
3. Fuzzy: variant/abbreviation table, then substring containment
4. No match -> the input is returned unchanged

The resolver never raises: every query returns a value, None or [].
"""

from typing import Dict, List, Optional

import numpy as np

from talentmatch.models.skill import (
    Skill,
    SkillAnalysis,
    SkillExtractionResult,
    SkillSearchResult,
    SkillStatistics,
)
from talentmatch.services.logging_utils import print_with_prefix
from talentmatch.services.skill_registry import SkillRegistry


# Common abbreviations and variants -> skill id.
# Some targets are not in the registry; a hit on those yields no fuzzy match.
FUZZY_VARIATIONS: Dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "reactjs": "react",
    "react.js": "react",
    "node": "nodejs",
    "node.js": "nodejs",
    "postgres": "postgresql",
    "mysql": "mysql",
    "tf": "tensorflow",
    "torch": "pytorch",
    "k8s": "kubernetes",
    "aws cloud": "aws",
    "amazon web services": "aws",
    "machine learning": "ml",
    "artificial intelligence": "ai",
    "data science": "datascience",
    "web development": "webdev",
    "mobile development": "mobiledev",
    "devops": "devops",
    "cloud computing": "cloud",
}

MIN_WORD_LENGTH = 3
DEFAULT_DIFFICULTY_LEVEL = 1
DEFAULT_TIME_TO_PROFICIENCY = 3

_MATCH_TYPE_ORDER = {"exact": 0, "alias": 1, "fuzzy": 2, "partial": 3}


class SkillResolver:
    """
    Resolver of free-text skill names against a SkillRegistry.

    Lookup tables are built once in the constructor and never mutated, so a
    single instance can be shared between threads.
    """

    def __init__(self, registry: Optional[SkillRegistry] = None, verbose: bool = False):
        self.registry = registry or SkillRegistry.default()
        self.verbose = verbose

        # id / lowercase canonical name -> Skill
        self._skill_lookup: Dict[str, Skill] = {}
        # lowercase alias -> canonical name
        self._alias_lookup: Dict[str, str] = {}

        for skill in self.registry.skills:
            self._skill_lookup[skill.id] = skill
            self._skill_lookup[skill.canonical_name.lower()] = skill
            for alias in skill.aliases:
                self._alias_lookup[alias.lower()] = skill.canonical_name

        self._log(f"{len(self._skill_lookup)} skill keys, {len(self._alias_lookup)} aliases")

    # ═════════════════════════════════════════════════════════════
    # Normalization
    # ═════════════════════════════════════════════════════════════

    def normalize(self, name: str) -> str:
        """
        Map a free-text skill name to its canonical name.

        Args:
            name: Skill as written by a user (e.g. "ReactJS", "k8s")

        Returns:
            Canonical name if resolved, otherwise the input unchanged
        """
        if not name or not name.strip():
            return name

        key = name.strip().lower()

        skill = self._skill_lookup.get(key)
        if skill is not None:
            return skill.canonical_name

        if key in self._alias_lookup:
            return self._alias_lookup[key]

        fuzzy = self.find_fuzzy_match(key)
        if fuzzy is not None:
            return fuzzy.canonical_name

        return name

    def find_fuzzy_match(self, name: str) -> Optional[Skill]:
        """Variant table first, then substring containment in registry order."""
        if not name or not name.strip():
            return None

        key = name.strip().lower()

        if key in FUZZY_VARIATIONS:
            return self._skill_lookup.get(FUZZY_VARIATIONS[key])

        for skill in self.registry.skills:
            canonical = skill.canonical_name.lower()
            if key in canonical or canonical in key:
                return skill
            for alias in skill.aliases:
                alias_lower = alias.lower()
                if key in alias_lower or alias_lower in key:
                    return skill

        return None

    def extract_skills_from_text(self, text: str) -> SkillExtractionResult:
        """
        Two-pass extraction of canonical skills from free text.

        Pass 1 looks for canonical names and aliases as substrings of the
        whole text; pass 2 fuzzy-matches every whitespace-separated token.
        """
        normalized_text = (text or "").lower()
        skills: List[str] = []
        found_ids = set()
        matched_terms: List[str] = []
        unmatched_terms: List[str] = []

        # Pass 1: exact substrings
        for skill in self.registry.skills:
            if skill.id in found_ids:
                continue

            canonical = skill.canonical_name.lower()
            if canonical in normalized_text:
                skills.append(skill.canonical_name)
                found_ids.add(skill.id)
                matched_terms.append(canonical)
                continue

            for alias in skill.aliases:
                alias_lower = alias.lower()
                if alias_lower in normalized_text:
                    skills.append(skill.canonical_name)
                    found_ids.add(skill.id)
                    matched_terms.append(alias_lower)
                    break

        # Pass 2: fuzzy on single tokens
        for word in normalized_text.split():
            if len(word) < MIN_WORD_LENGTH:
                unmatched_terms.append(word)
                continue

            fuzzy = self.find_fuzzy_match(word)
            if fuzzy is not None and fuzzy.id not in found_ids:
                skills.append(fuzzy.canonical_name)
                found_ids.add(fuzzy.id)
                matched_terms.append(word)
            else:
                unmatched_terms.append(word)

        total = len(matched_terms) + len(unmatched_terms)
        confidence = min(1.0, len(matched_terms) / total) if matched_terms else 0.0

        return SkillExtractionResult(
            skills=skills,
            confidence=confidence,
            matched_terms=matched_terms,
            unmatched_terms=unmatched_terms,
        )

    # ═════════════════════════════════════════════════════════════
    # Graph queries
    # ═════════════════════════════════════════════════════════════

    def get_skill_by_id(self, skill_id: str) -> Optional[Skill]:
        return self._skill_lookup.get(skill_id)

    def get_all_skills(self) -> List[Skill]:
        return list(self.registry.skills)

    def get_skills_by_category(self, category: str) -> List[Skill]:
        category = category.lower()
        return [s for s in self.registry.skills if s.category.lower() == category]

    def get_related_skills(self, skill_id: str) -> List[Skill]:
        """Related skills that exist in the registry (dangling ids are dropped)."""
        skill = self.get_skill_by_id(skill_id)
        if skill is None:
            return []
        related = (self.get_skill_by_id(rid) for rid in skill.related_skills)
        return [s for s in related if s is not None]

    def are_related(self, skill_a: str, skill_b: str) -> bool:
        """One-hop relatedness, checked in both directions (not transitive)."""
        a = self.get_skill_by_id(skill_a)
        b = self.get_skill_by_id(skill_b)
        if a is None or b is None:
            return False
        return b.id in a.related_skills or a.id in b.related_skills

    def search_skills(self, query: str) -> List[SkillSearchResult]:
        """Rank every skill matching the query: exact > alias > variant table > partial."""
        key = (query or "").strip().lower()
        if not key:
            return []

        results: List[SkillSearchResult] = []
        for skill in self.registry.skills:
            canonical = skill.canonical_name.lower()
            aliases = [a.lower() for a in skill.aliases]

            if canonical == key:
                match_type, confidence = "exact", 1.0
            elif key in aliases:
                match_type, confidence = "alias", 0.9
            elif FUZZY_VARIATIONS.get(key) == skill.id:
                match_type, confidence = "fuzzy", 0.8
            elif (
                key in canonical or canonical in key
                or any(key in a or a in key for a in aliases)
            ):
                match_type, confidence = "partial", 0.6
            else:
                continue

            results.append(SkillSearchResult(skill=skill, match_type=match_type, confidence=confidence))

        return sorted(results, key=lambda r: (-r.confidence, _MATCH_TYPE_ORDER[r.match_type]))

    def analyze_skill(self, skill_id: str) -> Optional[SkillAnalysis]:
        skill = self.get_skill_by_id(skill_id)
        if skill is None:
            return None
        return SkillAnalysis(
            skill=skill,
            related_skills=self.get_related_skills(skill_id),
            difficulty_level=skill.difficulty_level,
            time_to_proficiency_months=skill.time_to_proficiency_months,
            category_skills=self.get_skills_by_category(skill.category),
        )

    def get_skill_difficulty(self, skill_id: str) -> int:
        skill = self.get_skill_by_id(skill_id)
        return skill.difficulty_level if skill else DEFAULT_DIFFICULTY_LEVEL

    def get_time_to_proficiency(self, skill_id: str) -> int:
        skill = self.get_skill_by_id(skill_id)
        return skill.time_to_proficiency_months if skill else DEFAULT_TIME_TO_PROFICIENCY

    def get_skills_by_difficulty(self, difficulty_level: int) -> List[Skill]:
        return [s for s in self.registry.skills if s.difficulty_level == difficulty_level]

    def get_skills_by_time_to_proficiency(self, max_months: int) -> List[Skill]:
        return [s for s in self.registry.skills if s.time_to_proficiency_months <= max_months]

    def get_skill_categories(self) -> List[str]:
        return sorted({s.category for s in self.registry.skills})

    def get_skill_statistics(self) -> SkillStatistics:
        skills = self.registry.skills
        if not skills:
            return SkillStatistics(
                total_skills=0,
                total_categories=0,
                total_relationships=len(self.registry.relationships),
                average_difficulty=0.0,
                average_time_to_proficiency=0.0,
            )

        difficulties = np.array([s.difficulty_level for s in skills])
        months = np.array([s.time_to_proficiency_months for s in skills])
        levels, counts = np.unique(difficulties, return_counts=True)

        connections = {s.id: len(self.registry.relationships_for(s.id)) for s in skills}
        most_connected = max(connections, key=connections.get)

        return SkillStatistics(
            total_skills=len(skills),
            total_categories=len(self.get_skill_categories()),
            total_relationships=len(self.registry.relationships),
            average_difficulty=float(difficulties.mean()),
            average_time_to_proficiency=float(months.mean()),
            difficulty_distribution={int(level): int(count) for level, count in zip(levels, counts)},
            most_connected_skill=most_connected if connections[most_connected] > 0 else None,
        )

    def _log(self, message: str) -> None:
        print_with_prefix("[SkillResolver]", message, enabled=self.verbose)

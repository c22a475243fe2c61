"""
Scoring Agent
Deterministic multi-factor scoring of a candidate against a job.

Factors (weights sum to 1.0):
- Skill match (0.40): direct holds, plus partial credit from related experience
- Experience (0.30): duration, complexity, leadership and level alignment
- Transferable skills (0.20): related experience covering skills not held
- Potential (0.10): education, learning indicators, growth trajectory

Every requirement weighs 2 if required, 1 if preferred, in all four factors.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import numpy as np

from talentmatch.models.candidate import Candidate, Education, Experience
from talentmatch.models.job import Job, JobRequirement
from talentmatch.models.match_result import ExperienceGap, MatchingScore, ScoreBreakdown
from talentmatch.services.logging_utils import format_skill_list, log_section, print_with_prefix
from talentmatch.services.skill_resolver import SkillResolver


# Checked in this order: the first key contained in the degree wins
DEGREE_LEVELS = {
    "phd": 3.0,
    "doctorate": 3.0,
    "master": 2.0,
    "bachelor": 1.0,
    "associate": 0.5,
    "diploma": 0.5,
    "certificate": 0.25,
}

MAX_RELATED_SKILLS_BONUS = 0.3
MISSING_SKILL_RELATED_CREDIT = 0.5
EXPERIENCE_NORMALIZATION_MONTHS = 24
NO_EXPERIENCE_CREDIT = 0.1
RECENT_EDUCATION_YEARS = 5
DIVERSE_SKILLS_THRESHOLD = 5
LARGE_GAP_MONTHS = 12


@dataclass
class ScoringWeights:
    skill_match: float = 0.4
    experience: float = 0.3
    transferable_skills: float = 0.2
    potential: float = 0.1

    def total(self) -> float:
        return self.skill_match + self.experience + self.transferable_skills + self.potential


@dataclass
class SkillMatchResult:
    score: float
    direct_matches: List[str] = field(default_factory=list)
    related_matches: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)


@dataclass
class ExperienceResult:
    score: float
    relevant_experience: List[Experience] = field(default_factory=list)
    gaps: List[ExperienceGap] = field(default_factory=list)


@dataclass
class TransferableSkillsResult:
    score: float
    transferable_skills: List[Experience] = field(default_factory=list)
    transferability_scores: List[float] = field(default_factory=list)


@dataclass
class PotentialResult:
    score: float
    education_score: float
    learning_score: float
    growth_score: float
    indicators: List[str] = field(default_factory=list)


def requirement_weight(requirement: JobRequirement) -> int:
    return 2 if requirement.is_required else 1


class ScoringAgent:
    """
    Agent that turns (candidate, job) into a MatchingScore with breakdown.

    Pure computation: no I/O, no shared mutable state. The only external
    input is the current year, injectable for reproducible runs.
    """

    def __init__(
        self,
        resolver: Optional[SkillResolver] = None,
        weights: Optional[ScoringWeights] = None,
        current_year: Optional[int] = None,
        verbose: bool = False
    ):
        self.weights = weights or ScoringWeights()
        if not math.isclose(self.weights.total(), 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0 (got {self.weights.total():.4f})")

        self.current_year = current_year
        self.verbose = verbose
        self._resolver = resolver

    @property
    def resolver(self) -> SkillResolver:
        if self._resolver is None:
            self._resolver = SkillResolver()
        return self._resolver

    @property
    def year(self) -> int:
        return self.current_year or date.today().year

    def score(self, candidate: Candidate, job: Job) -> MatchingScore:
        """Overall score plus explainability breakdown."""
        self._log(f"Scoring: {candidate.name} vs {job.title} ({len(job.requirements)} requirements)")
        requirements = job.requirements

        # ═══════════════════════════════════════════════════════════════
        # STEP 1-4: Sub-scores
        # ═══════════════════════════════════════════════════════════════
        log_section(self._log, "Step 1: Skill match", width=60, char="-")
        skill_result = self.calculate_skill_match_score(requirements, candidate)
        self._log(f"   -> direct: {format_skill_list(skill_result.direct_matches)}")
        self._log(f"   -> related: {format_skill_list(skill_result.related_matches)}")
        self._log(f"   -> missing: {format_skill_list(skill_result.missing_skills)}")

        log_section(self._log, "Step 2: Experience", width=60, char="-")
        experience_result = self.calculate_experience_score(requirements, candidate)
        self._log(f"   -> {len(experience_result.relevant_experience)} relevant, {len(experience_result.gaps)} gaps")

        log_section(self._log, "Step 3: Transferable skills", width=60, char="-")
        transferable_result = self.calculate_transferable_skills_score(requirements, candidate)
        self._log(f"   -> {len(transferable_result.transferable_skills)} transferable experiences")

        log_section(self._log, "Step 4: Potential", width=60, char="-")
        potential_result = self.calculate_potential_score(candidate)
        self._log(
            f"   -> education={potential_result.education_score:.2f} "
            f"learning={potential_result.learning_score:.2f} growth={potential_result.growth_score:.2f}"
        )

        # ═══════════════════════════════════════════════════════════════
        # STEP 5: Weighted combination (full precision, rounded at the end)
        # ═══════════════════════════════════════════════════════════════
        sub_scores = np.array([
            skill_result.score,
            experience_result.score,
            transferable_result.score,
            potential_result.score,
        ])
        weights = np.array([
            self.weights.skill_match,
            self.weights.experience,
            self.weights.transferable_skills,
            self.weights.potential,
        ])
        overall = float(np.dot(sub_scores, weights))
        self._log(f"OVERALL: {overall:.3f}")

        breakdown = self.generate_score_breakdown(
            requirements,
            candidate,
            skill_result=skill_result,
            experience_result=experience_result,
            potential_result=potential_result,
        )

        return MatchingScore(
            overall_score=round(overall, 2),
            skill_match_score=round(skill_result.score, 2),
            experience_score=round(experience_result.score, 2),
            transferable_skills_score=round(transferable_result.score, 2),
            potential_score=round(potential_result.score, 2),
            breakdown=breakdown,
        )

    # ═══════════════════════════════════════════════════════════════
    # Sub-scores
    # ═══════════════════════════════════════════════════════════════

    def calculate_skill_match_score(
        self,
        requirements: List[JobRequirement],
        candidate: Candidate
    ) -> SkillMatchResult:
        total_score = 0.0
        total_weight = 0
        result = SkillMatchResult(score=0.0)
        held = set(candidate.skills)

        for requirement in requirements:
            weight = requirement_weight(requirement)
            total_weight += weight
            related_bonus = self._related_skills_bonus(requirement.skill_id, candidate)

            if requirement.skill_id in held:
                total_score += weight * 1.0
                total_score += weight * related_bonus * MAX_RELATED_SKILLS_BONUS
                result.direct_matches.append(requirement.skill_id)
            else:
                total_score += weight * related_bonus * MISSING_SKILL_RELATED_CREDIT
                if related_bonus > 0:
                    result.related_matches.append(requirement.skill_id)
                else:
                    result.missing_skills.append(requirement.skill_id)

        # The related bonus on direct holds can push the ratio past 1
        result.score = min(1.0, total_score / total_weight) if total_weight > 0 else 0.0
        return result

    def calculate_experience_score(
        self,
        requirements: List[JobRequirement],
        candidate: Candidate
    ) -> ExperienceResult:
        total_score = 0.0
        total_weight = 0
        result = ExperienceResult(score=0.0)

        for requirement in requirements:
            weight = requirement_weight(requirement)
            total_weight += weight
            experience = self._find_relevant_experience(requirement.skill_id, candidate)

            if experience is None:
                total_score += weight * NO_EXPERIENCE_CREDIT
                if requirement.min_duration_months <= 0:
                    continue
                result.gaps.append(ExperienceGap(
                    skill_id=requirement.skill_id,
                    required_duration_months=requirement.min_duration_months,
                    candidate_duration_months=0,
                    gap=requirement.min_duration_months,
                    learnability=self._learnability(requirement.skill_id, candidate),
                ))
                continue

            result.relevant_experience.append(experience)

            if requirement.min_duration_months > 0:
                duration_score = min(experience.duration_months / requirement.min_duration_months, 1.0)
            else:
                duration_score = 1.0
            complexity_score = experience.complexity_level / 5.0
            leadership_score = 1.0 if experience.has_leadership_role else 0.5
            level_score = self._level_alignment(experience.complexity_level, requirement.required_level)

            total_score += weight * (duration_score + complexity_score + leadership_score + level_score) / 4

            gap = max(0, requirement.min_duration_months - experience.duration_months)
            if gap > 0:
                result.gaps.append(ExperienceGap(
                    skill_id=requirement.skill_id,
                    required_duration_months=requirement.min_duration_months,
                    candidate_duration_months=experience.duration_months,
                    gap=gap,
                    learnability=self._learnability(requirement.skill_id, candidate),
                ))

        result.score = total_score / total_weight if total_weight > 0 else 0.0
        return result

    def calculate_transferable_skills_score(
        self,
        requirements: List[JobRequirement],
        candidate: Candidate
    ) -> TransferableSkillsResult:
        total_score = 0.0
        total_weight = 0
        result = TransferableSkillsResult(score=0.0)
        held = set(candidate.skills)

        for requirement in requirements:
            weight = requirement_weight(requirement)
            total_weight += weight

            # Direct holds count in the denominator only
            if requirement.skill_id in held:
                continue

            related = self._find_transferable_experience(requirement.skill_id, candidate)
            if not related:
                continue

            scores = [self._transferability(exp, requirement.skill_id) for exp in related]
            result.transferable_skills.extend(related)
            result.transferability_scores.extend(scores)
            total_score += weight * float(np.mean(scores))

        result.score = total_score / total_weight if total_weight > 0 else 0.0
        return result

    def calculate_potential_score(self, candidate: Candidate) -> PotentialResult:
        education_score = self._education_score(candidate.education)
        learning_score = self._learning_indicators(candidate)
        growth_score = self._growth_trajectory(candidate)

        indicators = []
        if any("computer" in edu.field.lower() for edu in candidate.education):
            indicators.append("Strong educational background in computer science")
        if any(exp.has_leadership_role for exp in candidate.experience):
            indicators.append("Demonstrated leadership experience")
        if len(candidate.skills) > DIVERSE_SKILLS_THRESHOLD:
            indicators.append("Diverse skill set")
        if self._has_recent_education(candidate):
            indicators.append("Recent education")

        return PotentialResult(
            score=education_score * 0.3 + learning_score * 0.4 + growth_score * 0.3,
            education_score=education_score,
            learning_score=learning_score,
            growth_score=growth_score,
            indicators=indicators,
        )

    def generate_score_breakdown(
        self,
        requirements: List[JobRequirement],
        candidate: Candidate,
        skill_result: Optional[SkillMatchResult] = None,
        experience_result: Optional[ExperienceResult] = None,
        potential_result: Optional[PotentialResult] = None
    ) -> ScoreBreakdown:
        skill_result = skill_result or self.calculate_skill_match_score(requirements, candidate)
        experience_result = experience_result or self.calculate_experience_score(requirements, candidate)
        potential_result = potential_result or self.calculate_potential_score(candidate)

        risk_factors = []
        if len(skill_result.missing_skills) > len(requirements) * 0.5:
            risk_factors.append("Significant skill gaps")
        if any(gap.gap > LARGE_GAP_MONTHS for gap in experience_result.gaps):
            risk_factors.append("Large experience gaps in key areas")
        if len(candidate.experience) < 2:
            risk_factors.append("Limited work experience")

        return ScoreBreakdown(
            matched_skills=list(skill_result.direct_matches),
            missing_skills=list(skill_result.missing_skills),
            related_skills=list(skill_result.related_matches),
            experience_gaps=list(experience_result.gaps),
            potential_indicators=list(potential_result.indicators),
            risk_factors=risk_factors,
        )

    # ═══════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════

    def _find_relevant_experience(self, skill_id: str, candidate: Candidate) -> Optional[Experience]:
        return next((exp for exp in candidate.experience if exp.skill_id == skill_id), None)

    def _find_transferable_experience(self, skill_id: str, candidate: Candidate) -> List[Experience]:
        """Candidate experiences on skills related to skill_id (both known to the registry)."""
        if self.resolver.get_skill_by_id(skill_id) is None:
            return []
        return [
            exp for exp in candidate.experience
            if self.resolver.get_skill_by_id(exp.skill_id) is not None
            and self.resolver.are_related(skill_id, exp.skill_id)
        ]

    def _related_skills_bonus(self, skill_id: str, candidate: Candidate) -> float:
        related = self._find_transferable_experience(skill_id, candidate)
        if not related:
            return 0.0
        avg_duration = float(np.mean([exp.duration_months for exp in related]))
        return min(avg_duration / EXPERIENCE_NORMALIZATION_MONTHS, 1.0)

    def _transferability(self, experience: Experience, required_skill_id: str) -> float:
        source = self.resolver.get_skill_by_id(experience.skill_id)
        target = self.resolver.get_skill_by_id(required_skill_id)
        if source is None or target is None:
            return 0.0
        base = 1 - abs(source.difficulty_level - target.difficulty_level) / 5
        experience_factor = min(experience.duration_months / EXPERIENCE_NORMALIZATION_MONTHS, 1.0)
        return base * experience_factor

    @staticmethod
    def _level_alignment(candidate_level: int, required_level: int) -> float:
        return max(0.0, 1 - abs(candidate_level - required_level) / 5)

    @staticmethod
    def _degree_level(degree: str) -> float:
        degree_lower = degree.lower()
        for key, level in DEGREE_LEVELS.items():
            if key in degree_lower:
                return level
        return 0.0

    def _education_score(self, education: List[Education]) -> float:
        if not education:
            return 0.3
        highest = max(self._degree_level(edu.degree) for edu in education)
        return min(highest / 3, 1.0)

    def _has_recent_education(self, candidate: Candidate) -> bool:
        return any(self.year - edu.graduation_year <= RECENT_EDUCATION_YEARS for edu in candidate.education)

    def _learning_indicators(self, candidate: Candidate) -> float:
        checks = [
            len(candidate.skills) > DIVERSE_SKILLS_THRESHOLD,
            self._has_recent_education(candidate),
            any(exp.has_leadership_role for exp in candidate.experience),
        ]
        return sum(checks) / len(checks)

    def _growth_trajectory(self, candidate: Candidate) -> float:
        if len(candidate.experience) < 2:
            return 0.5
        ordered = sorted(candidate.experience, key=lambda exp: exp.duration_months)
        complexity = np.array([exp.complexity_level for exp in ordered])
        return float(np.mean(np.diff(complexity) > 0))

    def _learnability(self, skill_id: str, candidate: Candidate) -> float:
        skill = self.resolver.get_skill_by_id(skill_id)
        if skill is None:
            return 0.5
        base = 1 - skill.difficulty_level / 5
        return min(1.0, max(0.0, base + self._learning_indicators(candidate) * 0.3))

    def _log(self, message: str) -> None:
        print_with_prefix("[ScoringAgent]", message, enabled=self.verbose)

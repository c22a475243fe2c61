"""
Matching Orchestrator
Runs the matching pipeline for (job, candidate) pairs and the ranking
operations built on top of it.

Responsibilities:
- Validates ids and resolves job/candidate through the data provider
- Scores with ScoringAgent, optionally augments with AIAugmentationService
- Builds explanation, recommendations and confidence with ReportAgent
- Wraps unexpected failures into InternalMatchError
"""

import time
from typing import Any, Dict, List, Optional, Tuple

from talentmatch.agents.report_agent import ReportAgent
from talentmatch.agents.scoring_agent import ScoringAgent
from talentmatch.config import load_settings
from talentmatch.exceptions import InternalMatchError, InvalidInputError, MatchError, NotFoundError
from talentmatch.models.ai_analysis import AIInsights
from talentmatch.models.candidate import Candidate, Experience
from talentmatch.models.job import Job
from talentmatch.models.match_result import (
    AugmentationStatus,
    MatchingResponse,
    MatchingResult,
    MatchingScore,
)
from talentmatch.models.skill import SkillExtractionResult
from talentmatch.services.ai_augmentation import AIAugmentationService
from talentmatch.services.data_provider import DataProvider, JSONDataProvider
from talentmatch.services.logging_utils import format_skill_list, log_section, print_with_prefix
from talentmatch.services.skill_resolver import SkillResolver


# Caps on outbound AI calls per match
MAX_TRANSFERABILITY_TARGETS = 3
MAX_LEARNING_ASSESSMENTS = 2
MAX_VALIDATED_EXPERIENCES = 3
DEFAULT_TEAM_SIZE = 10


class MatchingOrchestrator:
    """
    Orchestrator of the matching pipeline.

    FLOW:
    1. Resolve job and candidate by id (NotFoundError if missing)
    2. ScoringAgent -> MatchingScore
    3. (enable_ai) AIAugmentationService -> AIInsights
    4. ReportAgent -> explanation, recommendations, confidence
    """

    def __init__(
        self,
        data_provider: Optional[DataProvider] = None,
        resolver: Optional[SkillResolver] = None,
        scoring_agent: Optional[ScoringAgent] = None,
        report_agent: Optional[ReportAgent] = None,
        ai_service: Optional[AIAugmentationService] = None,
        enable_ai: bool = False,
        current_year: Optional[int] = None,
        verbose: bool = False
    ):
        self.enable_ai = enable_ai
        self.current_year = current_year
        self.verbose = verbose

        # Shared services
        self._data_provider = data_provider
        self._resolver = resolver
        self._ai_service = ai_service

        # Agents (lazy init)
        self._scoring_agent = scoring_agent
        self._report_agent = report_agent

    @property
    def data_provider(self) -> DataProvider:
        if self._data_provider is None:
            self._data_provider = JSONDataProvider.from_files(verbose=self.verbose)
        return self._data_provider

    @property
    def resolver(self) -> SkillResolver:
        if self._resolver is None:
            self._resolver = SkillResolver(verbose=self.verbose)
        return self._resolver

    @property
    def scoring_agent(self) -> ScoringAgent:
        if self._scoring_agent is None:
            self._scoring_agent = ScoringAgent(
                resolver=self.resolver,
                current_year=self.current_year,
                verbose=self.verbose
            )
        return self._scoring_agent

    @property
    def report_agent(self) -> ReportAgent:
        if self._report_agent is None:
            self._report_agent = ReportAgent(
                resolver=self.resolver,
                current_year=self.current_year,
                verbose=self.verbose
            )
        return self._report_agent

    @property
    def ai_service(self) -> AIAugmentationService:
        if self._ai_service is None:
            self._ai_service = AIAugmentationService.from_settings(load_settings(), resolver=self.resolver)
        return self._ai_service

    # ═══════════════════════════════════════════════════════════════
    # Matching
    # ═══════════════════════════════════════════════════════════════

    def match(self, job_id: str, candidate_id: str) -> MatchingResult:
        """
        Match one candidate against one job.

        Raises:
            InvalidInputError: missing or blank id
            NotFoundError: job or candidate not in the data provider
            InternalMatchError: any other failure
        """
        self._require_id(job_id, "job_id")
        self._require_id(candidate_id, "candidate_id")

        try:
            job = self._get_job(job_id)
            candidate = self._get_candidate(candidate_id)
            return self._run_pipeline(candidate, job)
        except MatchError:
            raise
        except Exception as e:
            raise InternalMatchError(str(e) or type(e).__name__) from e

    def match_request(self, payload: Dict[str, Any]) -> MatchingResponse:
        """
        Request-shaped entry point.

        Args:
            payload: {"jobId", "candidateId"} or {"job_id", "candidate_id"}

        Returns:
            MatchingResponse with the result, processing time and confidence
        """
        if not isinstance(payload, dict):
            raise InvalidInputError("Request body must be an object with jobId and candidateId")

        job_id = payload.get("jobId", payload.get("job_id"))
        candidate_id = payload.get("candidateId", payload.get("candidate_id"))
        if not self._is_valid_id(job_id) or not self._is_valid_id(candidate_id):
            raise InvalidInputError(
                "Both jobId and candidateId are required",
                details={"job_id": job_id, "candidate_id": candidate_id},
            )

        start = time.perf_counter()
        result = self.match(job_id, candidate_id)
        processing_time_ms = (time.perf_counter() - start) * 1000

        return MatchingResponse(
            result=result,
            processing_time_ms=round(processing_time_ms, 3),
            confidence=result.confidence,
        )

    def rank_candidates(self, job_id: str, limit: Optional[int] = None) -> List[MatchingResult]:
        """All candidates matched against the job, best first."""
        self._require_id(job_id, "job_id")
        self._require_limit(limit)

        try:
            job = self._get_job(job_id)
            log_section(self._log, f"RANKING CANDIDATES: {job.title}", width=70, char="=")
            results = [self._run_pipeline(candidate, job) for candidate in self.data_provider.list_candidates()]
        except MatchError:
            raise
        except Exception as e:
            raise InternalMatchError(str(e) or type(e).__name__) from e

        return self._sort_and_truncate(results, limit)

    def rank_jobs(self, candidate_id: str, limit: Optional[int] = None) -> List[MatchingResult]:
        """All jobs matched against the candidate, best first."""
        self._require_id(candidate_id, "candidate_id")
        self._require_limit(limit)

        try:
            candidate = self._get_candidate(candidate_id)
            log_section(self._log, f"RANKING JOBS: {candidate.name}", width=70, char="=")
            results = [self._run_pipeline(candidate, job) for job in self.data_provider.list_jobs()]
        except MatchError:
            raise
        except Exception as e:
            raise InternalMatchError(str(e) or type(e).__name__) from e

        return self._sort_and_truncate(results, limit)

    # ═══════════════════════════════════════════════════════════════
    # Suggestions & skills
    # ═══════════════════════════════════════════════════════════════

    def get_skill_suggestions(self, candidate_id: str, job_id: str) -> List[str]:
        """Canonical names of the job's requirements the candidate does not list."""
        candidate = self.data_provider.find_candidate_by_id(candidate_id)
        job = self.data_provider.find_job_by_id(job_id)
        if candidate is None or job is None:
            return []

        held = set(candidate.skills)
        suggestions = []
        for requirement in job.requirements:
            if requirement.skill_id in held:
                continue
            skill = self.resolver.get_skill_by_id(requirement.skill_id)
            if skill is not None:
                suggestions.append(skill.canonical_name)
        return suggestions

    def get_job_suggestions(self, candidate_id: str, limit: int = 5) -> List[Job]:
        return [result.job for result in self.rank_jobs(candidate_id, limit)]

    def get_candidate_suggestions(self, job_id: str, limit: int = 5) -> List[Candidate]:
        return [result.candidate for result in self.rank_candidates(job_id, limit)]

    def resolve_skill(self, name: str) -> str:
        return self.resolver.normalize(name)

    def extract_skills(self, text: str) -> SkillExtractionResult:
        return self.resolver.extract_skills_from_text(text)

    def get_knowledge_graph(
        self,
        skill_id: Optional[str] = None,
        relationship_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Skill knowledge graph, whole or around a single skill.

        Args:
            skill_id: Restrict to this skill, its related skills and its edges
            relationship_type: Only edges of this type ("prerequisite", "related", "alternative")
        """
        registry = self.resolver.registry

        if skill_id:
            skill = self.resolver.get_skill_by_id(skill_id)
            if skill is None:
                raise NotFoundError("skill", skill_id)
            return {
                "skill": skill,
                "related_skills": self.resolver.get_related_skills(skill_id),
                "relationships": registry.relationships_for(skill_id),
            }

        if relationship_type:
            return {"relationships": registry.relationships_by_type(relationship_type)}

        return {
            "skills": list(registry.skills),
            "relationships": list(registry.relationships),
            "total_skills": len(registry.skills),
            "total_relationships": len(registry.relationships),
        }

    # ═══════════════════════════════════════════════════════════════
    # Pipeline
    # ═══════════════════════════════════════════════════════════════

    def _run_pipeline(self, candidate: Candidate, job: Job) -> MatchingResult:
        log_section(self._log, f"MATCH: {candidate.name} -> {job.title} @ {job.company}", width=70, char="-")

        score = self.scoring_agent.score(candidate, job)
        self._log(f"   -> Overall: {score.overall_score:.2f}")
        self._log(f"   -> Missing: {format_skill_list(score.breakdown.missing_skills)}")

        insights: Optional[AIInsights] = None
        status: AugmentationStatus = "disabled"
        if self.enable_ai:
            try:
                insights, status = self._augment(candidate, job, score)
            except Exception as e:
                print_with_prefix("[Orchestrator]", f"AI augmentation failed, continuing without it: {e}")
                insights, status = None, "degraded"
            self._log(f"   -> AI augmentation: {status}")

        explanation = self.report_agent.generate_explanation(candidate, job, score, insights)
        recommendations = self.report_agent.generate_recommendations(candidate, job, score, insights)
        confidence = self.report_agent.calculate_confidence(score, insights)
        self._log(f"   -> Confidence: {confidence:.2f}")

        return MatchingResult(
            candidate=candidate,
            job=job,
            score=score,
            explanation=explanation,
            recommendations=recommendations,
            confidence=confidence,
            augmentation_status=status,
            ai_insights=insights,
        )

    def _augment(
        self,
        candidate: Candidate,
        job: Job,
        score: MatchingScore
    ) -> Tuple[AIInsights, AugmentationStatus]:
        ai = self.ai_service
        breakdown = score.breakdown
        insights = AIInsights()
        background = self._candidate_background(candidate)

        # Transferability: related skills first, then missing
        targets = (breakdown.related_skills + breakdown.missing_skills)[:MAX_TRANSFERABILITY_TARGETS]
        for target_id in targets:
            source = self._best_source_experience(candidate, target_id)
            if source is None:
                continue
            insights.transferability.append(ai.analyze_skill_transferability(
                self._skill_name(source.skill_id),
                self._skill_name(target_id),
                self._describe_experience(source),
            ))

        for skill_id in breakdown.missing_skills[:MAX_LEARNING_ASSESSMENTS]:
            insights.learning_potential.append(
                ai.assess_learning_potential(self._skill_name(skill_id), background)
            )

        company_culture = job.description or "; ".join(job.responsibilities)
        insights.cultural_fit = ai.assess_cultural_fit(
            background,
            company_culture,
            job.team_size or DEFAULT_TEAM_SIZE,
        )

        for experience in candidate.experience[:MAX_VALIDATED_EXPERIENCES]:
            insights.experience_validation.append(ai.validate_experience(
                self._skill_name(experience.skill_id),
                experience.project_description or "",
                experience.duration_months,
                experience_id=experience.id,
            ))

        analyses = (
            insights.transferability
            + insights.learning_potential
            + insights.experience_validation
            + [insights.cultural_fit]
        )
        status: AugmentationStatus = "ai" if any(not a.from_fallback for a in analyses) else "degraded"
        return insights, status

    # ═══════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════

    def _get_job(self, job_id: str) -> Job:
        job = self.data_provider.find_job_by_id(job_id)
        if job is None:
            raise NotFoundError("job", job_id)
        return job

    def _get_candidate(self, candidate_id: str) -> Candidate:
        candidate = self.data_provider.find_candidate_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        return candidate

    @staticmethod
    def _is_valid_id(value: Any) -> bool:
        return isinstance(value, str) and bool(value.strip())

    def _require_id(self, value: Any, field_name: str) -> None:
        if not self._is_valid_id(value):
            raise InvalidInputError(f"{field_name} is required", details={field_name: value})

    @staticmethod
    def _require_limit(limit: Optional[int]) -> None:
        if limit is None:
            return
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidInputError(f"limit must be a non-negative integer, got {limit!r}")

    @staticmethod
    def _sort_and_truncate(results: List[MatchingResult], limit: Optional[int]) -> List[MatchingResult]:
        # list.sort is stable with reverse=True: ties keep provider order
        results.sort(key=lambda r: r.score.overall_score, reverse=True)
        return results if limit is None else results[:limit]

    def _skill_name(self, skill_id: str) -> str:
        skill = self.resolver.get_skill_by_id(skill_id)
        return skill.canonical_name if skill is not None else skill_id

    def _best_source_experience(self, candidate: Candidate, target_id: str) -> Optional[Experience]:
        """Longest related experience, else the candidate's longest experience."""
        if not candidate.experience:
            return None
        related = [
            exp for exp in candidate.experience
            if exp.skill_id != target_id and self.resolver.are_related(exp.skill_id, target_id)
        ]
        pool = related or candidate.experience
        return max(pool, key=lambda exp: exp.duration_months)

    def _describe_experience(self, experience: Experience) -> str:
        text = f"{experience.duration_months} months of {self._skill_name(experience.skill_id)}"
        if experience.project_description:
            text += f": {experience.project_description}"
        return text

    @staticmethod
    def _candidate_background(candidate: Candidate) -> str:
        parts = [candidate.summary] if candidate.summary else []
        parts.extend(exp.project_description for exp in candidate.experience if exp.project_description)
        return " ".join(parts) or f"Candidate with skills: {', '.join(candidate.skills)}"

    def _log(self, message: str) -> None:
        print_with_prefix("[Orchestrator]", message, enabled=self.verbose)


# ═══════════════════════════════════════════════════════════════════════════
# SIMPLE API
# ═══════════════════════════════════════════════════════════════════════════

def match_candidate_to_job(
    job_id: str,
    candidate_id: str,
    data_provider: Optional[DataProvider] = None,
    enable_ai: bool = False,
    verbose: bool = False
) -> MatchingResult:
    """
    Simple API for a single job/candidate match.

    Args:
        job_id: Job id in the data provider
        candidate_id: Candidate id in the data provider
        data_provider: Source of jobs/candidates (default: packaged sample data)
        enable_ai: Run the AI augmentation step
        verbose: Print pipeline logs

    Returns:
        MatchingResult
    """
    orchestrator = MatchingOrchestrator(data_provider=data_provider, enable_ai=enable_ai, verbose=verbose)
    return orchestrator.match(job_id, candidate_id)

"""
AI Augmentation Service
Optional LLM analyses layered on top of the deterministic score.

Every analysis returns a typed model. When the backend is unavailable, every
retry failed, or the response cannot be parsed, a deterministic local
heuristic produces the same shape with `from_fallback=True`. Failures are
never propagated to the caller.
"""

from typing import Any, Dict, List, Optional

from talentmatch.config import Settings
from talentmatch.exceptions import AugmentationUnavailableError
from talentmatch.models.ai_analysis import (
    CulturalFitAssessment,
    ExperienceValidation,
    GapAnalysis,
    LearningAssessment,
    SkillContext,
    TransferabilityAnalysis,
)
from talentmatch.models.skill import Skill
from talentmatch.services.llm_service import LLMService
from talentmatch.services.logging_utils import print_with_prefix
from talentmatch.services.skill_resolver import SkillResolver


# Fallback heuristics
SKILL_DIFFICULTY = {
    "javascript": 2,
    "react": 3,
    "nodejs": 3,
    "python": 2,
    "java": 4,
    "docker": 3,
    "kubernetes": 4,
    "aws": 4,
    "tensorflow": 4,
    "postgresql": 3,
}
DEFAULT_SKILL_DIFFICULTY = 3

TECHNICAL_KEYWORDS = ["developer", "engineer", "programming", "coding", "software"]
COMPLEXITY_KEYWORDS = ["architected", "led", "managed", "designed", "implemented"]
LEADERSHIP_KEYWORDS = ["team", "lead", "mentor", "supervise", "coordinate"]
TECHNICAL_DETAIL_KEYWORDS = ["API", "database", "framework"]
METRIC_KEYWORDS = ["users", "performance", "scale"]
CULTURE_KEYWORDS = [
    "collaborat", "mentor", "agile", "ownership", "fast-paced", "startup",
    "scalab", "performance", "quality", "test", "automation", "data", "cloud",
]
OWNERSHIP_KEYWORDS = ["led", "architected", "built", "designed", "full-stack"]
TEAMWORK_KEYWORDS = ["team", "mentor", "collaborat", "led", "review"]
SMALL_TEAM_SIZE = 10

DEFAULT_LEARNING_RECOMMENDATIONS = [
    "Start with {skill} fundamentals",
    "Consider online courses or bootcamps",
    "Build small projects to gain hands-on experience",
]


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return min(high, max(low, number))


def _string_list(value: Any, limit: Optional[int] = None) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    items = [str(v) for v in value if v is not None and str(v).strip()]
    return items[:limit] if limit else items


def _contains_any(text: str, keywords: List[str]) -> bool:
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)


class AIAugmentationService:
    """
    LLM-backed analyses used by MatchingOrchestrator.

    Mock mode skips the backend entirely and always answers with the local
    heuristics.
    """

    def __init__(
        self,
        llm_service: Optional[LLMService] = None,
        resolver: Optional[SkillResolver] = None,
        mock_mode: bool = False,
        verbose: bool = False
    ):
        self._llm_service = llm_service
        self._resolver = resolver
        self.mock_mode = mock_mode
        self.verbose = verbose
        self.fallback_count = 0

    @classmethod
    def from_settings(cls, settings: Settings, resolver: Optional[SkillResolver] = None) -> "AIAugmentationService":
        """Service wired to the backend selected by the settings."""
        llm_service = LLMService(
            provider=settings.llm_provider,
            model=settings.llm_model,
            openai_api_key=settings.openai_api_key,
            lmstudio_base_url=settings.lmstudio_base_url,
            lmstudio_api_key=settings.lmstudio_api_key,
            rate_limit_seconds=settings.rate_limit_seconds,
            max_retries=settings.max_retries,
            check_availability=not settings.mock_mode,
        )
        return cls(
            llm_service=llm_service,
            resolver=resolver,
            mock_mode=settings.mock_mode,
            verbose=settings.verbose,
        )

    @property
    def llm_service(self) -> LLMService:
        if self._llm_service is None:
            self._llm_service = LLMService(verbose=self.verbose)
        return self._llm_service

    @property
    def resolver(self) -> SkillResolver:
        if self._resolver is None:
            self._resolver = SkillResolver()
        return self._resolver

    def set_mock_mode(self, enabled: bool) -> None:
        self.mock_mode = enabled

    def get_status(self) -> Dict[str, Any]:
        llm = self.llm_service
        return {
            "mock_mode": self.mock_mode,
            "provider": llm.provider,
            "model": llm.model,
            "has_credentials": llm.has_credentials,
            "is_available": llm.is_available,
            "request_count": llm.request_count,
            "cache_size": llm.cache_size,
            "fallback_count": self.fallback_count,
        }

    # ═══════════════════════════════════════════════════════════════
    # Analyses
    # ═══════════════════════════════════════════════════════════════

    def analyze_skill_transferability(
        self,
        source_skill: str,
        target_skill: str,
        candidate_experience: str
    ) -> TransferabilityAnalysis:
        """How well experience in source_skill carries over to target_skill."""
        prompt = f"""Assess how transferable experience in {source_skill} is to {target_skill}.

CANDIDATE EXPERIENCE:
"{candidate_experience}"

Respond with this JSON format:
{{
    "transferability_score": number between 0 and 1,
    "learning_path": ["step 1", "step 2", "step 3"],
    "estimated_months": months needed to become productive with {target_skill},
    "reasoning": "one sentence"
}}

JSON:"""

        parsed = self._ask("transferability", prompt, max_tokens=400, temperature=0.3)
        if parsed is not None:
            try:
                return TransferabilityAnalysis(
                    source_skill=source_skill,
                    target_skill=target_skill,
                    transferability_score=_clamp(parsed.get("transferability_score"), 0.0, 1.0, 0.5),
                    learning_path=_string_list(parsed.get("learning_path"), 5)
                    or self._default_learning_path(source_skill, target_skill),
                    estimated_months=int(_clamp(parsed.get("estimated_months"), 0, 120, 6)),
                    reasoning=str(parsed.get("reasoning") or ""),
                )
            except ValueError as e:
                self._log(f"Invalid transferability payload: {e}")

        return self._fallback_transferability(source_skill, target_skill)

    def assess_learning_potential(self, skill: str, background: str) -> LearningAssessment:
        """How quickly a candidate with this background can pick up a missing skill."""
        prompt = f"""Assess the learning potential for {skill} based on this candidate background:
"{background}"

Respond with this JSON format:
{{
    "learnability": number between 0 and 1,
    "time_to_proficiency_months": estimated months to reach proficiency,
    "recommendations": ["3 specific learning recommendations"]
}}

JSON:"""

        parsed = self._ask("learning potential", prompt, max_tokens=400, temperature=0.4)
        if parsed is not None:
            try:
                return LearningAssessment(
                    skill=skill,
                    learnability=_clamp(parsed.get("learnability"), 0.0, 1.0, 0.5),
                    time_to_proficiency_months=int(_clamp(parsed.get("time_to_proficiency_months"), 1, 120, 6)),
                    recommendations=_string_list(parsed.get("recommendations"), 3)
                    or [r.format(skill=skill) for r in DEFAULT_LEARNING_RECOMMENDATIONS],
                )
            except ValueError as e:
                self._log(f"Invalid learning payload: {e}")

        return self._fallback_learning_assessment(skill, background)

    def assess_cultural_fit(
        self,
        candidate_experience: str,
        company_culture: str,
        team_size: int
    ) -> CulturalFitAssessment:
        prompt = f"""Assess the cultural fit of a candidate for a team of {team_size} people.

CANDIDATE EXPERIENCE:
"{candidate_experience}"

COMPANY / ROLE DESCRIPTION:
"{company_culture}"

Respond with this JSON format:
{{
    "fit_score": number between 0 and 1,
    "strengths": ["..."],
    "concerns": ["..."],
    "recommendations": ["..."]
}}

JSON:"""

        parsed = self._ask("cultural fit", prompt, max_tokens=400, temperature=0.3)
        if parsed is not None:
            try:
                return CulturalFitAssessment(
                    fit_score=_clamp(parsed.get("fit_score"), 0.0, 1.0, 0.5),
                    strengths=_string_list(parsed.get("strengths"), 5) or [],
                    concerns=_string_list(parsed.get("concerns"), 5) or [],
                    recommendations=_string_list(parsed.get("recommendations"), 3) or [],
                )
            except ValueError as e:
                self._log(f"Invalid cultural fit payload: {e}")

        return self._fallback_cultural_fit(candidate_experience, company_culture, team_size)

    def validate_experience(
        self,
        skill: str,
        description: str,
        duration_months: int,
        experience_id: Optional[str] = None
    ) -> ExperienceValidation:
        """Plausibility check of an experience claim."""
        prompt = f"""Validate this experience claim for {skill}:
Duration: {duration_months} months
Description: "{description}"

Respond with this JSON format:
{{
    "is_valid": true or false,
    "confidence": number between 0 and 1,
    "complexity_level": integer 1-5,
    "issues": ["..."]
}}

JSON:"""

        parsed = self._ask("experience validation", prompt, max_tokens=300, temperature=0.2)
        if parsed is not None:
            try:
                return ExperienceValidation(
                    experience_id=experience_id,
                    skill=skill,
                    is_valid=bool(parsed.get("is_valid")),
                    confidence=_clamp(parsed.get("confidence"), 0.0, 1.0, 0.7),
                    complexity_level=int(round(_clamp(parsed.get("complexity_level"), 1, 5, 3))),
                    issues=_string_list(parsed.get("issues")) or [],
                )
            except ValueError as e:
                self._log(f"Invalid validation payload: {e}")

        return self._fallback_experience_validation(skill, description, duration_months, experience_id)

    def analyze_skill_context(self, skill: str, context_text: str) -> SkillContext:
        prompt = f"""Analyze the following experience with {skill}.

Experience: "{context_text}"

Respond with this JSON format:
{{
    "context": "brief description of the experience",
    "project_complexity": integer 1-5,
    "leadership_indicators": ["..."],
    "learning_potential": number between 0 and 1
}}

JSON:"""

        parsed = self._ask("skill context", prompt, max_tokens=300, temperature=0.3)
        if parsed is not None:
            try:
                return SkillContext(
                    skill=skill,
                    context=str(parsed.get("context") or f"Experience with {skill}"),
                    project_complexity=int(round(_clamp(parsed.get("project_complexity"), 1, 5, 3))),
                    leadership_indicators=_string_list(parsed.get("leadership_indicators")) or [],
                    learning_potential=_clamp(parsed.get("learning_potential"), 0.0, 1.0, 0.7),
                )
            except ValueError as e:
                self._log(f"Invalid skill context payload: {e}")

        return self._fallback_skill_context(skill, context_text)

    def generate_gap_analysis(self, required_skills: List[str], candidate_skills: List[str]) -> GapAnalysis:
        gaps = [s for s in required_skills if s not in candidate_skills]
        if not gaps and not self.mock_mode:
            return GapAnalysis(gaps=[], recommendations=["All required skills are present"], priority="low")

        prompt = f"""Analyze these skill gaps for a candidate:
Required skills: {', '.join(required_skills)}
Candidate skills: {', '.join(candidate_skills)}
Missing skills: {', '.join(gaps)}

Respond with this JSON format:
{{
    "gaps": ["missing skills"],
    "recommendations": ["3 specific recommendations to address the gaps"],
    "priority": "high" | "medium" | "low"
}}

JSON:"""

        parsed = self._ask("gap analysis", prompt, max_tokens=400, temperature=0.3)
        if parsed is not None:
            priority = parsed.get("priority")
            return GapAnalysis(
                gaps=_string_list(parsed.get("gaps")) or gaps,
                recommendations=_string_list(parsed.get("recommendations"), 3)
                or [f"Focus on gaining experience with {s}" for s in gaps],
                priority=priority if priority in ("high", "medium", "low") else "medium",
            )

        return self._fallback_gap_analysis(required_skills, candidate_skills)

    # ═══════════════════════════════════════════════════════════════
    # Backend call
    # ═══════════════════════════════════════════════════════════════

    def _ask(self, kind: str, prompt: str, max_tokens: int, temperature: float) -> Optional[Dict[str, Any]]:
        """JSON answer from the backend, or None when the fallback must be used."""
        if self.mock_mode:
            self.fallback_count += 1
            return None
        try:
            parsed = self.llm_service.generate_json(prompt, temperature=temperature, max_tokens=max_tokens)
        except AugmentationUnavailableError as e:
            self._log(f"{kind}: backend unavailable, using fallback ({e})")
            self.fallback_count += 1
            return None
        if parsed is None:
            self._log(f"{kind}: unparseable response, using fallback")
            self.fallback_count += 1
        return parsed

    # ═══════════════════════════════════════════════════════════════
    # Deterministic fallbacks
    # ═══════════════════════════════════════════════════════════════

    def _lookup(self, name: str) -> Optional[Skill]:
        return self.resolver.get_skill_by_id(name) or self.resolver.get_skill_by_id(name.strip().lower())

    def _skill_difficulty(self, name: str) -> int:
        key = name.strip().lower()
        if key in SKILL_DIFFICULTY:
            return SKILL_DIFFICULTY[key]
        skill = self._lookup(name)
        if skill is not None and skill.id in SKILL_DIFFICULTY:
            return SKILL_DIFFICULTY[skill.id]
        return DEFAULT_SKILL_DIFFICULTY

    @staticmethod
    def _background_strength(background: str) -> float:
        return 0.8 if _contains_any(background, TECHNICAL_KEYWORDS) else 0.4

    @staticmethod
    def _default_learning_path(source_skill: str, target_skill: str) -> List[str]:
        return [
            f"Review {target_skill} fundamentals",
            f"Map familiar {source_skill} concepts to {target_skill}",
            f"Build a small project with {target_skill}",
        ]

    def _fallback_transferability(self, source_skill: str, target_skill: str) -> TransferabilityAnalysis:
        source = self._lookup(source_skill)
        target = self._lookup(target_skill)

        if source is not None and target is not None:
            base = 1 - abs(source.difficulty_level - target.difficulty_level) / 5
            related = self.resolver.are_related(source.id, target.id)
            score = base if related else base * 0.5
            months = max(1, round(target.time_to_proficiency_months * (1 - score)))
        else:
            score, months = 0.3, 6

        return TransferabilityAnalysis(
            source_skill=source_skill,
            target_skill=target_skill,
            transferability_score=round(score, 2),
            learning_path=self._default_learning_path(source_skill, target_skill),
            estimated_months=months,
            reasoning="Estimated from skill difficulty and relatedness",
            from_fallback=True,
        )

    def _fallback_learning_assessment(self, skill: str, background: str) -> LearningAssessment:
        difficulty = self._skill_difficulty(skill)
        strength = self._background_strength(background)

        learnability = min(1.0, max(0.3, 1 - difficulty * 0.2 + strength * 0.3))
        months = max(3, round(difficulty * 2 - strength * 2))

        return LearningAssessment(
            skill=skill,
            learnability=learnability,
            time_to_proficiency_months=months,
            recommendations=[r.format(skill=skill) for r in DEFAULT_LEARNING_RECOMMENDATIONS],
            from_fallback=True,
        )

    def _fallback_cultural_fit(
        self,
        candidate_experience: str,
        company_culture: str,
        team_size: int
    ) -> CulturalFitAssessment:
        candidate_text = candidate_experience.lower()
        culture_text = company_culture.lower()
        shared = [k for k in CULTURE_KEYWORDS if k in candidate_text and k in culture_text]

        strengths: List[str] = []
        concerns: List[str] = []
        if shared:
            strengths.append(f"Shared focus on {', '.join(shared[:3])}")

        if team_size <= SMALL_TEAM_SIZE:
            if _contains_any(candidate_text, OWNERSHIP_KEYWORDS):
                strengths.append("Hands-on ownership suits a small team")
            else:
                concerns.append("May need support with the broad scope of a small team")
        else:
            if _contains_any(candidate_text, TEAMWORK_KEYWORDS):
                strengths.append("Experience collaborating within larger teams")
            else:
                concerns.append("Limited evidence of work in larger teams")

        recommendations = ["Discuss team practices and communication style during the interview"]
        if concerns:
            recommendations.append("Plan a structured onboarding with a dedicated mentor")

        return CulturalFitAssessment(
            fit_score=min(0.95, 0.5 + 0.08 * len(shared) + 0.05 * len(strengths) - 0.05 * len(concerns)),
            strengths=strengths,
            concerns=concerns,
            recommendations=recommendations,
            from_fallback=True,
        )

    @staticmethod
    def _fallback_experience_validation(
        skill: str,
        description: str,
        duration_months: int,
        experience_id: Optional[str] = None
    ) -> ExperienceValidation:
        has_technical_details = any(k in description for k in TECHNICAL_DETAIL_KEYWORDS)
        has_metrics = any(k in description for k in METRIC_KEYWORDS)
        is_valid = duration_months > 0 and len(description) > 20

        return ExperienceValidation(
            experience_id=experience_id,
            skill=skill,
            is_valid=is_valid,
            confidence=0.9 if has_metrics else 0.7,
            complexity_level=4 if has_technical_details else 2,
            issues=[] if is_valid else ["Description too short or duration missing"],
            from_fallback=True,
        )

    @staticmethod
    def _fallback_skill_context(skill: str, context_text: str) -> SkillContext:
        return SkillContext(
            skill=skill,
            context=f"Experience with {skill} in {context_text[:100]}...",
            project_complexity=4 if _contains_any(context_text, COMPLEXITY_KEYWORDS) else 2,
            leadership_indicators=(
                ["Team leadership", "Project coordination"]
                if _contains_any(context_text, LEADERSHIP_KEYWORDS) else []
            ),
            learning_potential=0.7,
            from_fallback=True,
        )

    @staticmethod
    def _fallback_gap_analysis(required_skills: List[str], candidate_skills: List[str]) -> GapAnalysis:
        gaps = [s for s in required_skills if s not in candidate_skills]

        priority = "low"
        if len(gaps) > len(required_skills) * 0.5:
            priority = "high"
        elif len(gaps) > len(required_skills) * 0.2:
            priority = "medium"

        return GapAnalysis(
            gaps=gaps,
            recommendations=[f"Focus on gaining experience with {s}" for s in gaps],
            priority=priority,
            from_fallback=True,
        )

    def _log(self, message: str) -> None:
        print_with_prefix("[AIAugmentation]", message, enabled=self.verbose)

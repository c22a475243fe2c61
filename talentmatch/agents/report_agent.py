"""
Report Agent
Turns a MatchingScore (and optional AI insights) into the human-facing part
of a MatchingResult.

Responsibilities:
- Explanation built from fixed sentence templates over the breakdown
- Ranked recommendations, AI-sourced ones first, capped at 5
- Confidence in [0.3, 1.0], nudged only by live (non-fallback) AI analyses
"""

from datetime import date
from typing import List, Optional

import numpy as np

from talentmatch.models.ai_analysis import AIInsights
from talentmatch.models.candidate import Candidate
from talentmatch.models.job import Job
from talentmatch.models.match_result import MatchingScore
from talentmatch.services.logging_utils import print_with_prefix
from talentmatch.services.skill_resolver import SkillResolver


MAX_RECOMMENDATIONS = 5
SMALL_GAP_MONTHS = 6
LARGE_GAP_MONTHS = 12
TRAINING_THRESHOLD = 0.7
RECENT_EDUCATION_YEARS = 5

BASE_CONFIDENCE = 0.8
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 1.0


class ReportAgent:
    """Agent that writes explanation, recommendations and confidence for a score."""

    def __init__(
        self,
        resolver: Optional[SkillResolver] = None,
        current_year: Optional[int] = None,
        verbose: bool = False
    ):
        self._resolver = resolver
        self.current_year = current_year
        self.verbose = verbose

    @property
    def resolver(self) -> SkillResolver:
        if self._resolver is None:
            self._resolver = SkillResolver()
        return self._resolver

    @property
    def year(self) -> int:
        return self.current_year or date.today().year

    # ═══════════════════════════════════════════════════════════════
    # Explanation
    # ═══════════════════════════════════════════════════════════════

    def generate_explanation(
        self,
        candidate: Candidate,
        job: Job,
        score: MatchingScore,
        insights: Optional[AIInsights] = None
    ) -> str:
        breakdown = score.breakdown
        sentences = [
            f"Based on our analysis, {candidate.name} has a {round(score.overall_score * 100)}% "
            f"match for the {job.title} position at {job.company}."
        ]

        matched_names = self._skill_names(breakdown.matched_skills)
        if matched_names:
            sentences.append(f"They have direct experience with {', '.join(matched_names)}.")

        related_names = self._skill_names(breakdown.related_skills)
        if related_names:
            sentences.append(f"They also have related experience with {', '.join(related_names)}.")

        gaps = breakdown.experience_gaps
        if not gaps:
            sentences.append("Their experience levels align well with the job requirements.")
        else:
            if any(gap.gap <= SMALL_GAP_MONTHS for gap in gaps):
                sentences.append("They have minor experience gaps in some areas.")
            if any(gap.gap > SMALL_GAP_MONTHS for gap in gaps):
                sentences.append("There are significant experience gaps that may require additional training.")

        if breakdown.potential_indicators:
            sentences.append(
                f"They show strong potential indicators including {', '.join(breakdown.potential_indicators)}."
            )

        if breakdown.risk_factors:
            sentences.append(f"Considerations include {', '.join(breakdown.risk_factors)}.")

        sentences.extend(self._ai_sentences(insights))
        return " ".join(sentences)

    def _ai_sentences(self, insights: Optional[AIInsights]) -> List[str]:
        if insights is None:
            return []
        sentences = []

        transfers = [t for t in insights.transferability if not t.from_fallback]
        if transfers:
            best = max(transfers, key=lambda t: t.transferability_score)
            sentences.append(
                f"AI analysis suggests their {best.source_skill} experience transfers to "
                f"{best.target_skill} with a {round(best.transferability_score * 100)}% transferability score."
            )

        fit = insights.cultural_fit
        if fit is not None and not fit.from_fallback:
            sentences.append(f"AI analysis estimates a {round(fit.fit_score * 100)}% cultural fit with the team.")

        learning = [a for a in insights.learning_potential if not a.from_fallback]
        if learning:
            avg_months = float(np.mean([a.time_to_proficiency_months for a in learning]))
            sentences.append(f"Missing skills could be learned in about {round(avg_months)} months on average.")

        return sentences

    # ═══════════════════════════════════════════════════════════════
    # Recommendations
    # ═══════════════════════════════════════════════════════════════

    def generate_recommendations(
        self,
        candidate: Candidate,
        job: Job,
        score: MatchingScore,
        insights: Optional[AIInsights] = None
    ) -> List[str]:
        breakdown = score.breakdown
        recommendations = self._ai_recommendations(insights)

        missing_names = self._skill_names(breakdown.missing_skills)
        if missing_names:
            recommendations.append(f"Consider gaining experience with {', '.join(missing_names)}")

        significant = [gap.skill_id for gap in breakdown.experience_gaps if gap.gap > SMALL_GAP_MONTHS]
        gap_names = self._skill_names(significant)
        if gap_names:
            recommendations.append(f"Focus on building deeper experience with {', '.join(gap_names)}")

        if score.overall_score < TRAINING_THRESHOLD:
            recommendations.append("Consider additional training or certification programs")

        if not any(exp.has_leadership_role for exp in candidate.experience):
            recommendations.append("Seek opportunities to demonstrate leadership skills")

        if not any(self.year - edu.graduation_year <= RECENT_EDUCATION_YEARS for edu in candidate.education):
            recommendations.append("Consider pursuing additional education or certifications")

        self._log(f"{len(recommendations)} recommendations for {candidate.id} / {job.id}")
        return recommendations[:MAX_RECOMMENDATIONS]

    @staticmethod
    def _ai_recommendations(insights: Optional[AIInsights]) -> List[str]:
        if insights is None:
            return []
        recommendations = []

        transfers = [t for t in insights.transferability if not t.from_fallback]
        if transfers:
            best = max(transfers, key=lambda t: t.transferability_score)
            path = f": {best.learning_path[0]}" if best.learning_path else ""
            recommendations.append(f"Leverage {best.source_skill} experience to learn {best.target_skill}{path}")

        learning = [a for a in insights.learning_potential if not a.from_fallback]
        if learning:
            fastest = min(learning, key=lambda a: a.time_to_proficiency_months)
            recommendations.append(
                f"Prioritize learning {fastest.skill} "
                f"(about {fastest.time_to_proficiency_months} months to proficiency)"
            )

        fit = insights.cultural_fit
        if fit is not None and not fit.from_fallback and fit.recommendations:
            recommendations.append(fit.recommendations[0])

        return recommendations

    # ═══════════════════════════════════════════════════════════════
    # Confidence
    # ═══════════════════════════════════════════════════════════════

    def calculate_confidence(self, score: MatchingScore, insights: Optional[AIInsights] = None) -> float:
        breakdown = score.breakdown
        confidence = BASE_CONFIDENCE

        if breakdown.matched_skills:
            confidence += 0.1
        if not breakdown.missing_skills:
            confidence += 0.05
        if not breakdown.experience_gaps:
            confidence += 0.05

        large_gaps = [gap for gap in breakdown.experience_gaps if gap.gap > LARGE_GAP_MONTHS]
        confidence -= len(large_gaps) * 0.05

        if len(breakdown.missing_skills) > len(breakdown.matched_skills):
            confidence -= 0.1

        if insights is not None:
            transfers = [t.transferability_score for t in insights.transferability if not t.from_fallback]
            if transfers:
                confidence += float(np.mean(transfers)) * 0.1

            fit = insights.cultural_fit
            if fit is not None and not fit.from_fallback:
                confidence += fit.fit_score * 0.05

            validations = [v.confidence for v in insights.experience_validation if not v.from_fallback]
            if validations:
                confidence += float(np.mean(validations)) * 0.05

        return round(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence)), 4)

    # ═══════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════

    def _skill_names(self, skill_ids: List[str]) -> List[str]:
        """Canonical names for the ids, unknown ids dropped."""
        names = []
        for skill_id in skill_ids:
            skill = self.resolver.get_skill_by_id(skill_id)
            if skill is not None:
                names.append(skill.canonical_name)
        return names

    def _log(self, message: str) -> None:
        print_with_prefix("[ReportAgent]", message, enabled=self.verbose)

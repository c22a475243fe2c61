"""
Test AI Augmentation Service
"""

import pytest

from conftest import FakeLLMService
from talentmatch.config import Settings
from talentmatch.services.ai_augmentation import AIAugmentationService
from talentmatch.services.llm_service import LLMService


@pytest.fixture
def live_service(fake_llm, resolver) -> AIAugmentationService:
    return AIAugmentationService(llm_service=fake_llm, resolver=resolver)


@pytest.fixture
def mock_service(resolver) -> AIAugmentationService:
    return AIAugmentationService(llm_service=FakeLLMService(), resolver=resolver, mock_mode=True)


# ═══════════════════════════════════════════════════════════════════════════
# LIVE BACKEND
# ═══════════════════════════════════════════════════════════════════════════

def test_live_answers_are_parsed(live_service):
    transfer = live_service.analyze_skill_transferability("JavaScript", "TypeScript", "6 years of JavaScript")
    assert not transfer.from_fallback
    assert transfer.transferability_score == pytest.approx(0.85)
    assert transfer.estimated_months == 2
    assert len(transfer.learning_path) == 3

    learning = live_service.assess_learning_potential("AWS", "Backend engineer")
    assert not learning.from_fallback
    assert learning.time_to_proficiency_months == 4

    fit = live_service.assess_cultural_fit("Mentored juniors", "Collaborative team", 12)
    assert not fit.from_fallback
    assert fit.fit_score == pytest.approx(0.8)

    validation = live_service.validate_experience("React", "Built dashboards", 24, experience_id="exp-1")
    assert not validation.from_fallback
    assert validation.experience_id == "exp-1"
    assert validation.complexity_level == 4

    context = live_service.analyze_skill_context("React", "Led a team building a dashboard")
    assert not context.from_fallback
    assert context.project_complexity == 4

    gaps = live_service.generate_gap_analysis(["react", "typescript"], ["react"])
    assert not gaps.from_fallback
    assert gaps.priority == "medium"

    assert live_service.fallback_count == 0


def test_out_of_range_values_are_clamped(resolver):
    llm = FakeLLMService(responses={"transferable": {"transferability_score": 1.7, "estimated_months": -3}})
    service = AIAugmentationService(llm_service=llm, resolver=resolver)

    result = service.analyze_skill_transferability("Java", "Python", "")

    assert result.transferability_score == 1.0
    assert result.estimated_months == 0
    assert result.learning_path


def test_unparseable_answer_uses_fallback(resolver):
    service = AIAugmentationService(llm_service=FakeLLMService(raw_response="I cannot help with that"), resolver=resolver)

    result = service.assess_learning_potential("Docker", "Software developer")

    assert result.from_fallback
    assert service.fallback_count == 1


def test_failing_backend_uses_fallback(failing_llm, resolver):
    service = AIAugmentationService(llm_service=failing_llm, resolver=resolver)

    result = service.validate_experience("React", "Built an API used by 10k users", 24)

    assert result.from_fallback
    assert failing_llm.attempts == failing_llm.max_retries


def test_unavailable_backend_is_not_called(resolver):
    llm = LLMService(provider="openai", openai_api_key="", check_availability=False, verbose=False)
    service = AIAugmentationService(llm_service=llm, resolver=resolver)

    assert service.assess_cultural_fit("a", "b", 5).from_fallback
    assert llm.request_count == 0


# ═══════════════════════════════════════════════════════════════════════════
# FALLBACK HEURISTICS
# ═══════════════════════════════════════════════════════════════════════════

def test_mock_mode_never_calls_backend(mock_service):
    mock_service.analyze_skill_transferability("JavaScript", "TypeScript", "")
    mock_service.assess_learning_potential("AWS", "")

    assert mock_service.llm_service.prompts == []
    assert mock_service.fallback_count == 2


def test_fallback_transferability(mock_service):
    related = mock_service.analyze_skill_transferability("javascript", "typescript", "")
    assert related.from_fallback
    # difficulty 2 vs 3, related
    assert related.transferability_score == pytest.approx(0.8)
    assert related.estimated_months == 1

    unrelated = mock_service.analyze_skill_transferability("Python", "React", "")
    # difficulty 2 vs 3, not related
    assert unrelated.transferability_score == pytest.approx(0.4)

    unknown = mock_service.analyze_skill_transferability("COBOL", "Fortran", "")
    assert unknown.transferability_score == pytest.approx(0.3)
    assert unknown.estimated_months == 6


def test_fallback_learning_assessment(mock_service):
    technical = mock_service.assess_learning_potential("kubernetes", "Software engineer with 3 years")
    assert technical.learnability == pytest.approx(0.44)
    assert technical.time_to_proficiency_months == 6
    assert technical.recommendations[0] == "Start with kubernetes fundamentals"

    non_technical = mock_service.assess_learning_potential("kubernetes", "Sales manager")
    assert non_technical.learnability == pytest.approx(0.32)
    assert non_technical.time_to_proficiency_months == 7


def test_fallback_experience_validation(mock_service):
    detailed = mock_service.validate_experience("React", "Designed an API serving 1M users", 24)
    assert detailed.is_valid
    assert detailed.confidence == pytest.approx(0.9)
    assert detailed.complexity_level == 4

    thin = mock_service.validate_experience("React", "Some work", 0)
    assert not thin.is_valid
    assert thin.issues


def test_fallback_skill_context(mock_service):
    context = mock_service.analyze_skill_context("React", "Led the team that architected the frontend")
    assert context.project_complexity == 4
    assert context.leadership_indicators == ["Team leadership", "Project coordination"]


def test_fallback_cultural_fit_is_bounded(mock_service):
    fit = mock_service.assess_cultural_fit(
        "Led an agile team, mentor to juniors, test automation advocate",
        "Agile startup that values mentoring, test automation and ownership",
        6,
    )
    assert fit.from_fallback
    assert 0 <= fit.fit_score <= 1
    assert fit.strengths


def test_gap_analysis(mock_service, live_service):
    high = mock_service.generate_gap_analysis(["react", "typescript", "aws"], ["react"])
    assert high.gaps == ["typescript", "aws"]
    assert high.priority == "high"

    none_missing = live_service.generate_gap_analysis(["react"], ["react", "aws"])
    assert none_missing.priority == "low"
    assert none_missing.recommendations == ["All required skills are present"]


# ═══════════════════════════════════════════════════════════════════════════
# STATUS & SETTINGS
# ═══════════════════════════════════════════════════════════════════════════

def test_status_and_mock_toggle(live_service):
    live_service.set_mock_mode(True)
    status = live_service.get_status()

    assert status["mock_mode"] is True
    assert status["provider"] == "openai"
    assert status["has_credentials"] is True
    assert {"is_available", "request_count", "cache_size", "fallback_count"} <= set(status)


def test_from_settings_without_key_is_mock(resolver):
    service = AIAugmentationService.from_settings(Settings(openai_api_key=""), resolver=resolver)

    assert service.mock_mode
    assert not service.llm_service.is_available
    assert service.analyze_skill_transferability("react", "vue", "").from_fallback

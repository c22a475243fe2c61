"""
Shared fixtures: packaged registry/data and fake LLM backends.

No test talks to a real LLM: the fakes override LLMService._call_backend.
"""

import json
from typing import Dict, List

import pytest

from talentmatch.services.data_provider import JSONDataProvider
from talentmatch.services.llm_service import LLMService
from talentmatch.services.skill_registry import SkillRegistry
from talentmatch.services.skill_resolver import SkillResolver


CURRENT_YEAR = 2024

# ═══════════════════════════════════════════════════════════════════════════
# FAKE LLM BACKENDS
# ═══════════════════════════════════════════════════════════════════════════

CANNED_RESPONSES = {
    "transferable": {
        "transferability_score": 0.85,
        "learning_path": ["Learn the type system", "Port a small module", "Use it in production"],
        "estimated_months": 2,
        "reasoning": "Shared language foundations",
    },
    "learning potential": {
        "learnability": 0.75,
        "time_to_proficiency_months": 4,
        "recommendations": ["Take an online course", "Build a side project", "Pair with a senior"],
    },
    "cultural fit": {
        "fit_score": 0.8,
        "strengths": ["Mentoring attitude"],
        "concerns": [],
        "recommendations": ["Introduce the candidate to the design team early"],
    },
    "validate this experience": {
        "is_valid": True,
        "confidence": 0.9,
        "complexity_level": 4,
        "issues": [],
    },
    "analyze the following experience": {
        "context": "Enterprise frontend work",
        "project_complexity": 4,
        "leadership_indicators": ["Led a team"],
        "learning_potential": 0.8,
    },
    "skill gaps": {
        "gaps": ["typescript"],
        "recommendations": ["Study TypeScript generics"],
        "priority": "medium",
    },
}


class FakeLLMService(LLMService):
    """LLMService answering with canned JSON chosen by prompt keywords."""

    def __init__(self, responses: Dict[str, dict] = None, raw_response: str = None):
        super().__init__(
            provider="openai",
            openai_api_key="sk-test",
            rate_limit_seconds=0,
            check_availability=False,
            sleep=lambda seconds: None,
            verbose=False,
        )
        self.is_available = True
        self.responses = CANNED_RESPONSES if responses is None else responses
        self.raw_response = raw_response
        self.prompts: List[str] = []

    def _call_backend(self, messages, temperature, max_tokens):
        prompt = messages[-1]["content"]
        self.prompts.append(prompt)
        if self.raw_response is not None:
            return self.raw_response
        lowered = prompt.lower()
        for keyword, payload in self.responses.items():
            if keyword in lowered:
                return json.dumps(payload)
        return "{}"


class FailingLLMService(LLMService):
    """LLMService whose backend fails on every attempt."""

    def __init__(self):
        super().__init__(
            provider="openai",
            openai_api_key="sk-test",
            rate_limit_seconds=0,
            check_availability=False,
            sleep=lambda seconds: None,
            verbose=False,
        )
        self.is_available = True
        self.attempts = 0

    def _call_backend(self, messages, temperature, max_tokens):
        self.attempts += 1
        raise ConnectionError("backend down")


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def registry() -> SkillRegistry:
    return SkillRegistry.default()


@pytest.fixture(scope="session")
def resolver(registry) -> SkillResolver:
    return SkillResolver(registry)


@pytest.fixture
def provider() -> JSONDataProvider:
    return JSONDataProvider.from_files()


@pytest.fixture
def fake_llm() -> FakeLLMService:
    return FakeLLMService()


@pytest.fixture
def failing_llm() -> FailingLLMService:
    return FailingLLMService()

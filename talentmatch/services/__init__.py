# services package
"""Services for the matching system (tools used by agents)."""

from talentmatch.services.skill_registry import SkillRegistry
from talentmatch.services.skill_resolver import SkillResolver
from talentmatch.services.llm_service import LLMService
from talentmatch.services.ai_augmentation import AIAugmentationService
from talentmatch.services.data_provider import DataProvider, InMemoryDataProvider, JSONDataProvider

__all__ = [
    "SkillRegistry",
    "SkillResolver",
    "LLMService",
    "AIAugmentationService",
    "DataProvider",
    "InMemoryDataProvider",
    "JSONDataProvider",
]

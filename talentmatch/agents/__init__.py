# agents package
"""Agents of the matching pipeline."""

from talentmatch.agents.scoring_agent import ScoringAgent, ScoringWeights
from talentmatch.agents.report_agent import ReportAgent

__all__ = [
    "ScoringAgent",
    "ScoringWeights",
    "ReportAgent",
]

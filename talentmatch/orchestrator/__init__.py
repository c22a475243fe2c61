# orchestrator package
"""Orchestrator running the matching pipeline."""

from talentmatch.orchestrator.matching_orchestrator import (
    MatchingOrchestrator,
    match_candidate_to_job
)

__all__ = [
    "MatchingOrchestrator",
    "match_candidate_to_job",
]

"""
Data Providers
Read-only sources of jobs and candidates for the orchestrator.
"""

import json
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union

from talentmatch.models.candidate import Candidate
from talentmatch.models.job import Job
from talentmatch.services.logging_utils import print_with_prefix


DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_JOBS_JSON = DATA_DIR / "sample_jobs.json"
DEFAULT_CANDIDATES_JSON = DATA_DIR / "sample_candidates.json"


class DataProvider(Protocol):
    def find_job_by_id(self, job_id: str) -> Optional[Job]: ...

    def find_candidate_by_id(self, candidate_id: str) -> Optional[Candidate]: ...

    def list_jobs(self) -> List[Job]: ...

    def list_candidates(self) -> List[Candidate]: ...


class InMemoryDataProvider:
    """Jobs and candidates held in memory, in insertion order."""

    def __init__(
        self,
        jobs: Optional[Iterable[Job]] = None,
        candidates: Optional[Iterable[Candidate]] = None,
        verbose: bool = False
    ):
        self.verbose = verbose
        self._jobs = {job.id: job for job in (jobs or [])}
        self._candidates = {candidate.id: candidate for candidate in (candidates or [])}
        self._log(f"{len(self._jobs)} jobs, {len(self._candidates)} candidates")

    def find_job_by_id(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def find_candidate_by_id(self, candidate_id: str) -> Optional[Candidate]:
        return self._candidates.get(candidate_id)

    def list_jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def list_candidates(self) -> List[Candidate]:
        return list(self._candidates.values())

    def get_candidates_by_skill(self, skill_id: str) -> List[Candidate]:
        """Candidates listing the skill or having experience with it."""
        return [
            c for c in self._candidates.values()
            if skill_id in c.skills or any(exp.skill_id == skill_id for exp in c.experience)
        ]

    def get_candidates_by_experience_level(self, min_duration_months: int) -> List[Candidate]:
        """Candidates with at least one experience of min_duration_months or more."""
        return [
            c for c in self._candidates.values()
            if any(exp.duration_months >= min_duration_months for exp in c.experience)
        ]

    def _log(self, message: str) -> None:
        print_with_prefix("[DataProvider]", message, enabled=self.verbose)


class JSONDataProvider(InMemoryDataProvider):
    """Provider loaded from JSON files (a list of objects per file)."""

    @classmethod
    def from_files(
        cls,
        jobs_path: Union[str, Path] = DEFAULT_JOBS_JSON,
        candidates_path: Union[str, Path] = DEFAULT_CANDIDATES_JSON,
        verbose: bool = False
    ) -> "JSONDataProvider":
        jobs_raw = json.loads(Path(jobs_path).read_text(encoding="utf-8"))
        candidates_raw = json.loads(Path(candidates_path).read_text(encoding="utf-8"))

        return cls(
            jobs=[Job.model_validate(item) for item in jobs_raw],
            candidates=[Candidate.model_validate(item) for item in candidates_raw],
            verbose=verbose,
        )

"""
Test Data Providers
"""

import json

from talentmatch.models.candidate import Candidate
from talentmatch.models.job import Job
from talentmatch.services.data_provider import InMemoryDataProvider, JSONDataProvider


def test_packaged_sample_data(provider):
    assert len(provider.list_jobs()) == 5
    assert len(provider.list_candidates()) == 5

    job = provider.find_job_by_id("senior-react-developer")
    assert job.company == "TechCorp Inc."
    assert job.team_size == 25
    assert [r.skill_id for r in job.requirements][:2] == ["react", "javascript"]

    candidate = provider.find_candidate_by_id("candidate-1")
    assert candidate.name == "Sarah Johnson"
    assert candidate.experience[0].id == "exp-1-1"


def test_unknown_ids_return_none(provider):
    assert provider.find_job_by_id("nope") is None
    assert provider.find_candidate_by_id("nope") is None


def test_candidate_queries(provider):
    by_skill = {c.id for c in provider.get_candidates_by_skill("tensorflow")}
    assert by_skill == {"candidate-3", "candidate-5"}

    seasoned = {c.id for c in provider.get_candidates_by_experience_level(60)}
    assert seasoned == {"candidate-1", "candidate-5"}


def test_in_memory_provider_keeps_insertion_order():
    jobs = [Job(id=f"job-{i}", title="Dev", company="Acme") for i in range(3)]
    candidates = [Candidate(id="c-1", name="Ann", skills=["react", "react", "vue"])]

    provider = InMemoryDataProvider(jobs=jobs, candidates=candidates)

    assert [j.id for j in provider.list_jobs()] == ["job-0", "job-1", "job-2"]
    # duplicate skill ids are collapsed
    assert provider.find_candidate_by_id("c-1").skills == ["react", "vue"]


def test_json_provider_from_custom_files(tmp_path):
    jobs_path = tmp_path / "jobs.json"
    candidates_path = tmp_path / "candidates.json"
    jobs_path.write_text(json.dumps([{
        "id": "j1",
        "title": "Data Engineer",
        "company": "Acme",
        "requirements": [{"skill_id": "python", "min_duration_months": 12}],
    }]), encoding="utf-8")
    candidates_path.write_text(json.dumps([{"id": "c1", "name": "Bo", "skills": ["python"]}]), encoding="utf-8")

    provider = JSONDataProvider.from_files(jobs_path, candidates_path)

    requirement = provider.find_job_by_id("j1").requirements[0]
    assert requirement.required_level == 3
    assert requirement.is_required is True
    assert provider.find_candidate_by_id("c1").experience == []

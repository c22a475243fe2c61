"""
Test Skill Resolver
"""

import pytest


# ═══════════════════════════════════════════════════════════════════════════
# NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("raw, expected", [
    ("React", "React"),
    ("react", "React"),
    ("  ReactJS ", "React"),
    ("k8s", "Kubernetes"),
    ("Postgres", "PostgreSQL"),
    ("node", "Node.js"),
    ("Amazon Web Services", "AWS"),
])
def test_normalize_resolves_names_and_aliases(resolver, raw, expected):
    assert resolver.normalize(raw) == expected


def test_normalize_passes_unknown_names_through(resolver):
    assert resolver.normalize("COBOL") == "COBOL"
    assert resolver.normalize("") == ""


def test_fuzzy_match(resolver):
    assert resolver.find_fuzzy_match("reactjs").id == "react"
    assert resolver.find_fuzzy_match("torch").id == "pytorch"
    # Variant table hit whose target is not in the registry
    assert resolver.find_fuzzy_match("machine learning") is None
    assert resolver.find_fuzzy_match("") is None
    assert resolver.find_fuzzy_match("cobol") is None


# ═══════════════════════════════════════════════════════════════════════════
# EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════

def test_extract_skills_from_text(resolver):
    result = resolver.extract_skills_from_text("Experienced in React, Node.js, and TypeScript.")

    assert {"React", "Node.js", "TypeScript"} <= set(result.skills)
    assert result.confidence > 0
    assert len(result.skills) == len(set(result.skills))


def test_extract_skills_from_empty_text(resolver):
    result = resolver.extract_skills_from_text("")
    assert result.skills == []
    assert result.confidence == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# GRAPH QUERIES
# ═══════════════════════════════════════════════════════════════════════════

def test_are_related_is_symmetric_and_one_hop(resolver):
    assert resolver.are_related("javascript", "typescript")
    assert resolver.are_related("typescript", "javascript")
    # express -> javascript -> react is two hops
    assert not resolver.are_related("express", "react")
    assert not resolver.are_related("react", "cobol")


def test_related_skills_drop_unknown_ids(resolver):
    related = [skill.id for skill in resolver.get_related_skills("react")]
    assert related == ["javascript", "typescript"]
    assert resolver.get_related_skills("cobol") == []


def test_search_ranks_exact_match_first(resolver):
    results = resolver.search_skills("react")
    assert results[0].skill.id == "react"
    assert results[0].match_type == "exact"
    assert results[0].confidence == 1.0
    assert resolver.search_skills("   ") == []


def test_search_by_alias(resolver):
    results = resolver.search_skills("k8s")
    assert results[0].skill.id == "kubernetes"
    assert results[0].match_type == "alias"


def test_analyze_skill(resolver):
    analysis = resolver.analyze_skill("docker")
    assert analysis.difficulty_level == 3
    assert analysis.time_to_proficiency_months == 4
    assert {s.id for s in analysis.category_skills} == {"docker", "kubernetes"}
    assert resolver.analyze_skill("cobol") is None


def test_defaults_for_unknown_skill(resolver):
    assert resolver.get_skill_difficulty("cobol") == 1
    assert resolver.get_time_to_proficiency("cobol") == 3
    assert resolver.get_skill_difficulty("aws") == 4


def test_skill_statistics(resolver):
    stats = resolver.get_skill_statistics()
    assert stats.total_skills == 19
    assert stats.total_categories == 8
    assert stats.total_relationships == 21
    assert sum(stats.difficulty_distribution.values()) == 19
    assert stats.most_connected_skill == "javascript"
    assert 1 <= stats.average_difficulty <= 5

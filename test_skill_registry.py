"""
Test Skill Registry
"""

import pytest

from talentmatch.models.skill import Skill
from talentmatch.services.skill_registry import SkillRegistry


def test_default_registry_loads_packaged_csv(registry):
    assert len(registry) == 19
    assert len(registry.relationships) == 21
    assert "react" in registry
    assert "cobol" not in registry


def test_skill_columns_are_parsed(registry):
    react = registry.get("react")
    assert react.canonical_name == "React"
    assert react.category == "Frontend"
    assert react.aliases == ["ReactJS", "React.js", "React Native"]
    assert react.related_skills[:2] == ["javascript", "typescript"]
    assert react.difficulty_level == 3
    assert react.time_to_proficiency_months == 6


def test_file_order_is_kept(registry):
    ids = [skill.id for skill in registry]
    assert ids[:3] == ["react", "javascript", "typescript"]
    assert ids[-1] == "cypress"


def test_relationship_queries(registry):
    react_edges = registry.relationships_for("react")
    assert {(r.source_skill, r.target_skill) for r in react_edges} == {
        ("react", "javascript"),
        ("react", "typescript"),
        ("react", "vue"),
        ("react", "angular"),
    }

    edge = registry.relationship_between("typescript", "react")
    assert edge is not None
    assert edge.relationship_type == "related"
    assert edge.strength == pytest.approx(0.7)

    assert registry.relationship_between("react", "python") is None
    assert len(registry.relationships_by_type("alternative")) == 4


def test_duplicate_ids_are_rejected():
    skill = Skill(id="go", canonical_name="Go", category="Programming")
    with pytest.raises(ValueError):
        SkillRegistry([skill, skill])


def test_from_csv_defaults_for_empty_cells(tmp_path):
    skills_csv = tmp_path / "skills.csv"
    skills_csv.write_text(
        "skill_id,name,aliases,category,related_skills,difficulty_level,time_to_proficiency\n"
        "go,Go,,Programming,,,\n"
        "rust,Rust,\"Rust Lang, rs\",Programming,go,5,12\n",
        encoding="utf-8",
    )

    loaded = SkillRegistry.from_csv(skills_csv, relationships_path=None)

    go = loaded.get("go")
    assert go.aliases == []
    assert go.related_skills == []
    assert go.difficulty_level == 1
    assert go.time_to_proficiency_months == 3

    rust = loaded.get("rust")
    assert rust.aliases == ["Rust Lang", "rs"]
    assert rust.related_skills == ["go"]
    assert rust.difficulty_level == 5
    assert loaded.relationships == ()

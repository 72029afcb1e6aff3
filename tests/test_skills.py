"""Tests for skill reference parsing and resolution."""

from resourcepulse.engine.skills import (
    SkillInfo,
    SkillRef,
    normalize_skill_refs,
    parse_skill_refs,
    resolve_skill_ids,
)


SKILLS = [
    SkillInfo(id=1, name="Python"),
    SkillInfo(id=2, name="React"),
]


class TestParseSkillRefs:
    """Tests for tolerant parsing of stored skills values."""

    def test_tagged_entries(self):
        refs = parse_skill_refs([{"id": 1}, {"name": "React"}])

        assert refs == [SkillRef(skill_id=1), SkillRef(name="React")]

    def test_bare_ids_and_names(self):
        assert parse_skill_refs([2, " Python "]) == [SkillRef(skill_id=2), SkillRef(name="Python")]

    def test_serialized_text(self):
        """Legacy rows hold JSON text."""
        assert parse_skill_refs('[{"id": "2"}, "React"]') == [SkillRef(skill_id=2), SkillRef(name="React")]

    def test_malformed_text_is_skipped(self):
        assert parse_skill_refs("{not json") == []

    def test_empty_values(self):
        assert parse_skill_refs(None) == []
        assert parse_skill_refs("") == []
        assert parse_skill_refs([]) == []

    def test_unrecognised_entries_are_dropped(self):
        refs = parse_skill_refs([True, None, {"level": 3}, {"name": "  "}, {"id": 1}])

        assert refs == [SkillRef(skill_id=1)]

    def test_single_object(self):
        assert parse_skill_refs({"name": "Python"}) == [SkillRef(name="Python")]


class TestNormalizeSkillRefs:
    """Tests for the stored form."""

    def test_deduplicates(self):
        assert normalize_skill_refs([{"id": 1}, 1, {"name": "React"}]) == [{"id": 1}, {"name": "React"}]

    def test_nothing_usable_is_none(self):
        assert normalize_skill_refs([]) is None
        assert normalize_skill_refs("garbage[") is None


class TestResolveSkillIds:
    """Tests for resolving references against the skills table."""

    def test_names_resolve_case_insensitively(self):
        refs = [SkillRef(name="python"), SkillRef(name="REACT")]

        assert resolve_skill_ids(refs, SKILLS) == {1, 2}

    def test_unknown_references_are_dropped(self):
        refs = [SkillRef(skill_id=99), SkillRef(name="Go"), SkillRef(skill_id=1)]

        assert resolve_skill_ids(refs, SKILLS) == {1}

    def test_ref_to_dict(self):
        assert SkillRef(skill_id=5).to_dict() == {"id": 5}
        assert SkillRef(name="Go").to_dict() == {"name": "Go"}
        assert SkillRef(skill_id=5).is_resolved
        assert not SkillRef(name="Go").is_resolved

"""Tests for the skill vocabulary, aliaser and ad-hoc promotion."""

import pytest

from models.schemas.skill import Skill
from services.skill_vocabulary import (
    SkillVocabulary,
    build_vocabulary,
    default_vocabulary,
    promote_shared_terms,
)
from services.text_normalizer import normalize


def _names(vocab, text):
    return [m.skill for m in vocab.find_mentions(normalize(text), source="resume")]


class TestResolve:
    def test_alias_folding(self):
        vocab = default_vocabulary()
        assert vocab.resolve("React.js") == "React"
        assert vocab.resolve("ReactJS") == "React"
        assert vocab.resolve("react") == "React"
        assert vocab.resolve("Node.js") == "Node"
        assert vocab.resolve("k8s") == "Kubernetes"

    def test_distinct_skills_not_folded(self):
        vocab = default_vocabulary()
        assert vocab.resolve("React Native") == "React Native"
        assert vocab.resolve("C++") == "C++"
        assert vocab.resolve("C#") == "C#"
        assert vocab.resolve("C") == "C"
        assert vocab.resolve("JavaScript") == "JavaScript"
        assert vocab.resolve("Java") == "Java"
        assert vocab.resolve("Python 3") == "Python 3"
        assert vocab.resolve("Python 2") == "Python 2"

    def test_unknown_returns_none(self):
        vocab = default_vocabulary()
        assert vocab.resolve("Underwater Basket Weaving") is None
        assert vocab.resolve("") is None
        assert vocab.resolve("   ") is None

    def test_default_table_is_shared(self):
        assert default_vocabulary() is default_vocabulary()


class TestScanning:
    def test_longest_form_wins(self):
        vocab = default_vocabulary()
        assert _names(vocab, "Shipped apps in React Native") == ["React Native"]
        assert _names(vocab, "Wrote C++ and C# code") == ["C++", "C#"]
        assert _names(vocab, "Frontend in JavaScript") == ["JavaScript"]
        assert _names(vocab, "Ported scripts to Python 3") == ["Python 3"]

    def test_short_forms_are_case_sensitive(self):
        vocab = default_vocabulary()
        assert _names(vocab, "Statistics in R and SQL") == ["R", "SQL"]
        # "r" and "go" as ordinary words are not skills
        assert _names(vocab, "ready to go for it") == []
        assert "Go" in _names(vocab, "Services written in Go")

    def test_common_word_skills_need_exact_case(self):
        vocab = default_vocabulary()
        assert _names(vocab, "Express interest in Node.js") == ["Express", "Node"]
        assert _names(vocab, "an express delivery node") == []

    def test_case_folded_lookup_for_wanted_skill(self):
        vocab = default_vocabulary()
        doc = normalize("Shipped swift code last year. Ready to go live.")
        assert [m.surface for m in vocab.find_case_folded(doc, "Swift", "resume")] == ["swift"]
        # Two-letter forms keep their exact case
        assert vocab.find_case_folded(doc, "Go", "resume") == []

    def test_mentions_carry_offsets(self):
        vocab = default_vocabulary()
        raw = "Summary\nBuilt dashboards with ReactJS and Docker"
        doc = normalize(raw)
        mentions = vocab.find_mentions(doc, source="resume")
        assert [m.surface for m in mentions] == ["ReactJS", "Docker"]
        for m in mentions:
            assert raw[m.offset:m.offset + len(m.surface)] == m.surface
            assert m.source == "resume"


class TestConstruction:
    def test_colliding_alias_raises(self):
        with pytest.raises(ValueError):
            SkillVocabulary([
                Skill(name="React", aliases=frozenset({"rn"})),
                Skill(name="React Native", aliases=frozenset({"rn"})),
            ])

    def test_duplicate_skill_raises(self):
        with pytest.raises(ValueError):
            SkillVocabulary([Skill(name="Docker"), Skill(name="Docker")])

    def test_implications_never_cross_distinct_pair(self):
        vocab = build_vocabulary(
            skills={"React": (), "React Native": ()},
            implications={"React Native": ("React",)},
        )
        assert vocab.implied_by("React Native") == ()

    def test_extend_returns_new_table(self, small_vocabulary):
        extended = small_vocabulary.extend([Skill(name="Apache Beam", ad_hoc=True)])
        assert "Apache Beam" in extended
        assert "Apache Beam" not in small_vocabulary
        assert len(extended) == len(small_vocabulary) + 1

    def test_extend_ignores_known_forms(self, small_vocabulary):
        assert small_vocabulary.extend([Skill(name="ReactJS")]) is small_vocabulary


class TestAdHocPromotion:
    def test_shared_technical_term_promoted(self, small_vocabulary):
        posting = normalize("Requirements:\n- Experience with Apache Beam pipelines")
        resume = normalize("Wrote streaming jobs on Apache Beam for 3 teams")
        promoted = promote_shared_terms(small_vocabulary, posting, resume)
        assert [s.name for s in promoted] == ["Apache Beam"]
        assert promoted[0].ad_hoc

    def test_term_missing_from_resume_not_promoted(self, small_vocabulary):
        posting = normalize("Experience with Apache Beam")
        resume = normalize("Wrote streaming jobs in Python")
        assert promote_shared_terms(small_vocabulary, posting, resume) == []

    def test_generic_title_case_not_promoted(self, small_vocabulary):
        posting = normalize("Senior Engineer\nAbout Us")
        resume = normalize("Senior Engineer at About Us Inc")
        assert promote_shared_terms(small_vocabulary, posting, resume) == []

    def test_known_skill_not_promoted(self, small_vocabulary):
        posting = normalize("Google Docker Hub")
        resume = normalize("Published images to Google Docker Hub")
        assert promote_shared_terms(small_vocabulary, posting, resume) == []

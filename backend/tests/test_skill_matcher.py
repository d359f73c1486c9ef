"""Tests for the skill matcher: presence, confidence, weakness and evidence."""

from models.schemas.skill import RequirementLevel
from services.section_classifier import classify
from services.skill_matcher import (
    has_quantified_context,
    is_list_like,
    make_snippet,
    match_skills,
)
from services.text_normalizer import normalize


def _match(vocab, posting_text, resume_text, strict=False):
    posting = normalize(posting_text)
    resume = normalize(resume_text)
    posting_mentions = vocab.find_mentions(posting, source="posting")
    resume_mentions = vocab.find_mentions(resume, source="resume")
    levels = classify(posting, posting_mentions)
    matched, missing = match_skills(
        posting_mentions, resume_mentions, resume, levels, vocab, strict=strict
    )
    return {r.skill: r for r in matched}, {r.skill: r for r in missing}


class TestConfidence:
    def test_exact_quantified_is_high_and_strong(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- Docker",
            "Experience\n- Reduced build time by 40% using Docker containers",
        )
        record = matched["Docker"]
        assert record.confidence == "high"
        assert not record.is_weak
        assert record.weakness_reason is None
        assert record.evidence == "Reduced build time by 40% using Docker containers"

    def test_alias_is_medium(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- React.js",
            "Built dashboards in ReactJS serving 5 clients",
        )
        assert matched["React"].confidence == "medium"
        assert not matched["React"].is_weak

    def test_misspelled_variant_is_medium(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- Kubernetes",
            "Deployed services on Kubernets clusters for 3 teams",
        )
        assert matched["Kubernetes"].confidence == "medium"
        assert "Kubernets" in matched["Kubernetes"].evidence

    def test_implied_is_low_and_weak(self, small_vocabulary):
        matched, missing = _match(
            small_vocabulary,
            "Requirements:\n- Python",
            "Built REST endpoints with Django for 2M users",
        )
        record = matched["Python"]
        assert record.confidence == "low"
        assert record.is_weak
        assert record.weakness_reason == "only implied by Django; name Python explicitly"
        assert "Python" not in missing


class TestWeakness:
    def test_brief_mention_is_weak(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary, "Requirements:\n- AWS is required", "Worked with AWS"
        )
        record = matched["AWS"]
        assert record.is_weak
        assert record.weakness_reason
        assert record.evidence == "Worked with AWS"

    def test_skills_section_only(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- Docker",
            "Skills\nPython, Docker, AWS",
        )
        assert matched["Docker"].weakness_reason == (
            "listed in skills section only; add a bullet showing how you used it"
        )

    def test_narrative_without_outcome(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- Docker",
            "Maintained the Docker images for our internal platform",
        )
        assert matched["Docker"].weakness_reason == "mentioned once without measurable outcome"

    def test_repeated_without_outcome(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- Docker",
            "Maintained Docker images for the internal platform team.\n"
            "Wrote Docker files for local development work.",
        )
        assert matched["Docker"].weakness_reason == "mentioned 2 times without measurable outcome"

    def test_one_quantified_narrative_mention_is_enough(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- Docker",
            "Skills\nDocker, AWS, SQL\n\nExperience\n"
            "- Cut image size by 60% after moving builds to Docker",
        )
        assert not matched["Docker"].is_weak

    def test_calendar_year_is_not_a_metric(self, small_vocabulary):
        matched, _ = _match(
            small_vocabulary,
            "Requirements:\n- AWS",
            "In 2019 I moved our team services onto AWS",
        )
        assert matched["AWS"].is_weak
        assert matched["AWS"].confidence == "medium"


class TestPresence:
    def test_distinct_skill_is_missing(self, small_vocabulary):
        matched, missing = _match(
            small_vocabulary, "React", "Shipped mobile apps in React Native"
        )
        assert "React" not in matched
        assert missing["React"].level is RequirementLevel.MUST_HAVE

    def test_missing_keeps_posting_level(self, small_vocabulary):
        _, missing = _match(
            small_vocabulary,
            "Requirements:\n- SQL\n\nNice to have:\n- GraphQL",
            "Wrote Python scripts",
        )
        assert missing["SQL"].level is RequirementLevel.MUST_HAVE
        assert missing["GraphQL"].level is RequirementLevel.OPTIONAL

    def test_first_appearance_order(self, small_vocabulary):
        posting = "Requirements:\n- SQL\n- Docker\n- AWS"
        matched, missing = _match(small_vocabulary, posting, "Skills\nAWS, Docker, SQL")
        assert list(matched) == ["SQL", "Docker", "AWS"]
        assert [r.position for r in matched.values()] == sorted(
            r.position for r in matched.values()
        )
        assert missing == {}

    def test_strict_mode_rejects_alias(self, small_vocabulary):
        posting = "Requirements:\n- React.js"
        resume = "Built UIs in ReactJS for 5 clients"
        matched, missing = _match(small_vocabulary, posting, resume, strict=True)
        assert "React" in missing
        matched, missing = _match(small_vocabulary, posting, resume, strict=False)
        assert "React" in matched

    def test_strict_mode_rejects_implication(self, small_vocabulary):
        _, missing = _match(
            small_vocabulary, "Requirements:\n- Python", "Built APIs in Django", strict=True
        )
        assert "Python" in missing


class TestEvidenceHelpers:
    def test_snippet_short_text_is_whole(self):
        assert make_snippet("Worked with AWS", 12, 15) == "Worked with AWS"

    def test_snippet_long_text_keeps_mention(self):
        text = (
            "Led the migration of " + "legacy " * 15 + "billing to Docker across "
            + "many " * 10 + "regions"
        )
        start = text.index("Docker")
        snippet = make_snippet(text, start, start + len("Docker"), 100)
        assert len(snippet) <= 100
        assert "Docker" in snippet
        assert snippet in text
        assert not snippet.startswith("egacy")

    def test_quantified_context(self):
        assert has_quantified_context("Served 10k users daily")
        assert has_quantified_context("Improved query latency")
        assert has_quantified_context("Saved $2M per year")
        assert not has_quantified_context("Graduated in 2019")
        assert not has_quantified_context("Worked with AWS")

    def test_list_like(self):
        assert is_list_like("Python, Docker, AWS, PostgreSQL")
        assert is_list_like("Go | Rust | C++")
        assert not is_list_like("Built APIs, wrote tests")
        assert not is_list_like("Designed and built a billing service, a ledger, and a reporting pipeline")

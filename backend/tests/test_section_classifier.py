"""Tests for the posting section classifier."""

from models.schemas.skill import RequirementLevel
from services.section_classifier import classify, detect_header, inline_level
from services.text_normalizer import normalize

MUST = RequirementLevel.MUST_HAVE
OPT = RequirementLevel.OPTIONAL


def _levels(vocab, posting_text, **kwargs):
    posting = normalize(posting_text)
    mentions = vocab.find_mentions(posting, source="posting")
    return classify(posting, mentions, **kwargs)


class TestHeaders:
    def test_detects_zone_headers(self):
        doc = normalize("Requirements:\nNice to Have\nPreferred Qualifications\nResponsibilities")
        kinds = [detect_header(s)[0] for s in doc.segments]
        assert kinds == ["must", "optional", "optional", "neutral"]

    def test_inline_header(self):
        seg = normalize("Must have: Python, SQL").segments[0]
        assert detect_header(seg) == ("must", True)

    def test_plain_sentence_is_not_header(self):
        seg = normalize("You will build data pipelines").segments[0]
        assert detect_header(seg) is None


class TestZones:
    def test_nice_to_have_and_requirements_zones(self, small_vocabulary):
        posting = (
            "Backend Engineer\n\n"
            "Nice to Have\n"
            "GraphQL\n\n"
            "Requirements\n"
            "SQL\n"
        )
        levels = _levels(small_vocabulary, posting)
        assert levels["GraphQL"] is OPT
        assert levels["SQL"] is MUST

    def test_zone_runs_to_next_header(self, small_vocabulary):
        posting = (
            "Requirements:\n- Python\n- Docker\n"
            "Bonus points:\n- GraphQL\n- AWS\n"
        )
        levels = _levels(small_vocabulary, posting)
        assert levels == {"Python": MUST, "Docker": MUST, "GraphQL": OPT, "AWS": OPT}

    def test_neutral_zone_uses_fallback(self, small_vocabulary):
        posting = (
            "About the role\n\n"
            "Responsibilities\n"
            "- Maintain Docker images\n"
            "- Write GraphQL resolvers\n"
            "- Tune Docker builds\n"
        )
        levels = _levels(small_vocabulary, posting)
        assert levels["Docker"] is MUST  # mentioned twice
        assert levels["GraphQL"] is OPT  # mentioned once


class TestInlineKeywords:
    def test_modal_keywords(self):
        assert inline_level("Python is required", 0) == "must"
        assert inline_level("Docker experience preferred", 0) == "optional"
        assert inline_level("Writes tests", 0) is None

    def test_clause_decides_before_sentence(self):
        text = "Python is required, GraphQL is a plus"
        assert inline_level(text, text.index("Python")) == "must"
        assert inline_level(text, text.index("GraphQL")) == "optional"

    def test_both_keywords_in_one_clause_is_must(self):
        assert inline_level("AWS required, Azure preferred but GCP is a must plus", 40) == "must"

    def test_inline_tags_outside_zones(self, small_vocabulary):
        posting = (
            "About us\n\n"
            "We build tools for analysts.\n"
            "Strong SQL is required. GraphQL is a bonus."
        )
        levels = _levels(small_vocabulary, posting)
        assert levels["SQL"] is MUST
        assert levels["GraphQL"] is OPT


class TestTitleAndOpening:
    def test_title_line_is_must_have(self, small_vocabulary):
        posting = "Python Developer\n\nResponsibilities\n- Build things"
        assert _levels(small_vocabulary, posting)["Python"] is MUST

    def test_opening_paragraph_is_must_have(self, small_vocabulary):
        posting = (
            "Platform Engineer\n"
            "Join us to run Kubernetes at scale.\n\n"
            "Perks\n"
            "- GraphQL guild"
        )
        levels = _levels(small_vocabulary, posting)
        assert levels["Kubernetes"] is MUST
        assert levels["GraphQL"] is OPT

    def test_intro_after_standalone_title(self, small_vocabulary):
        posting = (
            "Data Engineer\n\n"
            "You will own our Docker platform.\n\n"
            "Perks\n"
            "- GraphQL guild"
        )
        levels = _levels(small_vocabulary, posting)
        assert levels["Docker"] is MUST
        assert levels["GraphQL"] is OPT

    def test_later_paragraph_is_not_opening(self, small_vocabulary):
        posting = "Data Engineer\n\nWe move fast.\n\nOur stack runs on Docker."
        assert _levels(small_vocabulary, posting)["Docker"] is OPT

    def test_unheaded_paragraph_is_opening(self, small_vocabulary):
        posting = "We are hiring a backend developer.\nYou will work with Python, Docker and AWS."
        levels = _levels(small_vocabulary, posting)
        assert levels == {"Python": MUST, "Docker": MUST, "AWS": MUST}

    def test_one_line_posting_is_its_title(self, small_vocabulary):
        posting = "Looking for someone who knows Docker and has touched GraphQL"
        levels = _levels(small_vocabulary, posting)
        # A one-line posting is its own title line
        assert levels["Docker"] is MUST


class TestConflicts:
    def test_must_have_wins_by_default(self, small_vocabulary):
        posting = (
            "Requirements:\n- AWS\n\n"
            "Nice to have:\n- AWS certification\n"
        )
        assert _levels(small_vocabulary, posting)["AWS"] is MUST

    def test_optional_policy(self, small_vocabulary):
        posting = (
            "Requirements:\n- AWS\n\n"
            "Nice to have:\n- AWS certification\n"
        )
        levels = _levels(small_vocabulary, posting, conflict_policy="optional")
        assert levels["AWS"] is OPT

    def test_empty_posting(self, small_vocabulary):
        assert _levels(small_vocabulary, "") == {}

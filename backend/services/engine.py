"""Deterministic résumé/posting matching engine.

Pipeline (each stage is a pure function over immutable inputs):
    normalize -> vocabulary scan -> posting classification
    -> experience comparison -> skill matching -> aggregation
"""

import logging
from datetime import date

from config import settings
from models.responses import AnalysisResult
from services.aggregator import aggregate
from services.experience_extractor import compare_experience
from services.section_classifier import classify
from services.skill_matcher import match_skills
from services.skill_vocabulary import SkillVocabulary, default_vocabulary, promote_shared_terms
from services.text_normalizer import normalize

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """A required text field is missing or is not a string."""


def require_text(value, field: str) -> str:
    if value is None:
        raise InvalidInputError(f"{field} is required")
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} must be a string, got {type(value).__name__}")
    return value


def analyze(
    resume_text: str,
    job_description: str,
    company_name: str | None = None,
    *,
    vocabulary: SkillVocabulary | None = None,
    strict: bool | None = None,
    today: date | None = None,
) -> AnalysisResult:
    """Compare one résumé against one job posting.

    Args:
        resume_text: Plain résumé text. May be empty.
        job_description: Plain posting text. May be empty or arbitrarily short.
        company_name: Accepted for interface parity; matching ignores it.
        vocabulary: Skill table to use (defaults to the shared read-only table).
        strict: Verbatim-only matching. Defaults to ``settings.strict_matching``.
        today: Reference date for "Present" in résumé date ranges.

    Raises:
        InvalidInputError: If either text is missing or not a string.
    """
    resume_text = require_text(resume_text, "resumeText")
    job_description = require_text(job_description, "jobDescription")
    if company_name is not None and not isinstance(company_name, str):
        raise InvalidInputError("companyName must be a string")

    vocab = default_vocabulary() if vocabulary is None else vocabulary
    strict = settings.strict_matching if strict is None else strict

    resume = normalize(resume_text)
    posting = normalize(job_description)
    logger.debug("Normalized: resume=%d segments, posting=%d segments",
                 len(resume.segments), len(posting.segments))

    if not strict:
        vocab = vocab.extend(promote_shared_terms(vocab, posting, resume))

    posting_mentions = vocab.find_mentions(posting, source="posting")
    resume_mentions = vocab.find_mentions(resume, source="resume")
    logger.debug("Mentions: posting=%d resume=%d", len(posting_mentions), len(resume_mentions))

    levels = classify(posting, posting_mentions, settings.requirement_conflict_policy)
    experience = compare_experience(posting, resume, today=today)

    matched, missing = match_skills(
        posting_mentions,
        resume_mentions,
        resume,
        levels,
        vocab,
        strict=strict,
        fuzzy_threshold=settings.fuzzy_threshold,
        evidence_max_chars=settings.evidence_max_chars,
    )
    result = aggregate(matched, missing, experience)
    logger.debug(
        "Analysis complete: matched=%d weak=%d mustHave=%d optional=%d",
        result.summary.total_matched,
        result.summary.total_weak,
        result.summary.total_missing_must_have,
        result.summary.total_missing_optional,
    )
    return result

"""Analysis service: pick the match generator and fall back to the rules engine.

Generators:
    rules   deterministic engine (services.engine), the default
    gemini  LLM result validated through aggregator.coerce_result; any failure
            (no key, API error, unparsable JSON) falls back to the rules engine
"""

import logging

from config import settings
from models.responses import AnalysisResult, SuggestionsResponse
from services import engine, gemini_client, prompt_builder, suggestions
from services.aggregator import coerce_result
from services.experience_extractor import compare_experience
from services.skill_vocabulary import SkillVocabulary
from services.text_normalizer import normalize

logger = logging.getLogger(__name__)


async def _generate_with_gemini(
    resume_text: str,
    job_description: str,
    company_name: str | None,
    strict: bool,
) -> AnalysisResult | None:
    prompt = prompt_builder.build_matching_prompt(
        resume_text, job_description, company_name=company_name, strict=strict
    )
    data = await gemini_client.generate_json(prompt)
    if data is None:
        return None
    # Experience gaps come from the deterministic extractor in every mode
    experience = compare_experience(normalize(job_description), normalize(resume_text))
    return coerce_result(
        data, experience=experience, evidence_max_chars=settings.evidence_max_chars
    )


async def analyze(
    resume_text: str,
    job_description: str,
    company_name: str | None = None,
    vocabulary: SkillVocabulary | None = None,
) -> AnalysisResult:
    """Run the configured match generator for one résumé/posting pair."""
    strict = settings.strict_matching

    if settings.match_generator == "gemini":
        # Validate before spending an API call
        engine.require_text(resume_text, "resumeText")
        engine.require_text(job_description, "jobDescription")
        result = await _generate_with_gemini(resume_text, job_description, company_name, strict)
        if result is not None:
            return result
        logger.warning("Gemini match generator unavailable, using rules engine")

    return engine.analyze(
        resume_text,
        job_description,
        company_name,
        vocabulary=vocabulary,
        strict=strict,
    )


async def analyze_with_suggestions(
    resume_text: str,
    job_description: str,
    company_name: str | None = None,
    vocabulary: SkillVocabulary | None = None,
) -> SuggestionsResponse:
    result = await analyze(resume_text, job_description, company_name, vocabulary)
    return SuggestionsResponse(
        result=result,
        suggestions=suggestions.build_suggestions(result, company_name),
    )

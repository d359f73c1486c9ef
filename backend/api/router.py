import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_vocabulary
from config import settings
from models.requests import AnalyzeRequest
from models.responses import AnalysisResult, SuggestionsResponse
from services import pdf_parser, resume_analyzer
from services.engine import InvalidInputError
from services.skill_vocabulary import SkillVocabulary

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


def _validate_lengths(resume_text: str, job_description: str) -> None:
    """Transport limits; the engine itself accepts any length."""
    if len(job_description.strip()) < settings.min_job_description_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Job description too short (min {settings.min_job_description_chars} chars)",
        )
    if len(job_description) > settings.max_job_description_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Job description too long (max {settings.max_job_description_chars} chars)",
        )
    if len(resume_text) > settings.max_resume_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Resume too long (max {settings.max_resume_chars} chars)",
        )


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "generator": settings.match_generator,
        "strict_matching": settings.strict_matching,
    }


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
@limiter.limit(settings.rate_limit)
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    vocabulary: SkillVocabulary = Depends(get_vocabulary),
):
    _validate_lengths(body.resume_text, body.job_description)
    try:
        return await resume_analyzer.analyze(
            body.resume_text, body.job_description, body.company_name, vocabulary
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post(
    "/analyze/upload",
    response_model=AnalysisResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
@limiter.limit(settings.rate_limit)
async def analyze_upload(
    request: Request,
    resume_file: UploadFile = File(...),
    job_description: str = Form(...),
    company_name: str | None = Form(None),
    vocabulary: SkillVocabulary = Depends(get_vocabulary),
):
    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    if not pdf_parser.is_pdf(resume_file.filename, content):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")

    # Extract text from PDF
    try:
        resume_text = pdf_parser.extract_text(content)
    except Exception as e:
        logger.error("PDF extraction failed for %s: %s", resume_file.filename, e)
        raise HTTPException(status_code=400, detail="Could not parse PDF file") from e

    if not resume_text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from PDF")

    _validate_lengths(resume_text, job_description)
    try:
        return await resume_analyzer.analyze(
            resume_text, job_description, company_name, vocabulary
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post(
    "/analyze/suggestions",
    response_model=SuggestionsResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
@limiter.limit(settings.rate_limit)
async def analyze_suggestions(
    request: Request,
    body: AnalyzeRequest,
    vocabulary: SkillVocabulary = Depends(get_vocabulary),
):
    _validate_lengths(body.resume_text, body.job_description)
    try:
        return await resume_analyzer.analyze_with_suggestions(
            body.resume_text, body.job_description, body.company_name, vocabulary
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

import os
from typing import Literal

from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    # Matching policy
    strict_matching: bool = False  # verbatim-only matching, no alias/ad-hoc/implied hits
    requirement_conflict_policy: Literal["must_have", "optional"] = "must_have"
    evidence_max_chars: int = 100
    fuzzy_threshold: int = 90  # rapidfuzz ratio for misspelled skill variants

    # Candidate generator: deterministic rules engine or Gemini with rules fallback
    match_generator: Literal["rules", "gemini"] = "rules"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Transport limits (enforced by the API, not the engine)
    max_upload_size_mb: int = 5
    min_job_description_chars: int = 50
    max_job_description_chars: int = 10000
    max_resume_chars: int = 50000
    rate_limit: str = "20/minute"

    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8080",
    ]
    debug: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})

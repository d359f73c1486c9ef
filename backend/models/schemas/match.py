"""Per-skill outcomes produced by the Skill Matcher."""

from typing import Literal

from pydantic import BaseModel

from models.schemas.skill import RequirementLevel

Confidence = Literal["high", "medium", "low"]


class MatchRecord(BaseModel):
    """A posting skill that is present in the résumé."""
    skill: str
    confidence: Confidence = "medium"
    evidence: str = ""  # verbatim résumé substring
    is_weak: bool = False
    weakness_reason: str | None = None
    position: int = 0  # first-appearance offset in the posting, for ordering


class MissingRecord(BaseModel):
    """A posting skill with no support in the résumé."""
    skill: str
    level: RequirementLevel = RequirementLevel.OPTIONAL
    position: int = 0

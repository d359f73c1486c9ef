"""Skill reference entries and the mentions found in a document."""

from enum import Enum

from pydantic import BaseModel


class RequirementLevel(str, Enum):
    MUST_HAVE = "mustHave"
    OPTIONAL = "optional"


class Skill(BaseModel):
    """A canonical capability and the surface forms that name it."""
    model_config = {"frozen": True}

    name: str
    aliases: frozenset[str] = frozenset()
    case_sensitive: bool = False  # canonical name doubles as a common English word
    ad_hoc: bool = False  # promoted from a term shared verbatim by both documents


class SkillMention(BaseModel):
    model_config = {"frozen": True}

    skill: str  # canonical name
    surface: str  # verbatim text as written in the document
    source: str  # "resume" | "posting"
    offset: int  # absolute char offset into the raw document
    segment_index: int
    segment_text: str

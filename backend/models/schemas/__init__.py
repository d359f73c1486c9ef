"""Internal pydantic contracts passed between the matching stages."""

from models.schemas.document import Document, Segment
from models.schemas.experience import ExperienceFinding
from models.schemas.match import Confidence, MatchRecord, MissingRecord
from models.schemas.skill import RequirementLevel, Skill, SkillMention

__all__ = [
    "Confidence",
    "Document",
    "ExperienceFinding",
    "MatchRecord",
    "MissingRecord",
    "RequirementLevel",
    "Segment",
    "Skill",
    "SkillMention",
]

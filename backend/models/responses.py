from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchedSkill(_CamelModel):
    skill: str
    confidence: str = "medium"  # high | medium | low
    evidence: str = ""
    is_weak: bool = False
    weakness_reason: str | None = None


class MissingSkills(_CamelModel):
    must_have: list[str] = []
    optional: list[str] = []


class AnalysisSummary(_CamelModel):
    total_matched: int = 0
    total_weak: int = 0
    total_missing_must_have: int = 0
    total_missing_optional: int = 0


class AnalysisResult(_CamelModel):
    """Public result contract: one category per canonical skill."""
    matched_skills: list[MatchedSkill] = []
    weak_skills: list[MatchedSkill] = []
    missing_skills: MissingSkills = MissingSkills()
    summary: AnalysisSummary = AnalysisSummary()

    def to_payload(self) -> dict:
        """JSON-ready dict in the wire format (camelCase, null reasons dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SuggestionsResponse(_CamelModel):
    result: AnalysisResult = AnalysisResult()
    suggestions: list[str] = Field(default_factory=list)

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    resume_text: str = Field(..., description="Plain text resume content")
    job_description: str = Field(..., description="Job posting text")
    company_name: str | None = Field(None, max_length=200, description="Optional target company")

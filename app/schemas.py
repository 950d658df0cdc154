from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None


class VerifyVideoLinkResponse(CamelModel):
    linked: bool
    video_id: Optional[str] = None


class VerifyVideoLinkFailure(BaseModel):
    linked: bool = False
    error: str


class SaveAnalysisRequest(CamelModel):
    youtube_id: str = Field(..., min_length=1)
    title: str
    author: Optional[str] = None
    duration: int = 0
    thumbnail_url: Optional[str] = None
    transcript: Any
    topics: Any
    summary: Any = None
    suggested_questions: Any = None
    model_used: Optional[str] = None
    language: Optional[str] = None
    available_languages: Any = None


class SaveAnalysisResponse(CamelModel):
    success: bool
    video_id: Optional[str] = None
    error: Optional[str] = None
    retried_count: int

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PROMPT = "Please summarize the following video:"
VIDEO_CONTENT_TYPE = "video/mp4"


class SummarizeRequest(BaseModel):
  model_config = ConfigDict(frozen=True, populate_by_name=True)

  video_url: Optional[str] = Field(None, alias="videoURL")
  prompt: Optional[str] = None


class SummarizeResponse(BaseModel):
  summary: str


class ErrorResponse(BaseModel):
  error: str
  details: Optional[str] = None


class HealthResponse(BaseModel):
  status: Literal["healthy"] = "healthy"
  timestamp: str
  version: str

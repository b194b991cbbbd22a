from __future__ import annotations

import logging
from dataclasses import dataclass, field

from google import genai
from google.genai import types

from ..errors import UpstreamFailureError
from .gateway import MediaRef

logger = logging.getLogger(__name__)


class GeminiServiceError(UpstreamFailureError):
  """Raised when Gemini requests fail."""

  def __init__(self, message: str, original_error: Exception | None = None, is_quota_error: bool = False):
    super().__init__(message)
    self.original_error = original_error
    self.is_quota_error = is_quota_error


def _is_quota_error(error: Exception) -> bool:
  """Check if error is a quota/rate limit error."""
  error_text = f"{error} {error!r}".lower()
  return (
    "429" in error_text or
    "quota" in error_text or
    "resource_exhausted" in error_text or
    "rate limit" in error_text
  )


@dataclass
class GeminiService:
  api_key: str
  model: str = "gemini-2.0-flash"
  client: genai.Client = field(init=False)

  def __post_init__(self) -> None:
    self.client = genai.Client(api_key=self.api_key)

  async def generate(self, prompt_text: str, media: MediaRef) -> str:
    contents = types.Content(parts=[
      types.Part(text=prompt_text),
      types.Part(
        file_data=types.FileData(
          file_uri=media.url,
          mime_type=media.content_type,
        )
      ),
    ])

    try:
      logger.info(f"Calling Gemini for video summary with model: {self.model}")
      response = await self.client.aio.models.generate_content(
        model=self.model,
        contents=contents,
      )
    except Exception as error:
      is_quota = _is_quota_error(error)
      if is_quota:
        logger.warning(f"Gemini quota exhausted, not retrying: {error}")
      raise GeminiServiceError(str(error) or type(error).__name__, original_error=error, is_quota_error=is_quota) from error

    text = (response.text or "").strip()
    if not text:
      raise GeminiServiceError("Gemini returned an empty summary")

    return text

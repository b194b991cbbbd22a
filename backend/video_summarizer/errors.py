from __future__ import annotations


class SummarizeError(Exception):
  """Base class for the ways a summarize request can fail."""

  kind = "summarize_error"
  status_code = 500
  title = "Failed to process video"

  def __init__(self, detail: str):
    super().__init__(detail)
    self.detail = detail


class InvalidInputError(SummarizeError):
  kind = "invalid_input"
  status_code = 400
  title = "Invalid input"


class ProcessingTimeoutError(SummarizeError):
  kind = "timeout"
  status_code = 408
  title = "Processing timeout"
  user_message = (
    "Video processing took too long. Please try with a shorter video or try again later."
  )


class UpstreamFailureError(SummarizeError):
  """Raised when the model service fails; carries its message verbatim."""

  kind = "upstream_failure"
  status_code = 500
  title = "Failed to process video"


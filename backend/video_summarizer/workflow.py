from __future__ import annotations

import logging
from typing import TypedDict

from langgraph.graph import StateGraph, START, END

from .errors import InvalidInputError, SummarizeError, UpstreamFailureError
from .models import DEFAULT_PROMPT, VIDEO_CONTENT_TYPE, SummarizeRequest, SummarizeResponse
from .services.gateway import MediaRef, ModelGateway
from .services.timeout import race_with_timeout

logger = logging.getLogger(__name__)


class WorkflowState(TypedDict, total=False):
  video_url: str | None
  prompt: str | None
  summary: str
  error: SummarizeError | None


class SummarizeWorkflow:
  """Validate a summarize request, then run the model call under a deadline.

  Received -> validate -> (invalid: END) -> generate -> END. Every run ends with
  either a summary or exactly one SummarizeError.
  """

  def __init__(self, gateway: ModelGateway, timeout_ms: int | None = None):
    self.gateway = gateway
    self.timeout_ms = timeout_ms
    self._graph = self._build_graph()

  def _build_graph(self):
    builder = StateGraph(WorkflowState)

    builder.add_node("validate", _validate_node)
    builder.add_node("generate", self._make_generate_node())

    builder.add_edge(START, "validate")
    builder.add_conditional_edges(
      "validate",
      _route_after_validation,
      {"generate": "generate", "end": END},
    )
    builder.add_edge("generate", END)

    return builder.compile()

  def _make_generate_node(self):
    gateway = self.gateway
    timeout_ms = self.timeout_ms

    async def node(state: WorkflowState) -> dict:
      video_url = state["video_url"]
      prompt = state["prompt"]
      media = MediaRef(url=video_url, content_type=VIDEO_CONTENT_TYPE)
      try:
        summary = await race_with_timeout(lambda: gateway.generate(prompt, media), timeout_ms)
      except SummarizeError as error:
        return {"error": error}
      except Exception as error:
        upstream = UpstreamFailureError(str(error) or type(error).__name__)
        upstream.__cause__ = error
        return {"error": upstream}
      return {"summary": summary}

    return node

  async def run(self, request: SummarizeRequest) -> SummarizeResponse:
    """Raises SummarizeError for invalid input, timeout or model failure."""
    initial_state: WorkflowState = {
      "video_url": request.video_url,
      "prompt": request.prompt,
      "error": None,
    }
    final_state = await self._graph.ainvoke(initial_state)

    error = final_state.get("error")
    if error is not None:
      if isinstance(error, InvalidInputError):
        logger.warning(f"Rejected request: {error.detail}")
      else:
        logger.error(f"Error processing video: {error.detail}", exc_info=error)
      raise error

    logger.info("Video processed successfully")
    return SummarizeResponse(summary=final_state["summary"])


def normalize_prompt(prompt: str | None) -> str:
  return prompt or DEFAULT_PROMPT


def _validate_node(state: WorkflowState) -> dict:
  video_url = state.get("video_url")
  if not video_url:
    return {"error": InvalidInputError("Video URL is required")}

  prompt = normalize_prompt(state.get("prompt"))
  logger.info(f"Processing video: {video_url}")
  logger.info(f"Using prompt: {prompt}")
  return {"prompt": prompt}


def _route_after_validation(state: WorkflowState) -> str:
  return "end" if state.get("error") is not None else "generate"

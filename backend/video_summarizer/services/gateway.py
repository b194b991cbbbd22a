from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class MediaRef:
  url: str
  content_type: str


class ModelGateway(Protocol):
  """A single call to a generative model: prompt and media in, text out.

  Implementations raise UpstreamFailureError for any transport, auth or model
  error and never retry.
  """

  async def generate(self, prompt_text: str, media: MediaRef) -> str: ...

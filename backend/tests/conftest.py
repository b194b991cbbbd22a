import asyncio
import os

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("GEMINI_API_KEY", "test-key-1234567890")

from video_summarizer.config import Settings  # noqa: E402
from video_summarizer.main import create_app  # noqa: E402


class FakeGateway:
  """Stands in for Gemini: records calls and returns, fails or hangs on demand."""

  def __init__(self, summary="A short clip.", error=None, hang_until=None):
    self.summary = summary
    self.error = error
    self.hang_until = hang_until
    self.calls = []

  async def generate(self, prompt_text, media):
    self.calls.append((prompt_text, media))
    if self.hang_until is not None:
      await self.hang_until.wait()
    if self.error is not None:
      raise self.error
    return self.summary


async def settle():
  """Give detached tasks a few loop turns to finish."""
  for _ in range(5):
    await asyncio.sleep(0)


@pytest.fixture
def settings(tmp_path):
  return Settings(
    GEMINI_API_KEY="test-key-1234567890",
    PROCESSING_TIMEOUT_MS=100,
    PUBLIC_DIR=str(tmp_path),
  )


@pytest.fixture
def gateway():
  return FakeGateway()


@pytest.fixture
def app(settings, gateway):
  return create_app(settings, gateway=gateway)


@pytest.fixture
async def client(app):
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client

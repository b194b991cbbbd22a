"""Command-line entry point: summarize one video and print the result.

Unlike the HTTP server, the CLI waits for the model without a deadline and is
not rate limited.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import configure_logging, load_settings
from .errors import SummarizeError
from .models import SummarizeRequest
from .services.gateway import ModelGateway
from .services.gemini import GeminiService
from .workflow import SummarizeWorkflow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="video-summarizer",
    description="Summarize a video with Gemini.",
  )
  parser.add_argument("video_url", nargs="?", help="Public URL of the video to summarize")
  parser.add_argument("prompt", nargs="?", help="Instruction sent along with the video")
  return parser


async def summarize_once(gateway: ModelGateway, video_url: str, prompt: str | None = None) -> str:
  workflow = SummarizeWorkflow(gateway, timeout_ms=None)
  response = await workflow.run(SummarizeRequest(video_url=video_url, prompt=prompt))
  return response.summary


def main(argv: list[str] | None = None, gateway: ModelGateway | None = None) -> int:
  configure_logging()
  settings = load_settings()
  logging.getLogger().setLevel(settings.log_level.upper())

  args = build_parser().parse_args(argv)
  if not args.video_url:
    print("Please provide a video URL as a command line argument.", file=sys.stderr)
    return 1

  if gateway is None:
    gateway = GeminiService(api_key=settings.gemini_api_key, model=settings.gemini_model)

  try:
    summary = asyncio.run(summarize_once(gateway, args.video_url, args.prompt))
  except SummarizeError as error:
    print(f"Error processing video: {error.detail}", file=sys.stderr)
    # TODO: decide whether generation failures should exit non-zero; scripts
    # wrapping this command currently cannot tell failure from success.
    return 0

  print("\nSummary:")
  print(summary)
  return 0


def run() -> None:
  sys.exit(main())


if __name__ == "__main__":
  run()

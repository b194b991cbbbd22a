from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from ..errors import ProcessingTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Abandoned operations stay referenced until they settle.
_abandoned: set[asyncio.Future] = set()


def _discard_outcome(task: asyncio.Future) -> None:
  _abandoned.discard(task)
  if task.cancelled():
    return
  error = task.exception()
  if error is not None:
    logger.debug(f"Abandoned operation failed after timeout: {error}")
  else:
    logger.debug("Abandoned operation finished after timeout, result discarded")


async def race_with_timeout(operation: Callable[[], Awaitable[T]], limit_ms: int | None) -> T:
  """Run ``operation`` and fail with ProcessingTimeoutError if it outlives ``limit_ms``.

  The losing operation is not cancelled. It keeps running as a detached task and
  whatever it eventually returns or raises is discarded. ``limit_ms=None``
  waits without a deadline.
  """
  if limit_ms is None:
    return await operation()

  task = asyncio.ensure_future(operation())
  try:
    done, _ = await asyncio.wait({task}, timeout=limit_ms / 1000)
  except asyncio.CancelledError:
    # The caller went away before either side finished.
    task.cancel()
    raise

  if task in done:
    return task.result()

  _abandoned.add(task)
  task.add_done_callback(_discard_outcome)
  raise ProcessingTimeoutError(f"Processing timeout after {limit_ms}ms")
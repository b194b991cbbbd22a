import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import Settings, configure_logging, load_settings, mask_api_key
from .errors import InvalidInputError, ProcessingTimeoutError, SummarizeError
from .models import HealthResponse, SummarizeRequest, SummarizeResponse
from .services.gateway import ModelGateway
from .services.gemini import GeminiService
from .workflow import SummarizeWorkflow

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

SECURITY_HEADERS = {
  "X-Content-Type-Options": "nosniff",
  "X-Frame-Options": "DENY",
  "X-XSS-Protection": "1; mode=block",
  "Referrer-Policy": "strict-origin-when-cross-origin",
}


def build_limiter() -> Limiter:
  """One in-memory fixed-window limiter per app, keyed by client address."""
  return Limiter(
    key_func=get_remote_address,
    strategy="fixed-window",
    storage_uri="memory://",
    headers_enabled=True,
  )


def rate_limit_for(settings: Settings) -> str:
  window_seconds = max(settings.rate_limit_window_ms // 1000, 1)
  return f"{settings.rate_limit_max} per {window_seconds} second"


def _with_rate_limit_headers(request: Request, response: Response) -> Response:
  # Error responses bypass the decorator, so the counters are added here.
  current_limit = getattr(request.state, "view_rate_limit", None)
  if current_limit is None:
    return response
  return request.app.state.limiter._inject_headers(response, current_limit)


def create_app(settings: Settings, gateway: ModelGateway | None = None) -> FastAPI:
  """Build the HTTP front around one workflow and one rate limiter."""
  if gateway is None:
    gateway = GeminiService(api_key=settings.gemini_api_key, model=settings.gemini_model)

  limiter = build_limiter()
  workflow = SummarizeWorkflow(gateway, timeout_ms=settings.processing_timeout_ms)
  window_minutes = max(round(settings.rate_limit_window_ms / 60_000), 1)

  app = FastAPI(title="Video Summarizer", version=APP_VERSION)
  app.state.settings = settings
  app.state.limiter = limiter
  app.state.workflow = workflow

  app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
  )

  @app.middleware("http")
  async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
      response.headers[name] = value
    return response

  api_router = APIRouter(prefix="/api")

  @api_router.post("/summarize", response_model=SummarizeResponse)
  @limiter.limit(rate_limit_for(settings))
  async def summarize(request: Request, response: Response, payload: SummarizeRequest) -> SummarizeResponse:
    return await workflow.run(payload)

  app.include_router(api_router)

  @app.get("/")
  async def get_index():
    index_path = settings.public_dir / "index.html"
    if not index_path.is_file():
      return JSONResponse(status_code=404, content={"error": "Not found"})
    return FileResponse(index_path)

  @app.get("/health", response_model=HealthResponse)
  async def health() -> HealthResponse:
    return HealthResponse(
      timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
      version=APP_VERSION,
    )

  @app.exception_handler(SummarizeError)
  async def summarize_error_handler(request: Request, exc: SummarizeError):
    if isinstance(exc, ProcessingTimeoutError):
      content = {"error": exc.title, "details": exc.user_message}
    elif isinstance(exc, InvalidInputError):
      content = {"error": exc.detail}
    else:
      content = {"error": exc.title, "details": exc.detail}
    return _with_rate_limit_headers(request, JSONResponse(status_code=exc.status_code, content=content))

  @app.exception_handler(RateLimitExceeded)
  async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}")
    response = JSONResponse(
      status_code=429,
      content={
        "error": RATE_LIMIT_MESSAGE,
        "details": f"Rate limit exceeded. Please wait {window_minutes} minutes before trying again.",
      },
    )
    return _with_rate_limit_headers(request, response)

  @app.exception_handler(RequestValidationError)
  async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    return JSONResponse(
      status_code=400,
      content={"error": "Invalid request body", "details": first.get("msg", str(exc))},
    )

  return app


def serve() -> None:
  configure_logging()
  settings = load_settings()
  logging.getLogger().setLevel(settings.log_level.upper())

  logger.info(f"API Key configured: {mask_api_key(settings.gemini_api_key)}")
  app = create_app(settings)

  logger.info(f"Video Summarizer Web App running on port {settings.port}")
  logger.info(f"API endpoint: http://localhost:{settings.port}/api/summarize")
  logger.info(f"Health check: http://localhost:{settings.port}/health")
  uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
  serve()

# ABOUTME: FastAPI application exposing Notion pages as Markdown.
# ABOUTME: Handles auth headers, content negotiation and error-to-status mapping.

import logging
import time
from typing import Any, Callable, Mapping

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .concurrency import RateLimiterRegistry
from .config import Config
from .errors import AuthError, Notion2MdError, ValidationError
from .markdown import apply_frontmatter, document_to_markdown
from .notion import NotionClient, fetch_document, list_database_pages
from .properties import properties_to_json

logger = logging.getLogger(__name__)

MARKDOWN_MEDIA_TYPE = "text/markdown"

ClientFactory = Callable[[str], NotionClient]


class PageResponse(BaseModel):
    id: str
    properties: dict[str, Any]
    content: str


class DatabasePagesResponse(BaseModel):
    total: int
    offset: int
    limit: int
    pages: list[str]


def token_from_headers(headers: Mapping[str, str]) -> str:
    """Extract the Notion token from ``Authorization: Bearer`` or ``Auth``."""
    scheme, _, credentials = headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    fallback = headers.get("auth", "").strip()
    if fallback:
        return fallback

    logger.warning("Missing Notion token in request headers")
    raise AuthError("Missing Notion token")


def wants_markdown(headers: Mapping[str, str]) -> bool:
    """Decide between Markdown and JSON from Content-Type, then Accept."""
    if headers.get("content-type", "").startswith(MARKDOWN_MEDIA_TYPE):
        return True

    for item in headers.get("accept", "").split(","):
        item = item.strip()
        if item.startswith(MARKDOWN_MEDIA_TYPE) or item.startswith("text/*"):
            return True
        if item.startswith("application/json") or item.startswith("application/*") or item == "*/*":
            return False

    return False


def validate_id(value: str, kind: str) -> str:
    if not value or "/" in value or ".." in value:
        logger.warning(f"Invalid {kind} id: {value}")
        raise ValidationError(f"Invalid {kind} id")
    return value


def create_app(config: Config | None = None, client_factory: ClientFactory | None = None) -> FastAPI:
    """Build the HTTP application.

    Args:
        config: Service configuration; defaults apply when omitted.
        client_factory: Builds a Notion client from a request's token.
            Defaults to a rate-limited SDK client per token.
    """
    config = config or Config()

    if client_factory is None:
        limiters = RateLimiterRegistry(config.calls_per_second, max_tokens=config.max_cached_tokens)

        def client_factory(token: str) -> NotionClient:
            return NotionClient(
                token,
                rate_limiter=limiters.for_token(token),
                max_retries=config.max_retries,
                timeout_seconds=config.timeout_seconds,
            )

    app = FastAPI(title="notion2md-server")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.monotonic()
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.info(f"handled {request.method} {path} -> 500 in {elapsed_ms}ms")
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"handled {request.method} {path} -> {response.status_code} in {elapsed_ms}ms")
        return response

    @app.exception_handler(Notion2MdError)
    async def handle_service_error(request: Request, exc: Notion2MdError):
        if exc.status_code >= 500:
            logger.error(f"Failed to handle {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError):
        logger.warning(f"Malformed request {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"detail": "Malformed request parameters"})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unexpected error handling {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    @app.get("/page/{page_id}")
    def get_page(page_id: str, request: Request, frontmatter: bool = False):
        validate_id(page_id, "page")
        client = client_factory(token_from_headers(request.headers))

        document = fetch_document(client, page_id)
        markdown = document_to_markdown(document)

        if wants_markdown(request.headers):
            content = apply_frontmatter(document.properties, markdown) if frontmatter else markdown
            return Response(content=content, media_type=MARKDOWN_MEDIA_TYPE)

        return PageResponse(
            id=document.id,
            properties=properties_to_json(document.properties),
            content=markdown,
        )

    @app.get("/database/{database_id}", response_model=DatabasePagesResponse)
    def get_database(database_id: str, request: Request, offset: int = 0, limit: int | None = None):
        validate_id(database_id, "database")
        client = client_factory(token_from_headers(request.headers))

        listing = list_database_pages(
            client,
            database_id,
            offset=offset,
            limit=config.default_limit if limit is None else limit,
            max_limit=config.max_limit,
        )
        return DatabasePagesResponse(
            total=listing.total,
            offset=listing.offset,
            limit=listing.limit,
            pages=listing.page_ids,
        )

    return app

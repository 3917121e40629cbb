# ABOUTME: CLI entry point for notion2md-server.
# ABOUTME: Provides 'serve', 'render' and 'list' commands.

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn

from .concurrency import RateLimiter
from .config import Config, ConfigError, load_config
from .errors import Notion2MdError
from .markdown import apply_frontmatter, document_to_markdown
from .notion import NotionClient, fetch_document, list_database_pages
from .server import create_app

TOKEN_ENV = "NOTION_API_TOKEN"


def setup_logging(level: str = "info", log_path: Path | None = None) -> None:
    """Configure logging for the server and CLI commands.

    Uvicorn is started without its own logging config, so its error log
    shares these handlers. Per-request lines come from the server's
    middleware; uvicorn's access log is quieted.

    Args:
        level: Root log level name.
        log_path: Optional path for log file. If provided, enables rotating file logging.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def _client_from_env(config: Config) -> NotionClient:
    token = os.environ.get(TOKEN_ENV)
    if not token:
        raise ConfigError(f"Environment variable '{TOKEN_ENV}' not set")
    return NotionClient(
        token,
        rate_limiter=RateLimiter(config.calls_per_second),
        max_retries=config.max_retries,
        timeout_seconds=config.timeout_seconds,
    )


def cmd_serve(args: argparse.Namespace, config: Config) -> None:
    """Run the HTTP server."""
    logger = logging.getLogger(__name__)

    host = args.host or config.host
    port = args.port or config.port
    logger.info(f"Listening on {host}:{port}")

    uvicorn.run(create_app(config), host=host, port=port, log_config=None)


def cmd_render(args: argparse.Namespace, config: Config) -> None:
    """Print a single page as Markdown."""
    client = _client_from_env(config)
    document = fetch_document(client, args.page_id)
    markdown = document_to_markdown(document)
    if args.frontmatter:
        markdown = apply_frontmatter(document.properties, markdown)
    sys.stdout.write(markdown)


def cmd_list(args: argparse.Namespace, config: Config) -> None:
    """Print the page ids of a database, one per line."""
    client = _client_from_env(config)
    listing = list_database_pages(
        client,
        args.database_id,
        offset=args.offset,
        limit=args.limit or config.default_limit,
        max_limit=config.max_limit,
    )
    for page_id in listing.page_ids:
        print(page_id)
    logging.getLogger(__name__).info(
        f"Listed {len(listing.page_ids)} of {listing.total} pages (offset {listing.offset})"
    )


COMMANDS = {
    "serve": cmd_serve,
    "render": cmd_render,
    "list": cmd_list,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion2md-server",
        description="Serve Notion pages as Markdown",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config file (default: built-in defaults)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", help="Bind address (overrides config)")
    serve_parser.add_argument("--port", type=int, help="Bind port (overrides config)")

    render_parser = subparsers.add_parser(
        "render",
        help=f"Print a page as Markdown (token from ${TOKEN_ENV})",
    )
    render_parser.add_argument("page_id", help="Notion page id")
    render_parser.add_argument(
        "--frontmatter", "-f",
        action="store_true",
        help="Prepend page properties as frontmatter",
    )

    list_parser = subparsers.add_parser(
        "list",
        help=f"List page ids in a database (token from ${TOKEN_ENV})",
    )
    list_parser.add_argument("database_id", help="Notion database id")
    list_parser.add_argument("--offset", type=int, default=0, help="Rows to skip")
    list_parser.add_argument("--limit", type=int, default=None, help="Maximum ids to print")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else Config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level, config.log_path)
    logger = logging.getLogger(__name__)

    try:
        COMMANDS[args.command](args, config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except Notion2MdError as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

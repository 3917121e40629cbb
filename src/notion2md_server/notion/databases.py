# ABOUTME: Database listing logic for the Notion API.
# ABOUTME: Queries every row of a database and returns a pagination window of page ids.

import logging

from ..errors import ValidationError
from ..models import PageListing
from .client import NotionClient

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def list_database_pages(
    client: NotionClient,
    database_id: str,
    offset: int = 0,
    limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> PageListing:
    """List the page ids of a database within an offset/limit window.

    ``limit`` above ``max_limit`` is clamped, as is an ``offset`` past the
    end of the database (yielding an empty window).

    Args:
        client: The Notion API client.
        database_id: The ID of the database to list.
        offset: Number of rows to skip.
        limit: Maximum number of ids to return.
        max_limit: Upper bound applied to ``limit``.

    Returns:
        PageListing with the total row count and the requested window.

    Raises:
        ValidationError: If offset is negative or limit is below 1.
    """
    if offset < 0:
        raise ValidationError(f"offset must not be negative, got {offset}")
    if limit < 1:
        raise ValidationError(f"limit must be at least 1, got {limit}")
    limit = min(limit, max_limit)

    logger.debug(f"Querying database {database_id}")
    rows = client.query_database(database_id)
    total = len(rows)
    offset = min(offset, total)

    logger.debug(f"Database {database_id} has {total} rows")

    return PageListing(
        total=total,
        offset=offset,
        limit=limit,
        page_ids=[row["id"] for row in rows[offset:offset + limit]],
    )

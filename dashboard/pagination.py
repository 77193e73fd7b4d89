"""Paginated list fetching shared by the management screens"""

import logging
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Type, TypeVar

from admin_client import AuthenticatedHttpClient
from .models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


def unwrap_page(body: Any) -> Dict[str, Any]:
    """Accept a bare page or one wrapped in a data envelope"""
    if not isinstance(body, dict):
        return {}
    if "content" not in body and isinstance(body.get("data"), dict):
        return body["data"]
    return body


async def fetch_page(
    client: AuthenticatedHttpClient,
    path: str,
    item_model: Type[T],
    page_number: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
    query: Optional[Mapping[str, Any]] = None,
) -> Page[T]:
    """Fetch one page of a list endpoint

    Args:
        client: Authenticated client
        path: List endpoint, e.g. /api/users/get-all
        item_model: Type each entry of ``content`` is validated as
        page_number: Zero-based page index
        page_size: Entries per page
        query: Extra query parameters (filters, search)

    Returns:
        The validated page
    """
    params = dict(query or {})
    params.update({"pageNumber": page_number, "pageSize": page_size})
    body = await client.get(path, query=params)
    return Page[item_model].model_validate(unwrap_page(body))


async def iter_pages(
    client: AuthenticatedHttpClient,
    path: str,
    item_model: Type[T],
    page_size: int = DEFAULT_PAGE_SIZE,
    query: Optional[Mapping[str, Any]] = None,
    start_page: int = 0,
) -> AsyncIterator[T]:
    """Yield every entry of a list endpoint, page by page

    Stops after the page flagged lastPage, an empty page, or totalPages pages.
    """
    page_number = start_page
    while True:
        page = await fetch_page(client, path, item_model, page_number, page_size, query)
        logger.debug(f"{path}: page {page_number} returned {len(page.content)} entries")
        for item in page.content:
            yield item

        if page.last_page or not page.content:
            break
        if page.total_pages and page_number + 1 >= page.total_pages:
            break
        page_number += 1

"""Offset pagination for Beeswax list endpoints."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

PAGE_SIZE = 50


async def paginate(
    fetch_page: Callable[[dict[str, Any]], Awaitable[list[dict[str, Any]]]],
    body: dict[str, Any],
    page_size: int = PAGE_SIZE,
    sort_by: str | None = None,
) -> list[dict[str, Any]]:
    """Fetch every page of a query using rows/offset.

    The API reports no total count, so paging stops at the first page shorter
    than page_size. A result set that is an exact multiple of page_size costs
    one extra, empty request.

    Args:
        fetch_page: Coroutine function taking a query body and returning one page.
        body: Filter applied to every page.
        page_size: Rows per page.
        sort_by: Field giving a stable order across pages (the id field).

    Returns:
        All records concatenated across pages.
    """
    all_results: list[dict[str, Any]] = []
    offset = 0

    while True:
        page_body = {**body, "rows": page_size, "offset": offset}
        if sort_by:
            page_body["sort_by"] = sort_by
        batch = await fetch_page(page_body)
        all_results.extend(batch)

        if len(batch) < page_size:
            break
        offset += page_size

    return all_results

"""
utils/pagination.py
-------------------
Normalizes caller-supplied paging parameters.
"""

from typing import Optional

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def clamp_page(limit: Optional[int], offset: Optional[int] = 0) -> tuple[int, int]:
    """
    Bring `limit` into [1, MAX_PAGE_SIZE] and `offset` to >= 0.

    A missing or non-positive limit becomes DEFAULT_PAGE_SIZE.

    Returns:
        (limit, offset)
    """
    if not limit or limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    limit = min(limit, MAX_PAGE_SIZE)
    offset = max(offset or 0, 0)
    return limit, offset

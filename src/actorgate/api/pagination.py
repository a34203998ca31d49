"""
Cursor Pagination for the ActorGate API Client

Lazily walks list endpoints that accept an exclusive start id, one page
per fetch.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar


T = TypeVar('T')


@dataclass
class PageResult(Generic[T]):
    """One page of a cursor-paginated list"""
    items: List[T]
    limit: Optional[int] = None
    exclusive_start_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_more(self) -> bool:
        """An empty page is the only end-of-list signal the API gives"""
        return len(self.items) > 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PageResult':
        """Create from API response dict"""
        known = {'items', 'limit', 'exclusiveStartId'}
        return cls(
            items=list(data.get('items') or []),
            limit=data.get('limit'),
            exclusive_start_id=data.get('exclusiveStartId'),
            extra={k: v for k, v in data.items() if k not in known}
        )


def _item_id(item: Any) -> Any:
    if isinstance(item, dict):
        return item['id']
    return getattr(item, 'id')


class PaginationIterator(Generic[T]):
    """
    Iterates pages of a list endpoint with an exclusive start id.

    Args:
        max_page_limit: Ceiling for the size of a single page
        get_page: Callable taking ``exclusive_start_id`` and ``limit`` keyword
            arguments and returning a PageResult
        limit: Overall number of items to return, falsy for no limit
        exclusive_start_id: Id of the item after which to start

    Each iteration starts again from ``exclusive_start_id``; one traversal is
    forward-only and must not be shared between consumers.
    """

    def __init__(
        self,
        max_page_limit: int,
        get_page: Callable[..., PageResult[T]],
        limit: Optional[int] = None,
        exclusive_start_id: Optional[str] = None
    ):
        if max_page_limit < 1:
            raise ValueError(f"max_page_limit must be at least 1, got {max_page_limit}")
        self.max_page_limit = max_page_limit
        self.get_page = get_page
        self.limit = limit
        self.exclusive_start_id = exclusive_start_id
        self.logger = logging.getLogger(__name__)

    def __iter__(self) -> Iterator[PageResult[T]]:
        next_page_exclusive_start_id = None
        iterate_item_count = 0

        while True:
            if self.limit:
                page_limit = min(self.max_page_limit, self.limit - iterate_item_count)
            else:
                page_limit = self.max_page_limit

            page = self.get_page(
                exclusive_start_id=next_page_exclusive_start_id or self.exclusive_start_id,
                limit=page_limit
            )

            # There are no more pages to iterate
            if not page.items:
                return

            yield page
            iterate_item_count += len(page.items)

            if self.limit and iterate_item_count >= self.limit:
                self.logger.debug(f"Pagination limit of {self.limit} items reached")
                return

            next_page_exclusive_start_id = _item_id(page.items[-1])

    def iterate_items(self) -> Iterator[T]:
        """Flatten pages into items"""
        for page in self:
            yield from page.items

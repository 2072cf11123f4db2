from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple
from backoffice.core import get_logger
from .notifications import Notifier

logger = get_logger(__name__)

PAGE_SIZE_OPTIONS = (5, 10, 25)

@dataclass(frozen=True)
class PaginationState:
    page: int = 0
    take: int = 10

    @property
    def skip(self) -> int:
        return self.page * self.take

@dataclass(frozen=True)
class Column:
    field: str
    header: str
    # Derives the cell value from the whole row, e.g. a nested account name
    value: Optional[Callable[[Dict[str, Any]], Any]] = None

    def cell(self, row: Dict[str, Any]) -> Any:
        if self.value is not None:
            return self.value(row)
        return row.get(self.field)

FetchPage = Callable[[PaginationState], Awaitable[Dict[str, Any]]]

class PaginatedTable:
    """
    Server-paginated table state.

    The fetch function returns a {"data": [...], "total": n} page for a
    PaginationState. Every load is keyed by the pagination state and refresh
    counter it was issued for; a response that arrives after either has
    changed is dropped instead of overwriting newer rows.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        fetch: FetchPage,
        notifier: Notifier,
        pagination: Optional[PaginationState] = None,
        refresh: int = 0,
    ):
        self.columns = list(columns)
        self.fetch = fetch
        self.notifier = notifier
        self.pagination = pagination or PaginationState()
        self.refresh = refresh
        self.rows: List[Dict[str, Any]] = []
        self.total = 0
        self.loading = False

    @property
    def request_key(self) -> Tuple[PaginationState, int]:
        return (self.pagination, self.refresh)

    @property
    def page_count(self) -> int:
        return max(1, -(-self.total // self.pagination.take))

    def set_page(self, page: int) -> None:
        self.pagination = replace(self.pagination, page=max(page, 0))

    def set_page_size(self, take: int) -> None:
        if take < 1:
            raise ValueError("page size must be positive")
        self.pagination = replace(self.pagination, take=take)

    def trigger_refresh(self) -> None:
        self.refresh += 1

    async def load(self) -> bool:
        """Fetch the current page; True when the rows were replaced"""
        key = self.request_key
        self.loading = True
        try:
            result = await self.fetch(key[0])
        except Exception as e:
            if key == self.request_key:
                self.loading = False
            self.notifier.notify(f"Failed to fetch: {e}")
            return False

        if key != self.request_key:
            logger.debug(f"Discarding stale page for {key[0]}")
            return False

        self.rows = result["data"]
        self.total = result["total"]
        self.loading = False
        return True

"""Page selection."""

from typing import Optional

from .logger import Logger
from .queryables.base import Queryable
from .schema import SieveOptions

__all__ = ("Pager",)

logger = Logger(__name__)


class Pager:
    """Apply `skip`/`take` for a one-based page number.

    A page size of zero or less disables paging; a positive
    `max_page_size` caps the number of records taken.
    """

    def __init__(self, options: SieveOptions) -> None:
        self.options = options

    def paginate(self, source: Queryable, page: Optional[int] = None, page_size: Optional[int] = None) -> Queryable:
        page = page if page is not None and page > 0 else 1
        page_size = page_size if page_size is not None else self.options.default_page_size
        if page_size <= 0:
            return source

        max_page_size = self.options.max_page_size if self.options.max_page_size > 0 else page_size
        take = min(page_size, max_page_size)
        logger.debug("Paging %s: page=%d size=%d take=%d", source.element_type.__name__, page, page_size, take)
        return source.skip((page - 1) * page_size).take(take)

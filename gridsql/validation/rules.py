import logging
import typing as t

from ..registry import GridEntry

log = logging.getLogger("gridsql.validation")


def cap_page_size(grid: str, page_size: t.Optional[int], entry: GridEntry) -> t.Optional[int]:
    """
    Clamp a requested page size to the grid's maximum. No size stays no size,
    and non-positive sizes are passed through for the paging builder to reject.
    """
    if page_size is None or page_size <= 0:
        return page_size
    if page_size > entry.max_page_size:
        log.info("Page size %s for %s capped to %s", page_size, grid, entry.max_page_size)
        return entry.max_page_size
    return page_size

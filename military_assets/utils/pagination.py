import math
from dataclasses import dataclass

from fastapi import Query


@dataclass(frozen=True)
class PageParams:
    limit: int
    offset: int


def page_params(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> PageParams:
    return PageParams(limit=limit, offset=offset)


def paginated(items: list, total: int, page: PageParams) -> dict:
    return {
        "items": items,
        "pagination": {
            "limit": page.limit,
            "offset": page.offset,
            "total": total,
            "pages": math.ceil(total / page.limit) if total else 0,
        },
    }

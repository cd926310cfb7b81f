import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Query


@dataclass
class Page:
    items: list[Any]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def paginate(query: Query, page: int, limit: int) -> Page:
    """Slice an ordered query. ``total`` counts the unsliced result."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, page=page, limit=limit, total=total)


LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """ILIKE pattern matching ``text`` as a literal substring (use with ``escape=LIKE_ESCAPE``)."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"

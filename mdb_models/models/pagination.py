"""
Paged queries.

``paged_find`` runs a count and a windowed find concurrently and combines
them into a page of model instances plus pagination metadata:

    {
        "data": [...],
        "pages": {"current", "prev", "hasPrev", "next", "hasNext", "total"},
        "items": {"limit", "begin", "end", "total"},
    }
"""

import asyncio
import math
import time
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from ..observability import get_logger, model_scope, record_operation
from ..utils import clean_mongo_docs
from .options import FindOptions
from .results import normalize_result

if TYPE_CHECKING:
    from .base import MongoModel

logger = get_logger(__name__)


class PageInfo(BaseModel):
    """Page counters for a paged result."""

    model_config = ConfigDict(populate_by_name=True)

    current: int
    prev: int = 0
    has_prev: bool = Field(False, alias="hasPrev")
    next: int = 0
    has_next: bool = Field(False, alias="hasNext")
    total: int = 0


class ItemInfo(BaseModel):
    """Item range covered by a paged result."""

    limit: int
    begin: int
    end: int
    total: int = 0


class PagedResult(BaseModel):
    """One page of model instances with its metadata."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: list[Any] = Field(default_factory=list)
    pages: PageInfo
    items: ItemInfo

    def to_json(self) -> dict[str, Any]:
        """JSON-serializable dictionary using the ``hasPrev``/``hasNext`` keys."""
        return {
            "data": clean_mongo_docs(self.data),
            "pages": self.pages.model_dump(by_alias=True),
            "items": self.items.model_dump(),
        }


def build_pagination(total_matching: int, limit: int, page: int) -> tuple[PageInfo, ItemInfo]:
    """
    Compute page and item metadata.

    ``has_prev`` is ``prev != 0``: false on page 1, but true for page 0 or
    negative pages, where ``prev`` goes negative.
    """
    total_pages = math.ceil(total_matching / limit)
    next_page = page + 1
    prev_page = page - 1

    pages = PageInfo(
        current=page,
        prev=prev_page,
        has_prev=prev_page != 0,
        next=next_page,
        has_next=next_page <= total_pages,
        total=total_pages,
    )
    items = ItemInfo(
        limit=limit,
        begin=min((page * limit) - limit + 1, total_matching),
        end=min(page * limit, total_matching),
        total=total_matching,
    )
    return pages, items


async def paged_find(
    model_cls: "type[MongoModel]",
    filter: dict[str, Any] | None,
    fields: Any,
    sort: Any,
    limit: int,
    page: int,
) -> PagedResult:
    """
    Fetch one page of ``model_cls`` documents.

    Args:
        model_cls: Model class whose collection is queried
        filter: Query filter
        fields: Projection mapping or field string ("name -secret")
        sort: Sort mapping or sort string ("-created_at name")
        limit: Page size
        page: 1-based page number

    Returns:
        PagedResult

    Raises:
        Whatever the count or find raised; no partial page is returned.
    """
    start_time = time.time()
    options = FindOptions(
        projection=model_cls.fields_adapter(fields),
        sort=model_cls.sort_adapter(sort),
        limit=limit,
        skip=(page - 1) * limit,
    )

    with model_scope(model_cls):
        try:
            total_matching, data = await asyncio.gather(
                model_cls.count(filter),
                model_cls.find(filter, options),
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(
                "models.paged_find", duration_ms, error=e, collection=model_cls.collection_name
            )
            logger.exception("Paged find failed", extra={"page": page, "limit": limit})
            raise

        _, data = normalize_result(model_cls, data)
        pages, items = build_pagination(total_matching, limit, page)

        duration_ms = (time.time() - start_time) * 1000
        record_operation("models.paged_find", duration_ms, collection=model_cls.collection_name)
        logger.debug(
            f"Paged find: page {page}/{pages.total}, {len(data)} of {total_matching} documents",
            extra={"duration_ms": round(duration_ms, 2)},
        )
    return PagedResult(data=data, pages=pages, items=items)

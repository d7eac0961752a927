from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class RequestModel(BaseModel):
    """Request bodies accept camelCase keys as well as snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class PaginationMeta(BaseModel):
    limit: int
    offset: int
    total: int
    pages: int


class Page(BaseModel, Generic[T]):
    items: List[T]
    pagination: PaginationMeta

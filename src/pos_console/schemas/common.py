import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Message(BaseModel):
    message: str


class PageOut(BaseModel, Generic[T]):
    """One page of a list screen plus the exact total count."""

    items: List[T]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def build(cls, items: List[T], total: int, page: int, per_page: int) -> "PageOut[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            pages=math.ceil(total / per_page) if per_page else 0,
        )

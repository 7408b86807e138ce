import math

from pydantic import BaseModel, ConfigDict, Field


class PageMeta(BaseModel):
    """Page-number pagination metadata returned alongside list payloads."""

    model_config = ConfigDict(extra="forbid")

    total: int
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_pages: int

    @classmethod
    def build(cls, *, total: int, page: int, page_size: int) -> "PageMeta":
        return cls(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total

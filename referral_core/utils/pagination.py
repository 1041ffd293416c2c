"""Pagination helpers shared by listing services."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from referral_core.config.settings import settings
from referral_core.utils.exceptions import ValidationError


T = TypeVar("T")


@dataclass(frozen=True)
class PageParams:
    """Normalized page request."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """One page of results plus totals."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total > 0 else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": self.items,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }


def normalize_pagination(page: Any = None, limit: Any = None) -> PageParams:
    """
    Clamp page and limit coming from a transport layer.

    Non-numeric values fall back to defaults; page is at least 1 and
    limit is between 1 and the configured maximum.

    Args:
        page: Requested page (1-indexed)
        limit: Requested page size

    Returns:
        PageParams with safe values
    """
    try:
        page_num = int(page) if page is not None else 1
    except (TypeError, ValueError):
        page_num = 1
    try:
        limit_num = int(limit) if limit is not None else settings.pagination_default_limit
    except (TypeError, ValueError):
        limit_num = settings.pagination_default_limit

    page_num = max(page_num, 1)
    limit_num = min(max(limit_num, 1), settings.pagination_max_limit)
    return PageParams(page=page_num, limit=limit_num)


def check_choice(value: str | None, enum_cls, field_name: str) -> str | None:
    """
    Validate an optional enum filter.

    Raises:
        ValidationError: Value is not a member of enum_cls
    """
    if not value:
        return None
    try:
        return enum_cls(value).value
    except ValueError as e:
        raise ValidationError(f"Unknown {field_name}", value=value) from e


def check_date_range(date_from: datetime | None, date_to: datetime | None) -> None:
    """Reject a date range that ends before it starts."""
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")

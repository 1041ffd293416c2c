"""
Commission record listings for users and operators.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from referral_core.models.enums import CommissionStatus, EventType
from referral_core.repositories.commission_repository import (
    CommissionFilters,
    CommissionRepository,
)
from referral_core.services.base_service import BaseService
from referral_core.utils.pagination import (
    Page,
    check_choice,
    check_date_range,
    normalize_pagination,
)


@dataclass(frozen=True)
class CommissionListFilters:
    """Listing filters as received from a transport layer."""

    inviter_id: int | None = None
    invitee_id: int | None = None
    event_type: str | None = None
    status: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    page: Any = None
    limit: Any = None


class CommissionQueryManager(BaseService):
    """Paginated commission record queries."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize query manager."""
        super().__init__(session, audit_sink)
        self.commission_repo = CommissionRepository(session)

    async def get_commission_records(
        self, filters: CommissionListFilters | None = None
    ) -> Page:
        """
        Commission records, newest first.

        Args:
            filters: inviter, invitee, event type, status, date range
                and page/limit

        Returns:
            Page of ReferralCommission

        Raises:
            ValidationError: Unknown status or event type, or date_from
                after date_to
        """
        filters = filters or CommissionListFilters()
        check_date_range(filters.date_from, filters.date_to)

        query = CommissionFilters(
            inviter_id=filters.inviter_id,
            invitee_id=filters.invitee_id,
            event_type=check_choice(filters.event_type, EventType, "event type"),
            status=check_choice(filters.status, CommissionStatus, "status"),
            date_from=filters.date_from,
            date_to=filters.date_to,
        )
        params = normalize_pagination(filters.page, filters.limit)

        items = await self.commission_repo.list_filtered(
            query, params.limit, params.offset
        )
        total = await self.commission_repo.count_filtered(query)
        return Page(items=items, total=total, page=params.page, limit=params.limit)

    async def get_user_commission_records(
        self, user_id: int, filters: CommissionListFilters | None = None
    ) -> Page:
        """An inviter's own commission records."""
        filters = filters or CommissionListFilters()
        return await self.get_commission_records(CommissionListFilters(
            inviter_id=user_id,
            event_type=filters.event_type,
            status=filters.status,
            date_from=filters.date_from,
            date_to=filters.date_to,
            page=filters.page,
            limit=filters.limit,
        ))

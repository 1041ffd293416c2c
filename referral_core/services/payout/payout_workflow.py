"""
Payout request workflow.

Users withdraw commission balance through requests that an operator
approves, rejects or marks paid. Filing a request reserves its amount,
so open requests can never add up to more than was withdrawable.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from referral_core.config.constants import NOTES_MAX_LENGTH, ZERO
from referral_core.models.enums import PayoutStatus
from referral_core.models.payout import PayoutRequest
from referral_core.repositories.payout_repository import (
    PayoutFilters,
    PayoutRequestRepository,
    PayoutSettingRepository,
)
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.audit import AuditAction, AuditEvent
from referral_core.services.base_service import BaseService
from referral_core.services.payout.payout_settings import PayoutDestination
from referral_core.utils.datetime_utils import utc_now
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import (
    InsufficientBalance,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from referral_core.utils.money import has_more_than_cents, quantize_money, to_decimal
from referral_core.utils.pagination import (
    Page,
    check_choice,
    check_date_range,
    normalize_pagination,
)


PAYOUT_TRANSITIONS: dict[PayoutStatus, frozenset[PayoutStatus]] = {
    PayoutStatus.PENDING: frozenset({PayoutStatus.APPROVED, PayoutStatus.REJECTED}),
    PayoutStatus.APPROVED: frozenset({PayoutStatus.PAID}),
    PayoutStatus.REJECTED: frozenset(),
    PayoutStatus.PAID: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    """Check a payout status change."""
    try:
        return PayoutStatus(new) in PAYOUT_TRANSITIONS[PayoutStatus(current)]
    except ValueError:
        return False


def parse_amount(value: Any) -> Decimal:
    """
    Validate a requested payout amount.

    Raises:
        ValidationError: Non-numeric, not positive or finer than cents
    """
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError("Amount must be a number", amount=value) from e

    if not amount.is_finite() or amount <= ZERO:
        raise ValidationError("Amount must be greater than zero", amount=value)
    if has_more_than_cents(amount):
        raise ValidationError(
            "Amount can have at most two decimal places", amount=value
        )
    return quantize_money(amount)


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    text = notes.strip()
    if len(text) > NOTES_MAX_LENGTH:
        raise ValidationError("Notes are too long")
    return text or None


@dataclass(frozen=True)
class PayoutApplication:
    """A user's withdrawal request. Destination defaults to the saved setting."""

    amount: Any
    destination: PayoutDestination | None = None
    notes: str | None = None


@dataclass(frozen=True)
class PayoutListFilters:
    """Listing filters as received from a transport layer."""

    status: str | None = None
    user_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    page: Any = None
    limit: Any = None


class PayoutRequestWorkflow(BaseService):
    """Payout requests and their review."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize payout workflow."""
        super().__init__(session, audit_sink)
        self.request_repo = PayoutRequestRepository(session)
        self.setting_repo = PayoutSettingRepository(session)
        self.user_repo = UserRepository(session)

    @transactional
    async def apply(
        self, user_id: int, application: PayoutApplication
    ) -> PayoutRequest:
        """
        File a payout request and reserve its amount.

        Args:
            user_id: Requesting user
            application: Amount, optional destination and notes

        Returns:
            New pending request

        Raises:
            ValidationError: Bad amount or no destination configured
            NotFound: User does not exist
            InsufficientBalance: Amount exceeds the withdrawable balance
        """
        amount = parse_amount(application.amount)
        notes = _clean_notes(application.notes)

        user = await self.user_repo.get_for_update(user_id)
        if user is None:
            raise NotFound("User not found", user_id=user_id)

        destination = application.destination
        if destination is None:
            setting = await self.setting_repo.get_by_user(user_id)
            if setting is None:
                raise ValidationError(
                    "Please configure a payout account first", user_id=user_id
                )
            destination = PayoutDestination.from_setting(setting)

        balance = to_decimal(user.commission_balance)
        if amount > balance:
            self.logger.warning(
                "Payout exceeds balance",
                extra={
                    "user_id": user_id,
                    "amount": str(amount),
                    "balance": str(balance),
                },
            )
            raise InsufficientBalance(
                "Insufficient commission balance",
                user_id=user_id,
                balance=balance,
                amount=amount,
            )

        user.commission_balance = quantize_money(balance - amount)
        request = await self.request_repo.create(
            user_id=user_id,
            amount=amount,
            status=PayoutStatus.PENDING.value,
            requested_notes=notes,
            **destination.as_columns(),
        )

        self.logger.info(
            "Payout requested",
            extra={
                "request_id": request.id,
                "user_id": user_id,
                "amount": str(amount),
                "method": request.method,
            },
        )

        await self.audit(AuditEvent.build(
            operator_id=user_id,
            target_type="referral_payout_request",
            target_id=request.id,
            action=AuditAction.PAYOUT_APPLY,
            summary="Payout requested",
            amount=amount,
            method=request.method,
            balance_after=user.commission_balance,
        ))

        return request

    @transactional
    async def review(
        self,
        request_id: int,
        status: PayoutStatus | str,
        review_notes: str | None = None,
        reviewer_id: int | None = None,
    ) -> PayoutRequest:
        """
        Move a request through review.

        pending -> approved, pending -> rejected (releases the reservation),
        approved -> paid (sets paid_at).

        Raises:
            NotFound: Request does not exist
            InvalidTransition: Status change not allowed
        """
        try:
            target = PayoutStatus(status)
        except ValueError as e:
            raise ValidationError("Unknown payout status", status=status) from e

        notes = _clean_notes(review_notes)

        request = await self.request_repo.get_for_update(request_id)
        if request is None:
            raise NotFound("Payout request not found", request_id=request_id)

        previous = request.status
        if not can_transition(previous, target):
            self.logger.warning(
                "Illegal payout transition",
                extra={
                    "request_id": request_id,
                    "from": previous,
                    "to": target.value,
                },
            )
            raise InvalidTransition(
                f"Cannot change payout request from {previous} to {target.value}",
                request_id=request_id,
                current=previous,
                requested=target.value,
            )

        if target == PayoutStatus.REJECTED:
            user = await self.user_repo.get_for_update(request.user_id)
            if user is None:
                raise NotFound("User not found", user_id=request.user_id)
            user.commission_balance = quantize_money(
                to_decimal(user.commission_balance) + to_decimal(request.amount)
            )

        now = utc_now()
        request.status = target.value
        request.reviewed_at = now
        request.reviewed_by = reviewer_id
        if notes is not None:
            request.review_notes = notes
        if target == PayoutStatus.PAID:
            request.paid_at = now

        await self.session.flush()

        self.logger.info(
            "Payout reviewed",
            extra={
                "request_id": request_id,
                "from": previous,
                "to": target.value,
                "reviewer_id": reviewer_id,
            },
        )

        await self.audit(AuditEvent.build(
            operator_id=reviewer_id,
            target_type="referral_payout_request",
            target_id=request_id,
            action=AuditAction.PAYOUT_REVIEW,
            summary=f"Payout {target.value}",
            previous_status=previous,
            status=target.value,
            amount=request.amount,
            user_id=request.user_id,
            review_notes=notes,
        ))

        return request

    async def _list(self, filters: PayoutFilters, page: Any, limit: Any) -> Page:
        check_date_range(filters.date_from, filters.date_to)
        params = normalize_pagination(page, limit)
        rows = await self.request_repo.list_filtered(
            filters, params.limit, params.offset
        )
        total = await self.request_repo.count_filtered(filters)
        return Page(items=rows, total=total, page=params.page, limit=params.limit)

    async def get_user_payout_requests(
        self, user_id: int, filters: PayoutListFilters | None = None
    ) -> Page:
        """
        A user's own payout requests, newest first.

        Returns:
            Page of (request, user) pairs

        Raises:
            ValidationError: Unknown status, or date_from after date_to
        """
        filters = filters or PayoutListFilters()
        return await self._list(
            PayoutFilters(
                user_id=user_id,
                status=check_choice(filters.status, PayoutStatus, "status"),
                date_from=filters.date_from,
                date_to=filters.date_to,
            ),
            filters.page,
            filters.limit,
        )

    async def get_admin_payout_requests(
        self, filters: PayoutListFilters | None = None
    ) -> Page:
        """
        All payout requests for operators, newest first.

        Returns:
            Page of (request, user) pairs

        Raises:
            ValidationError: Unknown status, or date_from after date_to
        """
        filters = filters or PayoutListFilters()
        return await self._list(
            PayoutFilters(
                user_id=filters.user_id,
                status=check_choice(filters.status, PayoutStatus, "status"),
                date_from=filters.date_from,
                date_to=filters.date_to,
            ),
            filters.page,
            filters.limit,
        )

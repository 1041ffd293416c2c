"""
Base service class.

Provides common functionality for all service classes including session
management, logging and the audit sink.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.services.audit import AuditEvent, AuditSink, LoguruAuditSink


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Audit event emission
    """

    def __init__(
        self, session: AsyncSession, audit_sink: AuditSink | None = None
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            audit_sink: Receiver of audit events (defaults to loguru)
        """
        self.session = session
        self.audit_sink = audit_sink or LoguruAuditSink()
        self.logger = logger.bind(service=self.__class__.__name__)

    async def audit(self, event: AuditEvent) -> None:
        """
        Emit an audit event.

        Args:
            event: Structured audit event
        """
        await self.audit_sink.emit(event)


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method exit with timing.

    Logs method exit with duration at DEBUG, whether or not it raised.

    Usage:
        @log_operation
        async def get_dashboard(self, user_id: int):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            return await func(self, *args, **kwargs)
        finally:
            self.logger.debug(
                f"Completed {func.__name__}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(time.time() - start_time, 3),
                },
            )

    return wrapper

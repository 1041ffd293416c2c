"""
Database decorators for units of work.

Provides the decorator that gives every public referral core mutator
commit/rollback semantics and a bounded retry for transient failures.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from referral_core.config.settings import settings
from referral_core.utils.exceptions import (
    ReferralCoreError,
    ServerError,
    is_transient,
)


T = TypeVar("T")

# Key in AsyncSession.info tracking nested units of work
_DEPTH_KEY = "referral_uow_depth"


def transactional(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator that runs a service method as one unit of work.

    The method's instance must expose the session as ``self.session``.

    The outermost decorated call:
    1. Executes the wrapped method
    2. Commits on success
    3. Rolls back on any exception
    4. Retries the whole method after a transient error, up to
       ``settings.transient_retry_attempts`` times
    5. Raises ServerError for repeated transient or unexpected storage errors

    Nested decorated calls on the same session join the outer unit of work
    and neither commit nor roll back.

    Usage:
        class Ledger(BaseService):
            @transactional
            async def record(self, ...):
                ...
    """
    @wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        session = self.session
        depth = session.info.get(_DEPTH_KEY, 0)

        if depth:
            return await func(self, *args, **kwargs)

        attempts_left = settings.transient_retry_attempts
        while True:
            session.info[_DEPTH_KEY] = 1
            try:
                result = await func(self, *args, **kwargs)
                await session.commit()
                return result
            except Exception as e:
                await _safe_rollback(session, func.__name__, e)

                if is_transient(e):
                    if attempts_left > 0:
                        attempts_left -= 1
                        logger.warning(
                            f"Transient failure in {func.__name__}, retrying",
                            extra={
                                "function": func.__name__,
                                "error": str(e),
                                "attempts_left": attempts_left,
                            },
                        )
                        continue
                    raise ServerError(
                        "Operation failed, please try again later",
                        function=func.__name__,
                    ) from e

                if isinstance(e, ReferralCoreError):
                    raise

                if isinstance(e, SQLAlchemyError):
                    logger.error(
                        f"Storage failure in {func.__name__}",
                        extra={"function": func.__name__, "error": str(e)},
                        exc_info=True,
                    )
                    raise ServerError(
                        "Operation failed due to a storage error",
                        function=func.__name__,
                    ) from e

                raise
            finally:
                session.info[_DEPTH_KEY] = 0

    return wrapper


async def _safe_rollback(session: Any, function: str, cause: Exception) -> None:
    """Roll back, logging (not raising) a failed rollback."""
    try:
        await session.rollback()
        logger.debug(
            f"Rollback performed in {function} due to error: {type(cause).__name__}"
        )
    except SQLAlchemyError as rollback_error:
        logger.error(
            f"Failed to rollback in {function}",
            extra={"function": function, "error": str(rollback_error)},
            exc_info=True,
        )

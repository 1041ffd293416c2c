"""
Tests for the transactional decorator.

Uses mocked sessions to check commit, rollback, retry and error
conversion without a database.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import (
    ConcurrentUpdateError,
    InsufficientBalance,
    ServerError,
)


class FakeService:
    """Minimal service exposing a session."""

    def __init__(self, session, side_effects):
        self.session = session
        self.side_effects = list(side_effects)
        self.calls = 0

    @transactional
    async def run(self):
        self.calls += 1
        effect = self.side_effects.pop(0)
        if isinstance(effect, Exception):
            raise effect
        return effect

    @transactional
    async def outer(self):
        return await self.run()


def operational_error():
    return OperationalError("UPDATE users", {}, Exception("deadlock detected"))


class TestTransactional:
    """Unit of work semantics."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, mock_session):
        service = FakeService(mock_session, ["ok"])

        result = await service.run()

        assert result == "ok"
        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_business_error_rolls_back_and_propagates(self, mock_session):
        service = FakeService(mock_session, [InsufficientBalance("no money")])

        with pytest.raises(InsufficientBalance):
            await service.run()

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()
        assert service.calls == 1

    @pytest.mark.asyncio
    async def test_retries_transient_error_once(self, mock_session):
        service = FakeService(mock_session, [operational_error(), "ok"])

        result = await service.run()

        assert result == "ok"
        assert service.calls == 2
        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_update_is_retried(self, mock_session):
        service = FakeService(
            mock_session, [ConcurrentUpdateError("race"), "ok"]
        )

        assert await service.run() == "ok"
        assert service.calls == 2

    @pytest.mark.asyncio
    async def test_repeated_transient_error_becomes_server_error(self, mock_session):
        service = FakeService(
            mock_session, [operational_error(), operational_error()]
        )

        with pytest.raises(ServerError):
            await service.run()

        assert service.calls == 2
        assert mock_session.rollback.await_count == 2

    @pytest.mark.asyncio
    async def test_storage_error_becomes_server_error(self, mock_session):
        error = IntegrityError("INSERT", {}, Exception("check failed"))
        service = FakeService(mock_session, [error])

        with pytest.raises(ServerError) as exc_info:
            await service.run()

        assert exc_info.value.__cause__ is error
        assert service.calls == 1

    @pytest.mark.asyncio
    async def test_nested_call_joins_outer_unit(self, mock_session):
        service = FakeService(mock_session, ["inner"])

        result = await service.outer()

        assert result == "inner"
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_depth_is_reset_after_failure(self, mock_session):
        service = FakeService(mock_session, [InsufficientBalance("x"), "ok"])

        with pytest.raises(InsufficientBalance):
            await service.run()

        assert await service.run() == "ok"
        assert mock_session.commit.await_count == 1

"""
Unit tests for Telegram bot middlewares.

Tests the per-update transaction, rate limiting and user context.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.types import Message, Update
from sqlalchemy.exc import OperationalError

from itdesk.backend.core.exceptions import DatabaseError, NotFoundError


def _session_factory(session: AsyncMock) -> MagicMock:
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


def _update_with_message() -> MagicMock:
    message = MagicMock()
    message.answer = AsyncMock()
    event = MagicMock(spec=Update)
    event.message = message
    event.callback_query = None
    return event


class TestDbSessionMiddleware:
    """Tests for DbSessionMiddleware."""

    @pytest.mark.asyncio
    async def test_commits_after_handler(self, mock_db_session):
        """Should expose the session to handlers and commit on success."""
        from itdesk.telegram.middlewares.db_session import DbSessionMiddleware

        middleware = DbSessionMiddleware(_session_factory(mock_db_session))
        handler = AsyncMock(return_value="ok")
        data = {}

        result = await middleware(handler, _update_with_message(), data)

        assert result == "ok"
        assert data["session"] is mock_db_session
        mock_db_session.commit.assert_awaited_once()
        mock_db_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_application_error_rolls_back_and_replies(self, mock_db_session):
        """Should roll back and answer with the error message."""
        from itdesk.telegram.middlewares.db_session import DbSessionMiddleware

        middleware = DbSessionMiddleware(_session_factory(mock_db_session))
        handler = AsyncMock(side_effect=NotFoundError("Task not found"))
        event = _update_with_message()

        result = await middleware(handler, event, {})

        assert result is None
        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_awaited()
        event.message.answer.assert_awaited_once_with("Task not found", parse_mode=None)

    @pytest.mark.asyncio
    async def test_database_error_gets_generic_reply(self, mock_db_session):
        """Should not leak database details to the chat."""
        from itdesk.telegram.middlewares.db_session import DATABASE_ERROR_REPLY, DbSessionMiddleware

        middleware = DbSessionMiddleware(_session_factory(mock_db_session))
        handler = AsyncMock(side_effect=DatabaseError("Database operation failed: create_task"))
        event = _update_with_message()

        await middleware(handler, event, {})

        event.message.answer.assert_awaited_once_with(DATABASE_ERROR_REPLY, parse_mode=None)

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back_and_propagates(self, mock_db_session):
        """Should re-raise non-application errors after rollback."""
        from itdesk.telegram.middlewares.db_session import DbSessionMiddleware

        middleware = DbSessionMiddleware(_session_factory(mock_db_session))
        handler = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await middleware(handler, _update_with_message(), {})

        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back_and_replies(self, mock_db_session):
        """Should treat a failed commit like any other database error."""
        from itdesk.telegram.middlewares.db_session import DATABASE_ERROR_REPLY, DbSessionMiddleware

        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("database is locked"))
        middleware = DbSessionMiddleware(_session_factory(mock_db_session))
        event = _update_with_message()

        result = await middleware(AsyncMock(return_value="ok"), event, {})

        assert result is None
        mock_db_session.rollback.assert_awaited_once()
        event.message.answer.assert_awaited_once_with(DATABASE_ERROR_REPLY, parse_mode=None)

    @pytest.mark.asyncio
    async def test_commit_update_wraps_driver_errors(self, mock_db_session):
        from itdesk.telegram.middlewares.db_session import commit_update

        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk full"))

        with pytest.raises(DatabaseError):
            await commit_update(mock_db_session)


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware."""

    def _create_mock_message(self, user_id: int) -> MagicMock:
        message = MagicMock(spec=Message)
        message.from_user = MagicMock()
        message.from_user.id = user_id
        message.answer = AsyncMock()
        return message

    @pytest.mark.asyncio
    async def test_allows_within_limit(self):
        """Should pass messages through while under the limit."""
        from itdesk.telegram.middlewares.rate_limit import RateLimitMiddleware

        middleware = RateLimitMiddleware(rate_limit=3)
        handler = AsyncMock(return_value="result")
        message = self._create_mock_message(1)

        for _ in range(3):
            assert await middleware(handler, message, {}) == "result"

        assert handler.await_count == 3

    @pytest.mark.asyncio
    async def test_blocks_over_limit(self):
        """Should answer with a wait hint once the limit is reached."""
        from itdesk.telegram.middlewares.rate_limit import RateLimitMiddleware

        middleware = RateLimitMiddleware(rate_limit=2)
        handler = AsyncMock(return_value="result")
        message = self._create_mock_message(1)

        await middleware(handler, message, {})
        await middleware(handler, message, {})
        result = await middleware(handler, message, {})

        assert result is None
        assert handler.await_count == 2
        assert "Too many requests" in message.answer.await_args.args[0]

    @pytest.mark.asyncio
    async def test_limits_are_per_user(self):
        """Should track each user separately."""
        from itdesk.telegram.middlewares.rate_limit import RateLimitMiddleware

        middleware = RateLimitMiddleware(rate_limit=1)
        handler = AsyncMock(return_value="result")

        await middleware(handler, self._create_mock_message(1), {})
        result = await middleware(handler, self._create_mock_message(2), {})

        assert result == "result"

    def test_old_requests_leave_the_window(self):
        """Should forget timestamps older than the window."""
        from itdesk.telegram.middlewares.rate_limit import RateLimitMiddleware

        middleware = RateLimitMiddleware(rate_limit=1, rate_window=60)
        middleware._requests[1] = [100.0]

        assert middleware._check_rate_limit(1, 161.0) == (False, 0)
        assert middleware._requests[1] == []

    def test_wait_hint_counts_down(self):
        from itdesk.telegram.middlewares.rate_limit import RateLimitMiddleware

        middleware = RateLimitMiddleware(rate_limit=1, rate_window=60)
        middleware._requests[1] = [100.0]

        assert middleware._check_rate_limit(1, 130.0) == (True, 31)


class TestUserContextMiddleware:
    """Tests for UserContextMiddleware."""

    @pytest.mark.asyncio
    async def test_unknown_event_gets_no_user(self, mock_db_session):
        """Should set db_user to None when the event carries no sender."""
        from itdesk.telegram.middlewares.user_context import UserContextMiddleware

        handler = AsyncMock(return_value="ok")
        data = {"session": mock_db_session}

        await UserContextMiddleware()(handler, MagicMock(), data)

        assert data["db_user"] is None
        assert data["telegram_user"] is None
        mock_db_session.execute.assert_not_awaited()

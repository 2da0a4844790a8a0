"""
Unit tests for the post-commit notification outbox.
"""

from unittest.mock import MagicMock

from itdesk.backend.services.outbox import (
    PENDING_KEY,
    _discard_after_rollback,
    _release_after_commit,
    queue_notification,
)


def _session() -> MagicMock:
    session = MagicMock()
    session.info = {}
    return session


class TestOutbox:

    def test_queued_messages_wait_for_commit(self):
        session, notifier = _session(), MagicMock()

        queue_notification(session, notifier, "1", "first")
        queue_notification(session, notifier, "2", "second")

        assert len(session.info[PENDING_KEY]) == 2
        notifier.notify.assert_not_called()

    def test_commit_releases_in_order(self):
        """Should hand every queued message to its notifier after commit."""
        session, notifier = _session(), MagicMock()
        queue_notification(session, notifier, "1", "first")
        queue_notification(session, notifier, "2", "second")

        _release_after_commit(session)

        assert [c.args for c in notifier.notify.call_args_list] == [("1", "first"), ("2", "second")]
        assert PENDING_KEY not in session.info

    def test_rollback_discards(self):
        """Should never deliver messages for a rolled back transaction."""
        session, notifier = _session(), MagicMock()
        queue_notification(session, notifier, "1", "lost")

        _discard_after_rollback(session)
        _release_after_commit(session)

        notifier.notify.assert_not_called()

    def test_failing_notifier_does_not_block_others(self):
        session = _session()
        broken, working = MagicMock(), MagicMock()
        broken.notify.side_effect = RuntimeError("down")
        queue_notification(session, broken, "1", "a")
        queue_notification(session, working, "2", "b")

        _release_after_commit(session)

        working.notify.assert_called_once_with("2", "b")

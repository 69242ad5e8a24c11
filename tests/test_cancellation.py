"""Tests for CancellationToken."""

from __future__ import annotations

import threading

import pytest

from mend.cancellation import CancellationToken
from mend.exceptions import RepairCancelledError


class TestCancellationToken:
    def test_fresh_token_is_active(self):
        token = CancellationToken.never()
        assert not token.cancelled
        assert token.remaining() is None
        token.raise_if_cancelled()

    def test_cancel_sets_flag(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled
        with pytest.raises(RepairCancelledError, match="cancelled after 2 attempt"):
            token.raise_if_cancelled(2)

    def test_cancel_from_other_thread(self):
        token = CancellationToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()
        assert token.cancelled

    def test_deadline_expiry(self):
        token = CancellationToken.with_timeout(0)
        assert token.expired
        assert token.remaining() == 0.0
        with pytest.raises(RepairCancelledError) as exc_info:
            token.raise_if_cancelled()
        assert exc_info.value.reason == "timed out"

    def test_remaining_counts_down(self):
        token = CancellationToken.with_timeout(30)
        assert 0 < token.remaining() <= 30
        assert not token.expired

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValueError):
            CancellationToken.with_timeout(-1)

    def test_repr(self):
        token = CancellationToken()
        assert repr(token) == "CancellationToken(active)"
        token.cancel()
        assert repr(token) == "CancellationToken(cancelled)"

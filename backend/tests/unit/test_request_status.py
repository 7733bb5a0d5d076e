"""Unit tests for the download request state machine"""

import pytest

from xdocs.download_requests.status import ALLOWED_TRANSITIONS, RequestStatus, get_source_states


class TestSourceStates:

    @pytest.mark.parametrize("target", [RequestStatus.APPROVED, RequestStatus.REJECTED])
    def test_only_pending_reaches_a_decision(self, target):
        assert get_source_states(target) == [RequestStatus.PENDING]

    def test_nothing_reaches_pending(self):
        assert get_source_states(RequestStatus.PENDING) == []

    @pytest.mark.parametrize("status", [RequestStatus.APPROVED, RequestStatus.REJECTED])
    def test_decisions_are_terminal(self, status):
        assert ALLOWED_TRANSITIONS[status] == []

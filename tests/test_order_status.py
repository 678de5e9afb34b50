"""Tests for the order status lifecycle table."""
import pytest

from market.models.order import OrderStatus, VALID_TRANSITIONS


class TestTransitions:
    @pytest.mark.parametrize("source,target", [
        (OrderStatus.pending, OrderStatus.confirmed),
        (OrderStatus.pending, OrderStatus.cancelled),
        (OrderStatus.confirmed, OrderStatus.processing),
        (OrderStatus.confirmed, OrderStatus.cancelled),
        (OrderStatus.processing, OrderStatus.shipped),
        (OrderStatus.processing, OrderStatus.cancelled),
        (OrderStatus.shipped, OrderStatus.delivered),
    ])
    def test_allowed(self, source, target):
        assert source.can_transition_to(target)

    @pytest.mark.parametrize("source,target", [
        (OrderStatus.pending, OrderStatus.shipped),
        (OrderStatus.pending, OrderStatus.pending),
        (OrderStatus.shipped, OrderStatus.cancelled),
        (OrderStatus.confirmed, OrderStatus.pending),
    ])
    def test_rejected(self, source, target):
        assert not source.can_transition_to(target)

    @pytest.mark.parametrize("terminal", [OrderStatus.delivered, OrderStatus.cancelled])
    def test_terminal_states_have_no_exit(self, terminal):
        assert terminal.is_terminal()
        assert not terminal.is_cancellable()
        assert all(not terminal.can_transition_to(target) for target in OrderStatus)

    def test_cancellable_states(self):
        cancellable = {s for s in OrderStatus if s.is_cancellable()}
        assert cancellable == {OrderStatus.pending, OrderStatus.confirmed, OrderStatus.processing}

    def test_every_status_is_in_the_table(self):
        assert set(VALID_TRANSITIONS) == set(OrderStatus)

"""Order status state machine.

Main chain: pending -> confirmed -> paid -> processing -> shipped -> completed.
Forward skips along the chain are allowed (a bank transfer moves an order
straight from pending to processing); cancelled and refunded can be entered
from any state before completed. completed, cancelled and refunded are final.
"""

from common.choices import OrderStatus
from common.exceptions import InvalidTransition

S = OrderStatus

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.PAID, S.PROCESSING, S.CANCELLED, S.REFUNDED}),
    S.CONFIRMED: frozenset({S.PAID, S.PROCESSING, S.CANCELLED, S.REFUNDED}),
    S.PAID: frozenset({S.PROCESSING, S.SHIPPED, S.CANCELLED, S.REFUNDED}),
    S.PROCESSING: frozenset({S.SHIPPED, S.CANCELLED, S.REFUNDED}),
    S.SHIPPED: frozenset({S.COMPLETED, S.CANCELLED, S.REFUNDED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.REFUNDED: frozenset(),
}

# Entering one of these gives the order's stock back.
RESTOCK_STATES = frozenset({S.CANCELLED, S.REFUNDED})
TERMINAL_STATES = frozenset(state for state, targets in ALLOWED_TRANSITIONS.items() if not targets)
CUSTOMER_CANCELLABLE = frozenset({S.PENDING, S.CONFIRMED})


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def assert_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(current, target)

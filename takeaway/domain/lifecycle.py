"""
Order states and the transitions the staff screens offer.

The store does not enforce the graph below. The kitchen screen only offers
its two moves; the manager screen may set any status.
"""
from enum import Enum
from typing import Dict, NamedTuple


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Statuses shown on the kitchen board.
ACTIVE_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
)

FORWARD_TRANSITIONS: Dict[OrderStatus, frozenset] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

KITCHEN_ACTIONS: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
}

KITCHEN_ACTION_LABELS: Dict[OrderStatus, str] = {
    OrderStatus.PREPARING: "Commencer",
    OrderStatus.READY: "Marquer prête",
}


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_forward(current: OrderStatus, target: OrderStatus) -> bool:
    return target in FORWARD_TRANSITIONS[current]


def kitchen_action(status: OrderStatus) -> OrderStatus | None:
    """The one move the kitchen board offers for `status`, if any."""
    return KITCHEN_ACTIONS.get(status)


class StatusDisplay(NamedTuple):
    label: str
    color: str


STATUS_DISPLAY: Dict[OrderStatus, StatusDisplay] = {
    OrderStatus.PENDING: StatusDisplay("En attente", "yellow"),
    OrderStatus.CONFIRMED: StatusDisplay("Confirmée", "blue"),
    OrderStatus.PREPARING: StatusDisplay("En préparation", "orange"),
    OrderStatus.READY: StatusDisplay("Prête", "green"),
    OrderStatus.COMPLETED: StatusDisplay("Terminée", "gray"),
    OrderStatus.CANCELLED: StatusDisplay("Annulée", "red"),
}


def status_display(status: OrderStatus) -> StatusDisplay:
    return STATUS_DISPLAY[OrderStatus(status)]

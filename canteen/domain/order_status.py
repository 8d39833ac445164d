# canteen/domain/order_status.py
from enum import Enum
from typing import List, Optional

from canteen.domain.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    PROCESSING = "processing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ActorRole(str, Enum):
    PATIENT = "patient"
    STAFF = "staff"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# (from, to) -> the only role allowed to take the edge
TRANSITIONS = {
    (OrderStatus.PENDING, OrderStatus.ACCEPTED): ActorRole.STAFF,
    (OrderStatus.ACCEPTED, OrderStatus.PROCESSING): ActorRole.STAFF,
    (OrderStatus.PROCESSING, OrderStatus.READY): ActorRole.STAFF,
    (OrderStatus.READY, OrderStatus.DELIVERED): ActorRole.STAFF,
    (OrderStatus.PENDING, OrderStatus.CANCELLED): ActorRole.PATIENT,
}

ACTION_LABELS = {
    (OrderStatus.PENDING, OrderStatus.ACCEPTED): "Accept Order",
    (OrderStatus.ACCEPTED, OrderStatus.PROCESSING): "Start Processing",
    (OrderStatus.PROCESSING, OrderStatus.READY): "Mark Ready",
    (OrderStatus.READY, OrderStatus.DELIVERED): "Mark Delivered",
    (OrderStatus.PENDING, OrderStatus.CANCELLED): "Cancel Order",
}


def _parse_status(value) -> Optional[OrderStatus]:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def is_terminal(status) -> bool:
    return _parse_status(status) in TERMINAL_STATUSES


def next_status(current) -> Optional[OrderStatus]:
    """Next step of the staff fulfilment chain, None at the end of it."""
    current = _parse_status(current)
    for (src, dst), role in TRANSITIONS.items():
        if src == current and role == ActorRole.STAFF:
            return dst
    return None


def action_label(current, requested) -> Optional[str]:
    return ACTION_LABELS.get((_parse_status(current), _parse_status(requested)))


def allowed_transitions(current, actor) -> List[OrderStatus]:
    current = _parse_status(current)
    actor = ActorRole(actor)
    return [dst for (src, dst), role in TRANSITIONS.items() if src == current and role == actor]


def _state_message(current: str, requested: str, actor: ActorRole) -> str:
    if current in {s.value for s in TERMINAL_STATUSES}:
        return f"Order is already {current} and can no longer change status"
    if actor == ActorRole.PATIENT and requested == OrderStatus.CANCELLED.value:
        return f"Patients may only cancel pending orders (current status: {current})"
    return f"Cannot change status from {current} to {requested}"


def transition(current, requested, actor) -> OrderStatus:
    """
    Validate a status change and return the new status.

    The state machine is the only gatekeeper for status writes: anything not
    in TRANSITIONS raises InvalidTransition, never a coerced neighbour.
    """
    actor = ActorRole(actor)
    current_value = getattr(current, "value", current)
    requested_value = getattr(requested, "value", requested)

    src = _parse_status(current)
    dst = _parse_status(requested)

    if src is None or dst is None:
        raise InvalidTransition(
            current_value, requested_value, actor.value, "state",
            f"Unknown order status: {requested_value if src is not None else current_value}",
        )

    owner = TRANSITIONS.get((src, dst))

    if owner is None:
        raise InvalidTransition(
            src.value, dst.value, actor.value, "state",
            _state_message(src.value, dst.value, actor),
        )

    if owner != actor:
        if owner == ActorRole.PATIENT:
            message = "Only the patient who placed the order may cancel it"
        else:
            message = f"Only staff may move an order from {src.value} to {dst.value}"
        raise InvalidTransition(src.value, dst.value, actor.value, "actor", message)

    return dst

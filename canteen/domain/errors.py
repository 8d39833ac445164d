# canteen/domain/errors.py


class OrderError(Exception):
    """Base class for order lifecycle errors."""


class ValidationError(OrderError, ValueError):
    """Malformed order input, rejected before anything is persisted."""


class EmptyCartError(ValidationError):
    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class OrderNotFound(OrderError, LookupError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class InvalidTransition(OrderError):
    """
    A status change that the state machine does not allow.

    reason:
    - "actor" - the edge exists but belongs to the other role
    - "state" - there is no such edge from the current status
    - "stale" - the order moved on before the write landed
    """

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, actor: str, reason: str, message: str):
        self.from_status = from_status
        self.to_status = to_status
        self.actor = actor
        self.reason = reason
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
            "reason": self.reason,
        }


class StaleOrderState(InvalidTransition):
    code = "STALE_ORDER_STATE"

    def __init__(self, expected_status: str, current_status: str, to_status: str, actor: str):
        self.current_status = current_status
        super().__init__(
            from_status=expected_status,
            to_status=to_status,
            actor=actor,
            reason="stale",
            message=(
                f"Order status changed from {expected_status} to {current_status} "
                f"before this update was applied, refresh and try again"
            ),
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["current_status"] = self.current_status
        return data


class TransientFetchError(OrderError):
    """Network or availability failure, safe to retry."""

import json

import pytest
import requests
from requests.models import Response

from canteen.domain.errors import (
    InvalidTransition,
    OrderNotFound,
    StaleOrderState,
    TransientFetchError,
    ValidationError,
)
from canteen.services.order_client import OrderClient


def make_response(status_code, body=None, url="http://orders.test/"):
    resp = Response()
    resp.status_code = status_code
    resp.url = url
    if body is not None:
        resp._content = json.dumps(body).encode()
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = b""
    return resp


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        result = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def request(self, method, url, **kwargs):
        return self._next(method, url, **kwargs)


def conflict(code, **extra):
    detail = {
        "code": code,
        "message": "nope",
        "from_status": "processing",
        "to_status": "ready",
        "actor": "staff",
        "reason": "stale" if code == "STALE_ORDER_STATE" else "state",
        **extra,
    }
    return make_response(409, {"detail": detail})


def test_stale_conflict_is_mapped():
    session = FakeSession(conflict("STALE_ORDER_STATE", current_status="ready"))
    client = OrderClient(base_url="http://orders.test", session=session)

    with pytest.raises(StaleOrderState) as exc:
        client.update_status(1, "ready", "staff", expected_status="processing")

    assert exc.value.current_status == "ready"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PATCH", "http://orders.test/orders/1/status")
    assert kwargs["json"] == {
        "status": "ready",
        "actor_role": "staff",
        "user_id": None,
        "expected_status": "processing",
    }


def test_invalid_transition_conflict_is_mapped():
    client = OrderClient(base_url="http://orders.test", session=FakeSession(conflict("INVALID_TRANSITION")))

    with pytest.raises(InvalidTransition) as exc:
        client.update_status(1, "ready", "staff")

    assert not isinstance(exc.value, StaleOrderState)
    assert exc.value.reason == "state"


@pytest.mark.parametrize(
    "status_code, body, error",
    [
        (404, {"detail": "Order 1 not found"}, OrderNotFound),
        (403, {"detail": "You do not have access to this order"}, PermissionError),
        (400, {"detail": "Order totals do not match the current pricing policy"}, ValidationError),
        (409, {"detail": "plain text conflict"}, ValidationError),
    ],
)
def test_error_statuses_are_mapped(status_code, body, error):
    client = OrderClient(base_url="http://orders.test", session=FakeSession(make_response(status_code, body)))

    with pytest.raises(error):
        client.cancel(1, user_id=7)


def test_non_json_error_body():
    client = OrderClient(base_url="http://orders.test", session=FakeSession(make_response(400)))

    with pytest.raises(ValidationError):
        client.cancel(1, user_id=7)


def test_connection_error_on_write_is_transient():
    session = FakeSession(requests.ConnectionError("refused"))
    client = OrderClient(base_url="http://orders.test", session=session)

    with pytest.raises(TransientFetchError):
        client.cancel(1, user_id=7)

    assert len(session.calls) == 1


def test_server_error_on_read_is_retried_then_transient():
    session = FakeSession(make_response(503, {"detail": "down"}))
    client = OrderClient(base_url="http://orders.test", session=session)

    with pytest.raises(TransientFetchError):
        client.get(1)

    assert len(session.calls) == 3

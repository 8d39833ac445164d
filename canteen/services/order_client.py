# canteen/services/order_client.py
from typing import List, Optional

import requests
from requests import RequestException

from canteen.domain.errors import (
    InvalidTransition,
    OrderNotFound,
    StaleOrderState,
    TransientFetchError,
    ValidationError,
)
from canteen.domain.schemas import OrderCreate, OrderOut
from canteen.utils.retry import http_retry
from canteen.utils.settings import ORDER_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


def _detail(resp: requests.Response):
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    return data.get("detail") if isinstance(data, dict) else data


class OrderClient:
    """
    HTTP consumer of the Order resource.

    Exposes the same create/get/list_by_user/update_status/list_all calls as
    OrderService, so checkout and the tracker can use either one. Reads are
    retried, writes are sent once.
    """

    def __init__(self, base_url: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS, session=None):
        self.base_url = (base_url or ORDER_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @http_retry()
    def _get(self, path: str, params: dict | None = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"OrderClient GET {url}")
        resp = self.http.get(url, params=params, timeout=self.timeout)
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp

    def _send(self, method: str, path: str, body: dict) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"OrderClient {method} {url}")
        try:
            return self.http.request(method, url, json=body, timeout=self.timeout)
        except RequestException as e:
            raise TransientFetchError(f"Order service unavailable: {e}") from e

    def _read(self, path: str, params: dict | None = None) -> requests.Response:
        try:
            return self._get(path, params)
        except RequestException as e:
            raise TransientFetchError(f"Order service unavailable: {e}") from e

    def _raise_for_error(self, resp: requests.Response, order_id=None):
        if resp.status_code < 400:
            return

        detail = _detail(resp)
        message = detail.get("message") if isinstance(detail, dict) else str(detail)

        if resp.status_code >= 500:
            raise TransientFetchError(f"Order service error {resp.status_code}: {message}")
        if resp.status_code == 404:
            raise OrderNotFound(order_id)
        if resp.status_code == 403:
            raise PermissionError(message)
        if resp.status_code == 409 and isinstance(detail, dict):
            if detail.get("code") == StaleOrderState.code:
                raise StaleOrderState(
                    expected_status=detail["from_status"],
                    current_status=detail.get("current_status", detail["from_status"]),
                    to_status=detail["to_status"],
                    actor=detail["actor"],
                )
            raise InvalidTransition(
                detail["from_status"],
                detail["to_status"],
                detail["actor"],
                detail["reason"],
                detail["message"],
            )
        raise ValidationError(message)

    def create(self, payload: OrderCreate) -> OrderOut:
        resp = self._send("POST", "/orders/", payload.model_dump(mode="json"))
        self._raise_for_error(resp)
        return OrderOut.model_validate(resp.json())

    def get(self, order_id: int, user_id: Optional[int] = None) -> OrderOut:
        params = {"user_id": user_id} if user_id is not None else None
        resp = self._read(f"/orders/{order_id}", params)
        self._raise_for_error(resp, order_id)
        return OrderOut.model_validate(resp.json())

    def list_by_user(self, user_id: int) -> List[OrderOut]:
        resp = self._read("/orders/", {"user_id": user_id})
        self._raise_for_error(resp)
        return [OrderOut.model_validate(o) for o in resp.json()]

    def list_all(self, status: Optional[str] = None, limit: int = 50, page: int = 1) -> List[OrderOut]:
        params = {"limit": limit, "page": page}
        if status:
            params["status"] = getattr(status, "value", status)
        resp = self._read("/admin/orders/", params)
        self._raise_for_error(resp)
        return [OrderOut.model_validate(o) for o in resp.json()]

    def update_status(
        self,
        order_id: int,
        requested_status,
        actor_role,
        user_id: Optional[int] = None,
        expected_status=None,
    ) -> OrderOut:
        body = {
            "status": getattr(requested_status, "value", requested_status),
            "actor_role": getattr(actor_role, "value", actor_role),
            "user_id": user_id,
            "expected_status": getattr(expected_status, "value", expected_status),
        }
        resp = self._send("PATCH", f"/orders/{order_id}/status", body)
        self._raise_for_error(resp, order_id)
        return OrderOut.model_validate(resp.json())

    def cancel(self, order_id: int, user_id: int) -> OrderOut:
        resp = self._send("PATCH", f"/orders/{order_id}/cancel", {"user_id": user_id})
        self._raise_for_error(resp, order_id)
        return OrderOut.model_validate(resp.json())

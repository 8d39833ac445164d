# canteen/services/menu_client.py
import requests
from requests import RequestException

from canteen.domain.errors import TransientFetchError, ValidationError
from canteen.domain.schemas import MenuItem
from canteen.utils.retry import http_retry
from canteen.utils.settings import MENU_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


class MenuClient:
    """Read-only access to the menu collaborator."""

    def __init__(self, base_url: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS, session=None):
        self.base_url = (base_url or MENU_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @http_retry()
    def _get(self, path: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"MenuClient GET {url}")
        resp = self.http.get(url, timeout=self.timeout)
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp

    def fetch_menu_item(self, menu_item_id: str) -> MenuItem:
        try:
            resp = self._get(f"/menu/{menu_item_id}")
        except RequestException as e:
            raise TransientFetchError(f"Menu service unavailable: {e}") from e

        if resp.status_code == 404:
            raise ValidationError(f"Menu item {menu_item_id} does not exist")
        resp.raise_for_status()
        return MenuItem.model_validate(resp.json())

    def list_menu(self) -> list[MenuItem]:
        try:
            resp = self._get("/menu")
        except RequestException as e:
            raise TransientFetchError(f"Menu service unavailable: {e}") from e

        resp.raise_for_status()
        return [MenuItem.model_validate(m) for m in resp.json()]

# canteen/services/order_tracker.py
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Optional

from canteen.domain.errors import TransientFetchError
from canteen.domain.schemas import OrderOut
from canteen.utils.settings import ORDER_POLL_INTERVAL_SECONDS
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TrackingState:
    order: Optional[OrderOut] = None
    error: Optional[str] = None
    loading: bool = False
    fetch_count: int = 0
    last_fetched_at: Optional[datetime] = None


class OrderTracker:
    """
    Polls one order on a fixed interval so the patient sees kitchen and
    delivery progress without a push channel.

    - start() fetches right away on a background thread, then every `interval` seconds
    - every successful fetch replaces the cached order as a whole
    - a failed fetch only sets `error`; the next tick tries again
    - stop() cancels the timer and waits for an in-flight fetch, after it
      returns no further fetches happen

    fetch_order is any callable taking an order id and returning OrderOut,
    e.g. OrderClient.get or OrderService.get.
    """

    def __init__(
        self,
        fetch_order: Callable[[int], OrderOut],
        order_id: int,
        interval: float = ORDER_POLL_INTERVAL_SECONDS,
        on_update: Optional[Callable[[TrackingState], None]] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.fetch_order = fetch_order
        self.order_id = order_id
        self.interval = interval
        self.on_update = on_update

        self._state = TrackingState()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._stop.set()
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> TrackingState:
        with self._lock:
            return self._state

    @property
    def order(self) -> Optional[OrderOut]:
        return self.state.order

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> "OrderTracker":
        if self.running:
            return self

        # fresh event per run, a loop left over from a timed-out stop() keeps its own set event
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop,),
            name=f"order-tracker-{self.order_id}",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Tracking order {self.order_id} every {self.interval}s")
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.info(f"Stopped tracking order {self.order_id}")

    def refresh(self) -> TrackingState:
        """Fetch once, outside the regular schedule."""
        with self._lock:
            self._state = replace(self._state, loading=True)

        try:
            order = self.fetch_order(self.order_id)
        except TransientFetchError as e:
            logger.warning(f"Order {self.order_id} poll failed, will retry: {e}")
            new_state = self._finish(error=str(e))
        except Exception as e:
            logger.error(f"Order {self.order_id} poll failed: {e}")
            new_state = self._finish(error=str(e) or type(e).__name__)
        else:
            new_state = self._finish(order=order)

        self._notify(new_state)
        return new_state

    def _finish(self, order: Optional[OrderOut] = None, error: Optional[str] = None) -> TrackingState:
        with self._lock:
            self._state = TrackingState(
                # a failed poll keeps the last good snapshot on screen
                order=order if error is None else self._state.order,
                error=error,
                loading=False,
                fetch_count=self._state.fetch_count + 1,
                last_fetched_at=datetime.now(timezone.utc),
            )
            return self._state

    def _notify(self, state: TrackingState) -> None:
        if self.on_update is None:
            return
        try:
            self.on_update(state)
        except Exception as e:
            logger.error(f"Order {self.order_id} update listener failed: {e}")

    def _run(self, stop: threading.Event) -> None:
        if stop.is_set():
            return
        self.refresh()
        while not stop.wait(self.interval):
            self.refresh()

    def __enter__(self) -> "OrderTracker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

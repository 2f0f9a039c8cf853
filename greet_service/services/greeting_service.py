import itertools
import logging
import threading
from concurrent.futures import Future
from typing import Any, Dict, Optional

from flask import Flask, current_app
from prometheus_client import CollectorRegistry, Counter

logger = logging.getLogger(__name__)

NO_GREETING_MESSAGE = "No greeting in your JSON dude!"
DEFAULT_SLOW_DELAY_SECONDS = 2
MAX_SLOW_DELAY_SECONDS = 3600


class MissingGreetingField(Exception):
    """Raised when a write request carries no usable greeting value."""

    def __init__(self, message: str = NO_GREETING_MESSAGE):
        super().__init__(message)
        self.message = message


class GreetingState:
    """The current greeting, shared by every request in the process."""

    def __init__(self, initial: str):
        self._value = initial
        self._lock = threading.Lock()

    def get(self) -> str:
        with self._lock:
            return self._value

    def set(self, value: str) -> str:
        with self._lock:
            self._value = value
            return self._value


class RequestCounter:
    """Counts requests to the greet service; exported as the ``accessctr`` metric."""

    METRIC_NAME = "accessctr"

    def __init__(self, registry: CollectorRegistry):
        self._registry = registry
        self._counter = Counter(
            self.METRIC_NAME,
            "Count of all requests to the greet service",
            registry=registry,
        )

    def increment(self) -> None:
        self._counter.inc()

    @property
    def value(self) -> int:
        sample = self._registry.get_sample_value(f"{self.METRIC_NAME}_total")
        return int(sample or 0)


def display_thread(method_name: str) -> None:
    logger.debug(f"Method={method_name} Thread={threading.current_thread().name}")


class GreetService:
    """
    Holds the greeting state and request counter and answers the greet operations.

    Each slow update waits on its own timer thread and the request thread waits
    on a future the timer completes, so slow updates never queue behind each
    other. Once started, a slow update always commits, even if the caller has
    gone away.
    """

    def __init__(self):
        self.app: Optional[Flask] = None
        self.state: Optional[GreetingState] = None
        self.request_counter: Optional[RequestCounter] = None
        self._timer_ids = itertools.count(1)

    def init_app(self, app: Flask, registry: CollectorRegistry):
        self.app = app
        self.state = GreetingState(app.config.get("GREETING", "Ciao"))
        self.request_counter = RequestCounter(registry)
        app.extensions["greet_service"] = self
        logger.info(f"GreetService initialized with greeting '{self.state.get()}'.")

    def count_request(self) -> None:
        self.request_counter.increment()

    def default_message(self) -> Dict[str, Any]:
        return self.message_for("World")

    def message_for(self, name: str) -> Dict[str, Any]:
        return {"message": f"{self.state.get()} {name}!"}

    def current_greeting(self) -> Dict[str, Any]:
        return {"greeting": self.state.get()}

    def update_greeting(self, greeting: Optional[str]) -> Dict[str, Any]:
        """
        Replaces the greeting.

        Raises:
            MissingGreetingField if no greeting was given.
        """
        if greeting is None:
            raise MissingGreetingField()
        return {"greeting": self.state.set(greeting)}

    def update_greeting_slowly(self, greeting: Optional[str],
                               delay: int = DEFAULT_SLOW_DELAY_SECONDS) -> Dict[str, Any]:
        """
        Replaces the greeting after ``delay`` seconds.

        A missing greeting is rejected immediately, without waiting.
        """
        if greeting is None:
            raise MissingGreetingField()
        future: Future = Future()
        timer = threading.Timer(delay, self._commit_slow_update, args=(greeting, delay, future))
        timer.name = f"slow-greeting-{next(self._timer_ids)}"
        timer.daemon = True
        timer.start()
        return future.result()

    def _commit_slow_update(self, greeting: str, delay: int, future: Future) -> None:
        display_thread("update_greeting_slowly")
        try:
            result = {"greeting": self.state.set(greeting)}
        except Exception as e:
            future.set_exception(e)
            return
        logger.info(f"Greeting updated to '{greeting}' after {delay}s.")
        future.set_result(result)


def get_greet_service() -> GreetService:
    return current_app.extensions["greet_service"]

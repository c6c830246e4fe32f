"""
Request lifecycle store.

Tracks requests by identifier while they are in flight: which ones were
cancelled, which completed, and which one is "current" (the most recently
registered). Cancellation is advisory; nothing here aborts a transport call.
Callers check ``is_cancelled`` before rendering a response and discard the
result when it is set.

All state changes are single synchronous statements, so the store is safe to
share between coroutines on one event loop without locking. Only the latest
``REQUESTS_MAX_COUNT`` registrations are tracked; older ones read as closed.
"""

from enum import Enum

from ..schemas.http import HttpRequest


# Number of requests tracked before the oldest are forgotten
REQUESTS_MAX_COUNT = 50


class RequestState(str, Enum):
    """Lifecycle state of a request as reported to the UI."""
    CLOSED = "closed"
    PENDING = "pending"
    RECEIVED = "received"
    CANCELLED = "cancelled"
    ERROR = "error"


class RequestStore:
    """
    Registry of tracked requests.

    Usage:
        store = RequestStore()
        store.register("req-1", request)
        store.cancel()              # cancels "req-1", the current request
        store.is_cancelled("req-1")  # True
    """

    def __init__(self):
        self._requests: dict[str, HttpRequest] = {}
        self._cancelled: set[str] = set()
        self._completed: set[str] = set()
        self._failed: set[str] = set()
        self._current_id: str | None = None

    @property
    def current_id(self) -> str | None:
        return self._current_id

    def __len__(self) -> int:
        return len(self._requests)

    def register(self, request_id: str, request: HttpRequest) -> None:
        """Store a request and make it the current one (last registration wins)."""
        if request_id and request is not None:
            self._requests.pop(request_id, None)
            self._requests[request_id] = request
            self._current_id = request_id
            while len(self._requests) > REQUESTS_MAX_COUNT:
                self._forget(next(iter(self._requests)))

    def _forget(self, request_id: str) -> None:
        del self._requests[request_id]
        self._cancelled.discard(request_id)
        self._completed.discard(request_id)
        self._failed.discard(request_id)

    def get(self, request_id: str) -> HttpRequest | None:
        return self._requests.get(request_id)

    def get_current(self) -> HttpRequest | None:
        if self._current_id is None:
            return None
        return self._requests.get(self._current_id)

    def cancel(self, request_id: str | None = None) -> str | None:
        """
        Mark a request cancelled. Defaults to the current request.

        Returns:
            The identifier that was marked, or None when there is nothing to cancel
        """
        request_id = request_id or self._current_id
        if request_id:
            self._cancelled.add(request_id)
        return request_id

    def is_cancelled(self, request_id: str | None) -> bool:
        return bool(request_id) and request_id in self._cancelled

    def complete(self, request_id: str) -> None:
        if request_id in self._requests:
            self._completed.add(request_id)

    def is_completed(self, request_id: str | None = None) -> bool:
        request_id = request_id or self._current_id
        return bool(request_id) and request_id in self._completed

    def fail(self, request_id: str) -> None:
        """Record that the transport failed for a request."""
        if request_id in self._requests:
            self._failed.add(request_id)

    def state(self, request_id: str | None = None) -> RequestState:
        request_id = request_id or self._current_id
        if not request_id:
            return RequestState.CLOSED
        if request_id in self._cancelled:
            return RequestState.CANCELLED
        if request_id in self._failed:
            return RequestState.ERROR
        if request_id in self._completed:
            return RequestState.RECEIVED
        if request_id in self._requests:
            return RequestState.PENDING
        return RequestState.CLOSED

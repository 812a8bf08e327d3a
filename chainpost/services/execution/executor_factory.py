"""Selects the executor for a request, caching the choice per request kind."""

import logging
import threading
from typing import Iterable

from chainpost.exceptions import NoExecutorFoundError
from chainpost.models.request import BaseRequest
from chainpost.services.execution.executors.base import RequestExecutor

logger = logging.getLogger(__name__)


class RequestExecutorFactory:
    """
    Maps a request to the one executor able to run it.

    The executor list is fixed at construction. Lookups are cached by
    request.executor_key; the cache is guarded by a lock so concurrent
    misses for the same key converge on a single cached executor.
    """

    def __init__(self, executors: Iterable[RequestExecutor]):
        self._executors: tuple[RequestExecutor, ...] = tuple(executors)
        self._cache: dict[tuple, RequestExecutor] = {}
        self._lock = threading.Lock()

    def get_executor(self, request: BaseRequest) -> RequestExecutor:
        """
        Get the executor for a request.

        Raises:
            NoExecutorFoundError: If no registered executor accepts the request
        """
        key = request.executor_key

        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        executor = next((e for e in self._executors if e.can_execute(request)), None)
        if executor is None:
            raise NoExecutorFoundError(str(getattr(request, "type", type(request).__name__)))

        logger.debug("Selected %s for %s", type(executor).__name__, key)
        with self._lock:
            # First insert wins
            return self._cache.setdefault(key, executor)

"""Count backend adapter that retries failed queries with backoff."""

__all__ = ["RetryingCountBackend"]

import time
from typing import Iterable

from loguru import logger

from ..config import CONFIG
from ..errors import OracleUnavailable
from .backend import CountBackend


class RetryingCountBackend:
    """
    Wrap a count backend and retry transient failures.

    Waits backoff_base * 2**attempt seconds between attempts and raises
    OracleUnavailable once max_retries attempts have failed.
    """

    def __init__(
        self,
        backend: CountBackend,
        max_retries: int = CONFIG["max_retries"],
        backoff_base: float = CONFIG["retry_backoff"],
        sleep=time.sleep,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.backend = backend
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    def _call(self, name: str, *args):
        last_error = None
        for attempt in range(self.max_retries):
            try:
                return getattr(self.backend, name)(*args)
            except Exception as e:
                last_error = e
                # Don't sleep after the last attempt
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff_base * (2**attempt)
                    logger.warning(
                        f"{name}{args} failed ({type(e).__name__}: {e}), "
                        f"retrying in {wait_time:.2f}s"
                    )
                    self._sleep(wait_time)

        raise OracleUnavailable(
            f"{name} failed after {self.max_retries} attempts: {last_error}"
        ) from last_error

    def count(self, concept: int) -> int:
        return self._call("count", concept)

    def count_in_range(self, start: int, length: int) -> int:
        return self._call("count_in_range", start, length)

    def count_matching(self, required: Iterable[int], excluded: Iterable[int]) -> int:
        return self._call("count_matching", tuple(required), tuple(excluded))

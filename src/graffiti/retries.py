import logging
import threading
from collections import Counter

log = logging.getLogger("graffiti.retries")


class RetryLedger:
    """Failure counts per account address, kept for the life of the process.

    Counts are never cleared, so an account that has burned through its budget
    still gets a first attempt on every later round, but no more retries.
    """

    def __init__(self, max_retries: int) -> None:
        self.max_retries = max_retries
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def should_retry(self, address: str) -> bool:
        with self._lock:
            self._counts[address] += 1
            count = self._counts[address]
        allowed = count < self.max_retries
        log.debug("%s failure #%s (max %s) retry=%s", address, count, self.max_retries, allowed)
        return allowed

    def failures(self, address: str) -> int:
        with self._lock:
            return self._counts.get(address, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

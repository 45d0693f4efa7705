import asyncio
import logging
import time
from collections import Counter, deque
from dataclasses import dataclass, field

import graffiti.constants as C

log = logging.getLogger("graffiti.store")


@dataclass(slots=True)
class PendingTransaction:
    tx_hash: str
    account: str
    route: str | None
    pixels: int
    max_gas: int
    attempt: int
    state: C.TxState = C.TxState.SUBMITTED
    polls: int = 0
    vm_status: str | None = None
    version: str | None = None
    created_at: float = field(default_factory=time.time)

    def __str__(self):
        return f"{self.tx_hash} -- {self.account} -- {self.state}"


class TransactionStore:
    """Live submissions plus a flat history record for every hash we've seen.

    Only the most recent ``max_history`` finalized records are kept; older
    ones are dropped along with their share of ``count_by_state``.
    """

    def __init__(self, max_history: int = C.MAX_HISTORY) -> None:
        self._lock = asyncio.Lock()
        self.pending: dict[str, PendingTransaction] = {}
        self._records: dict[str, dict] = {}
        self._finalized: deque[str] = deque()
        self.max_history = max_history
        self.count_by_state: Counter[str] = Counter()

    def _move(self, prev_state: str | None, state: str | None) -> None:
        if prev_state == state:
            return
        if prev_state is not None:
            self.count_by_state[prev_state] -= 1
            if self.count_by_state[prev_state] <= 0:
                del self.count_by_state[prev_state]
        if state is not None:
            self.count_by_state[state] += 1

    def _evict(self) -> None:
        while len(self._finalized) > self.max_history:
            old = self._records.pop(self._finalized.popleft(), None)
            if old is not None:
                self._move(old.get("state"), None)

    async def track(self, p: PendingTransaction) -> None:
        async with self._lock:
            prev = self._records.get(p.tx_hash)
            self._move(prev.get("state") if prev else None, p.state.name)
            self.pending[p.tx_hash] = p
            self._records[p.tx_hash] = {
                "tx_hash": p.tx_hash,
                "account": p.account,
                "route": p.route,
                "pixels": p.pixels,
                "max_gas": p.max_gas,
                "attempt": p.attempt,
                "state": p.state.name,
                "created_at": p.created_at,
            }

    async def mark(self, tx_hash: str, **fields) -> None:
        """Merge ``fields`` into the record for ``tx_hash``.

        A terminal state stamps ``finalized_at`` once and drops the live entry.
        """
        async with self._lock:
            rec = self._records.setdefault(tx_hash, {"tx_hash": tx_hash})
            prev_state = rec.get("state")

            state = fields.get("state")
            if isinstance(state, C.TxState):
                fields["state"] = state.name
            rec.update(fields)
            self._move(prev_state, rec.get("state"))

            p = self.pending.get(tx_hash)
            if p is not None:
                for k, v in fields.items():
                    if k == "state":
                        p.state = C.TxState(v)
                    elif hasattr(p, k):
                        setattr(p, k, v)

            if rec.get("state") in TERMINAL_NAMES and "finalized_at" not in rec:
                rec["finalized_at"] = time.time()
                self.pending.pop(tx_hash, None)
                self._finalized.append(tx_hash)
                self._evict()

            log.debug("%s --> %s  %s", prev_state, rec.get("state"), tx_hash)

    async def get(self, tx_hash: str) -> dict | None:
        async with self._lock:
            rec = self._records.get(tx_hash)
            return dict(rec) if rec is not None else None

    async def find_by_state(self, *states: C.TxState | str) -> list[dict]:
        wanted = {s.name if isinstance(s, C.TxState) else s for s in states}
        async with self._lock:
            return [dict(rec) for rec in self._records.values() if rec.get("state") in wanted]

    async def all_records(self) -> list[dict]:
        async with self._lock:
            return [dict(rec) for rec in self._records.values()]

    def snapshot_stats(self) -> dict:
        return {
            "by_state": dict(self.count_by_state),
            "total_tracked": len(self._records),
            "live": len(self.pending),
        }


TERMINAL_NAMES = {s.name for s in C.TERMINAL_STATE}

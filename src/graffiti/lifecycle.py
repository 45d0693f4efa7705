"""Submit -> poll -> confirm, with retries.

One call to :meth:`TransactionLifecycleManager.submit` owns a drawing from
building the transaction until it is either confirmed on chain or the account
has used up its retry budget. Every attempt goes through the same states::

    BUILT -> SUBMITTED -> (PENDING | NOT_FOUND)* -> CONFIRMED | REMOTE_FAILED | TIMED_OUT

Polling is bounded by iteration count, not wall-clock time: a node that keeps
answering "pending" costs exactly ``poll_limit`` polls before we give up.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import graffiti.constants as C
from graffiti.errors import GraffitiError, TransactionFailed, TransactionTimeout
from graffiti.identities import Identity
from graffiti.ledger_client import LedgerClient
from graffiti.payload import Payload
from graffiti.retries import RetryLedger
from graffiti.store import PendingTransaction, TransactionStore
from graffiti.txn_factory import TxnFactory

log = logging.getLogger("graffiti.lifecycle")

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(slots=True)
class SubmissionOutcome:
    address: str
    state: C.Outcome
    attempts: int
    tx_hash: str | None = None
    record: dict | None = None
    error: str | None = None

    @property
    def confirmed(self) -> bool:
        return self.state == C.Outcome.CONFIRMED


def error_message(e: BaseException) -> str:
    return e.message if isinstance(e, GraffitiError) else str(e)


class TransactionLifecycleManager:
    def __init__(
        self,
        client: LedgerClient,
        factory: TxnFactory,
        retry_ledger: RetryLedger,
        *,
        store: TransactionStore | None = None,
        function_id: str = C.DRAW_FUNCTION,
        poll_interval: float = C.POLL_INTERVAL,
        poll_limit: int = C.POLL_LIMIT,
        retry_backoff: float = C.RETRY_BACKOFF,
        explorer_url: str = C.EXPLORER_TXN_URL,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.factory = factory
        self.retry_ledger = retry_ledger
        self.store = store or TransactionStore()
        self.function_id = function_id
        self.poll_interval = poll_interval
        self.poll_limit = poll_limit
        self.retry_backoff = retry_backoff
        self.explorer_url = explorer_url
        self.sleep = sleep

    async def submit(self, identity: Identity, payload: Payload, route: str | None = None) -> SubmissionOutcome:
        """Draw ``payload`` from ``identity`` through ``route`` until confirmed or out of retries.

        Never raises for remote, network or timeout failures; those end up in
        the log and in the returned outcome. Retries reuse the same route.
        The outcome carries the hash of the last attempt that reached the node.
        """
        attempts = 0
        while True:
            attempts += 1
            tx_hash = None
            try:
                tx_hash = await self._send(identity, payload, route, attempts)
                record = await self._confirm(tx_hash, route)
                return SubmissionOutcome(identity.address, C.Outcome.CONFIRMED, attempts, tx_hash, record)
            except Exception as e:
                msg = error_message(e)
                log.error("[ERROR] %s %s", identity.address, msg)
                if not self.retry_ledger.should_retry(identity.address):
                    log.warning("Giving up on %s after %s attempt(s)", identity.address, attempts)
                    return SubmissionOutcome(identity.address, C.Outcome.ABANDONED, attempts, tx_hash, error=msg)
                log.info("Retrying %s in %ss", identity.address, self.retry_backoff)
                await self.sleep(self.retry_backoff)

    async def _send(self, identity: Identity, payload: Payload, route: str | None, attempt: int) -> str:
        max_gas = self.factory.random_max_gas()
        txn = await self.factory.build(identity, payload.entry_function(self.function_id), max_gas)
        signed = await self.factory.sign(identity, txn)

        res = await self.client.submit(signed, route)
        tx_hash = res.get("hash")
        if not tx_hash:
            raise GraffitiError(f"Submission accepted without a hash: {res}")
        log.info("tx: %s", self.explorer_url.format(tx_hash=tx_hash))

        await self.store.track(PendingTransaction(
            tx_hash=tx_hash,
            account=identity.address,
            route=route,
            pixels=len(payload),
            max_gas=max_gas,
            attempt=attempt,
        ))
        return tx_hash

    async def _confirm(self, tx_hash: str, route: str | None) -> dict:
        try:
            record = await self.wait_for_transaction(tx_hash, route)
        except TransactionTimeout:
            await self.store.mark(tx_hash, state=C.TxState.TIMED_OUT)
            raise
        except Exception as e:
            await self.store.mark(tx_hash, state=C.TxState.REMOTE_FAILED, message=error_message(e))
            raise

        await self.store.mark(
            tx_hash,
            state=C.TxState.CONFIRMED,
            version=record.get("version"),
            vm_status=record.get("vm_status"),
            gas_used=record.get("gas_used"),
        )
        return record

    async def wait_for_transaction(self, tx_hash: str, route: str | None = None) -> dict:
        await self._wait_until_resolved(tx_hash, route)
        return await self._wait_until_success(tx_hash, route)

    async def _wait_until_resolved(self, tx_hash: str, route: str | None) -> int:
        # Not found just means the node hasn't indexed it yet
        for poll in range(1, self.poll_limit + 1):
            r = await self.client.fetch_by_hash(tx_hash, route)
            if not r.pending:
                return poll
            state = C.TxState.NOT_FOUND if r.not_found else C.TxState.PENDING
            await self.store.mark(tx_hash, state=state, polls=poll)
            if poll < self.poll_limit:
                await self.sleep(self.poll_interval)
        raise TransactionTimeout(tx_hash, self.poll_limit)

    async def _wait_until_success(self, tx_hash: str, route: str | None) -> dict:
        r = None
        for fetch in range(1, self.poll_limit + 1):
            r = await self.client.fetch_by_hash(tx_hash, route)
            if r.success:
                return r.record
            if fetch < self.poll_limit:
                await self.sleep(self.poll_interval)

        if r is not None and not r.pending and r.record.get("success") is False:
            raise TransactionFailed(tx_hash, r.record.get("vm_status"))
        raise TransactionTimeout(tx_hash, self.poll_limit)

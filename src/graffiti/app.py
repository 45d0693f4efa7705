import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel, Field

import graffiti.constants as C
from graffiti.config import cfg
from graffiti.errors import GraffitiError
from graffiti.grid import generate_pixel_set
from graffiti.identities import load_identities
from graffiti.ledger_client import LedgerClient
from graffiti.lifecycle import TransactionLifecycleManager
from graffiti.logging_config import setup_logging
from graffiti.orchestrator import BalanceOracle, DrawSettings, Orchestrator
from graffiti.payload import encode
from graffiti.retries import RetryLedger
from graffiti.store import TransactionStore
from graffiti.txn_factory import TxnDefaults, TxnFactory

setup_logging()
log = logging.getLogger("graffiti.app")

RPC = cfg["node"]["rpc"]


async def _probe_node(client: LedgerClient, max_retries: int = 30, retry_delay: float = 2.0) -> None:
    """Hit the node's ledger info endpoint until it answers.

    Args:
        client: Client pointed at the node REST API
        max_retries: Maximum number of attempts (default: 30 = 1 minute with 2s delay)
        retry_delay: Seconds to wait between attempts
    """
    for attempt in range(1, max_retries + 1):
        try:
            info = await client.ledger_info()
            log.info(f"Node responding (attempt {attempt}/{max_retries}), chain_id={info.get('chain_id')} "
                     f"ledger_version={info.get('ledger_version')}")
            return
        except GraffitiError as e:
            if attempt < max_retries:
                log.info(f"Node not ready yet (attempt {attempt}/{max_retries}): {e.message} - retrying in {retry_delay}s...")
                await asyncio.sleep(retry_delay)
            else:
                log.error(f"Node failed after {max_retries} attempts")
                raise


def build_orchestrator(client: LedgerClient, config: dict) -> Orchestrator:
    retry_ledger = RetryLedger(config["retries"]["max"])
    store = TransactionStore(config["store"]["max_history"])
    lifecycle = TransactionLifecycleManager(
        client,
        TxnFactory(client, TxnDefaults.from_config(config["gas"])),
        retry_ledger,
        store=store,
        function_id=config["canvas"]["function"],
        poll_interval=config["timeout"]["poll_interval"],
        poll_limit=config["timeout"]["poll_limit"],
        retry_backoff=config["timeout"]["retry_backoff"],
        explorer_url=config["node"]["explorer"],
    )
    balances = BalanceOracle(client, retry_ledger, backoff=config["timeout"]["balance_backoff"])
    identities = load_identities(config["files"]["wallets"], config["files"]["proxies"])
    return Orchestrator(identities, balances, lifecycle, DrawSettings.from_config(config))


@asynccontextmanager
async def lifespan(app: FastAPI):
    stop = asyncio.Event()
    client = LedgerClient(RPC, timeout=cfg["node"]["http_timeout"])

    log.info("Probing node %s ...", RPC)
    await _probe_node(client)

    app.state.stop = stop
    app.state.orchestrator = build_orchestrator(client, cfg)

    async with asyncio.TaskGroup() as tg:
        app.state.task = tg.create_task(app.state.orchestrator.run(stop), name="orchestrator")
        log.info("Background tasks started: orchestrator")
        try:
            yield
        finally:
            log.info("Shutting down...")
            stop.set()
            # A drawing can be mid-poll; don't wait out the whole lifecycle
            app.state.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await app.state.task

    await client.aclose()
    log.info("Shutdown complete")


app = FastAPI(
    title="Graffiti",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "State", "description": "Tracked transactions and retry counters"},
        {"name": "Workload", "description": "Control the drawing rotation"},
        {"name": "Canvas", "description": "Generate drawings without submitting"},
    ],
)

r_state = APIRouter(prefix="/state", tags=["State"])
r_workload = APIRouter(prefix="/workload", tags=["Workload"])
r_canvas = APIRouter(tags=["Canvas"])


class PreviewReq(BaseModel):
    pixels: int = Field(default=40, ge=1, le=1000)
    max_lines: int = Field(default=C.MAX_LINES, ge=1)


class PreviewResp(BaseModel):
    canvas: str
    walks: int
    xs: list[int]
    ys: list[int]
    colors: list[int]


def _orchestrator() -> Orchestrator:
    orch = getattr(app.state, "orchestrator", None)
    if orch is None:
        raise HTTPException(status_code=503, detail="Orchestrator not started")
    return orch


@app.get("/health")
def health():
    return {"status": "ok"}


@r_state.get("/summary")
async def state_summary():
    orch = _orchestrator()
    return {
        "transactions": orch.lifecycle.store.snapshot_stats(),
        "run": orch.stats.as_dict(),
        "identities": len(orch.identities),
    }


@r_state.get("/pending")
async def state_pending():
    return await _orchestrator().lifecycle.store.find_by_state(*C.OPEN_STATES)


@r_state.get("/failed")
async def state_failed():
    return await _orchestrator().lifecycle.store.find_by_state(C.TxState.REMOTE_FAILED, C.TxState.TIMED_OUT)


@r_state.get("/tx/{tx_hash}")
async def state_tx(tx_hash: str):
    rec = await _orchestrator().lifecycle.store.get(tx_hash)
    if rec is None:
        raise HTTPException(status_code=404, detail=f"Unknown transaction {tx_hash}")
    return {**rec, "link": C.EXPLORER_TXN_URL.format(tx_hash=tx_hash)}


@r_state.get("/retries")
async def state_retries():
    ledger = _orchestrator().lifecycle.retry_ledger
    return {"max_retries": ledger.max_retries, "failures": ledger.snapshot()}


@r_workload.get("/status")
async def workload_status():
    orch = _orchestrator()
    last = orch.last_outcome
    return {
        "running": not app.state.stop.is_set(),
        "next_index": orch.index,
        "stats": orch.stats.as_dict(),
        "last_outcome": None if last is None else {
            "address": last.address,
            "state": last.state,
            "attempts": last.attempts,
            "tx_hash": last.tx_hash,
            "error": last.error,
        },
    }


@r_workload.post("/stop")
async def workload_stop():
    _orchestrator()
    if app.state.stop.is_set():
        raise HTTPException(status_code=400, detail="Workload not running")
    log.info("Stopping rotation after the current account")
    app.state.stop.set()
    return {"status": "stopping"}


@r_canvas.post("/preview", response_model=PreviewResp)
async def preview(req: PreviewReq):
    pixel_set = generate_pixel_set(req.pixels, req.max_lines)
    payload = encode(pixel_set, cfg["canvas"]["canvas"])
    return PreviewResp(
        canvas=payload.resource_id,
        walks=pixel_set.walks,
        xs=payload.xs,
        ys=payload.ys,
        colors=payload.colors,
    )


app.include_router(r_state)
app.include_router(r_workload)
app.include_router(r_canvas)

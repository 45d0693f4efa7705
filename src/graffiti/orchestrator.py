import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from time import perf_counter

import graffiti.constants as C
from graffiti import randoms
from graffiti.errors import RemoteRejected
from graffiti.grid import generate_pixel_set
from graffiti.identities import Identity, IdentityRoute
from graffiti.ledger_client import LedgerClient
from graffiti.lifecycle import Sleep, SubmissionOutcome, TransactionLifecycleManager, error_message
from graffiti.payload import encode
from graffiti.retries import RetryLedger

log = logging.getLogger("graffiti.orchestrator")

SEPARATOR = "-" * 130


class BalanceOracle:
    """APT balance lookups that treat a missing coin store as an empty account."""

    def __init__(self, client: LedgerClient, retry_ledger: RetryLedger, *,
                 backoff: float = C.BALANCE_BACKOFF, sleep: Sleep = asyncio.sleep) -> None:
        self.client = client
        self.retry_ledger = retry_ledger
        self.backoff = backoff
        self.sleep = sleep

    async def check_balance(self, identity: Identity) -> float | None:
        """Balance in APT, or None once the account is out of retries."""
        while True:
            try:
                balance = await self.client.coin_balance(identity.address) / C.OCTAS_PER_APT
                log.info("Balance %s APT", balance)
                return balance
            except Exception as e:
                msg = error_message(e)
                if isinstance(e, RemoteRejected) and "Resource not found" in msg:
                    log.info("Balance 0 APT")
                    return 0.0
                log.error("[ERROR] %s %s", identity.address, msg)

            if not self.retry_ledger.should_retry(identity.address):
                return None
            await self.sleep(self.backoff)


@dataclass(slots=True)
class DrawSettings:
    canvas_id: str = C.CANVAS_ID
    pixels_from: int = 20
    pixels_to: int = 60
    max_lines: int = C.MAX_LINES
    x_bounds: tuple[int, int] = (C.LENGTH_START, C.LENGTH_STOP)
    y_bounds: tuple[int, int] = (C.WEIGHT_START, C.WEIGHT_STOP)
    max_color: int = C.MAX_COLOR
    sleep_from: float = 30.0
    sleep_to: float = 60.0
    skip_pause: float = C.BALANCE_BACKOFF

    @classmethod
    def from_config(cls, cfg: dict) -> "DrawSettings":
        canvas, pixels, pause = cfg["canvas"], cfg["pixels"], cfg["sleep"]
        return cls(
            canvas_id=canvas["canvas"],
            pixels_from=pixels["from"],
            pixels_to=pixels["to"],
            max_lines=pixels.get("max_lines", C.MAX_LINES),
            x_bounds=tuple(canvas.get("length", (C.LENGTH_START, C.LENGTH_STOP))),
            y_bounds=tuple(canvas.get("weight", (C.WEIGHT_START, C.WEIGHT_STOP))),
            max_color=canvas.get("max_color", C.MAX_COLOR),
            sleep_from=pause["from"],
            sleep_to=pause["to"],
            skip_pause=pause.get("skip", C.BALANCE_BACKOFF),
        )


@dataclass(slots=True)
class RunStats:
    processed: int = 0
    skipped: int = 0
    confirmed: int = 0
    abandoned: int = 0
    started_at: float = field(default_factory=perf_counter)

    def record(self, outcome: SubmissionOutcome) -> None:
        if outcome.confirmed:
            self.confirmed += 1
        else:
            self.abandoned += 1

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "confirmed": self.confirmed,
            "abandoned": self.abandoned,
            "uptime_seconds": perf_counter() - self.started_at,
        }


class Orchestrator:
    """Round-robin over identities, one drawing each, forever."""

    def __init__(
        self,
        identities: Sequence[IdentityRoute],
        balances: BalanceOracle,
        lifecycle: TransactionLifecycleManager,
        settings: DrawSettings | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.identities = list(identities)
        self.balances = balances
        self.lifecycle = lifecycle
        self.settings = settings or DrawSettings()
        self.sleep = sleep
        self.index = 0
        self.stats = RunStats()
        self.last_outcome: SubmissionOutcome | None = None

    async def draw(self, entry: IdentityRoute) -> SubmissionOutcome:
        s = self.settings
        count = randoms.randint(s.pixels_from, s.pixels_to)
        pixel_set = generate_pixel_set(count, s.max_lines, s.x_bounds, s.y_bounds, s.max_color)
        payload = encode(pixel_set, s.canvas_id)
        log.info("Drawing %s pixels", len(payload))
        return await self.lifecycle.submit(entry.identity, payload, entry.route)

    async def step(self) -> SubmissionOutcome | None:
        """Process the identity at the cursor and advance it."""
        entry = self.identities[self.index]
        self.index = (self.index + 1) % len(self.identities)
        self.stats.processed += 1

        log.info("Account %s via %s", entry.identity.address, entry.route or "direct")
        balance = await self.balances.check_balance(entry.identity)
        if not balance:
            self.stats.skipped += 1
            await self.sleep(self.settings.skip_pause)
            return None

        outcome = await self.draw(entry)
        self.stats.record(outcome)
        self.last_outcome = outcome
        log.info(SEPARATOR)
        await self.sleep(randoms.uniform(self.settings.sleep_from, self.settings.sleep_to))
        return outcome

    async def run(self, stop: asyncio.Event) -> None:
        if not self.identities:
            log.warning("No identities loaded, nothing to do")
            return
        log.info("Starting rotation over %s identities", len(self.identities))
        while not stop.is_set():
            try:
                await self.step()
            except asyncio.CancelledError:
                raise
            except Exception:
                # A single account must never take the rotation down
                log.exception("Unexpected error, moving on to the next account")
                await self.sleep(1.0)
        log.info("Rotation stopped - Stats: %s", self.stats.as_dict())

from typing import Final
from enum import StrEnum

# Canvas contract on mainnet
DRAW_FUNCTION: Final = "0x915efe6647e0440f927d46e39bcb5eb040a7e567e1756e002073bc6e26f2cd23::canvas_token::draw"
CANVAS_ID: Final = "0x5d45bb2a6f391440ba10444c7734559bd5ef9053930e3ef53d05be332518522b"

APT_COIN_STORE: Final = "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>"
OCTAS_PER_APT: Final = 100_000_000

EXPLORER_TXN_URL: Final = "https://explorer.aptoslabs.com/txn/{tx_hash}?network=mainnet"

# Canvas bounds. x runs over "length", y over "weight".
LENGTH_START: Final = 0
LENGTH_STOP: Final = 999
WEIGHT_START: Final = 0
WEIGHT_STOP: Final = 999
MAX_COLOR: Final = 7
MAX_LINES: Final = 4

MIN_GAS: Final = 700
MAX_GAS: Final = 2000
GAS_UNIT_PRICE: Final = 100
EXPIRATION_SECS: Final = 600

POLL_INTERVAL: Final = 1.0
POLL_LIMIT: Final = 50
RETRY_BACKOFF: Final = 10.0
BALANCE_BACKOFF: Final = 2.0
HTTP_TIMEOUT: Final = 10.0

# Finalized transactions kept in memory for the status API
MAX_HISTORY: Final = 5000

# Shortest line kept when reading wallet and proxy files
MIN_LINE_LENGTH: Final = 10

PENDING_TXN_TYPE: Final = "pending_transaction"


class TxState(StrEnum):
    BUILT        = "BUILT"
    SUBMITTED    = "SUBMITTED"
    PENDING      = "PENDING"
    NOT_FOUND    = "NOT_FOUND"
    CONFIRMED    = "CONFIRMED"
    REMOTE_FAILED = "REMOTE_FAILED"
    TIMED_OUT    = "TIMED_OUT"


class Outcome(StrEnum):
    CONFIRMED = "CONFIRMED"
    ABANDONED = "ABANDONED"


TERMINAL_STATE = {TxState.CONFIRMED, TxState.REMOTE_FAILED, TxState.TIMED_OUT}
OPEN_STATES = {TxState.BUILT, TxState.SUBMITTED, TxState.PENDING, TxState.NOT_FOUND}

__all__ = [
    "APT_COIN_STORE",
    "BALANCE_BACKOFF",
    "CANVAS_ID",
    "DRAW_FUNCTION",
    "EXPIRATION_SECS",
    "EXPLORER_TXN_URL",
    "GAS_UNIT_PRICE",
    "HTTP_TIMEOUT",
    "LENGTH_START",
    "LENGTH_STOP",
    "MAX_COLOR",
    "MAX_GAS",
    "MAX_HISTORY",
    "MAX_LINES",
    "MIN_GAS",
    "MIN_LINE_LENGTH",
    "OCTAS_PER_APT",
    "OPEN_STATES",
    "PENDING_TXN_TYPE",
    "POLL_INTERVAL",
    "POLL_LIMIT",
    "RETRY_BACKOFF",
    "TERMINAL_STATE",
    "WEIGHT_START",
    "WEIGHT_STOP",

    ######
    "Outcome",
    "TxState",
]

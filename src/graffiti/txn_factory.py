import logging
import time
from dataclasses import dataclass
from typing import Any

import graffiti.constants as C
from graffiti import randoms
from graffiti.identities import Identity
from graffiti.ledger_client import LedgerClient

log = logging.getLogger("graffiti.txn")


@dataclass(slots=True)
class TxnDefaults:
    min_gas: int = C.MIN_GAS
    max_gas: int = C.MAX_GAS
    gas_unit_price: int = C.GAS_UNIT_PRICE
    expiration_secs: int = C.EXPIRATION_SECS

    @classmethod
    def from_config(cls, gas: dict) -> "TxnDefaults":
        return cls(
            min_gas=gas.get("min", C.MIN_GAS),
            max_gas=gas.get("max", C.MAX_GAS),
            gas_unit_price=gas.get("unit_price", C.GAS_UNIT_PRICE),
            expiration_secs=gas.get("expiration_secs", C.EXPIRATION_SECS),
        )


class TxnFactory:
    """Builds and signs entry function transactions in the node's JSON format.

    The node does the BCS encoding for us via ``encode_submission``; we only
    sign the bytes it hands back.
    """

    def __init__(self, client: LedgerClient, defaults: TxnDefaults | None = None) -> None:
        self.client = client
        self.defaults = defaults or TxnDefaults()

    def random_max_gas(self) -> int:
        # Varying max gas per attempt keeps the fee fields from looking uniform on chain
        return randoms.randint(self.defaults.min_gas, self.defaults.max_gas)

    async def build(self, identity: Identity, entry_function: dict[str, Any], max_gas: int) -> dict[str, Any]:
        sequence = await self.client.account_sequence(identity.address)
        txn = {
            "sender": identity.address,
            "sequence_number": str(sequence),
            "max_gas_amount": str(max_gas),
            "gas_unit_price": str(self.defaults.gas_unit_price),
            "expiration_timestamp_secs": str(int(time.time()) + self.defaults.expiration_secs),
            "payload": entry_function,
        }
        log.debug("Built txn for %s seq=%s max_gas=%s", identity.address, sequence, max_gas)
        return txn

    async def sign(self, identity: Identity, txn: dict[str, Any]) -> dict[str, Any]:
        message = await self.client.encode_submission(txn)
        return {
            **txn,
            "signature": {
                "type": "ed25519_signature",
                "public_key": identity.public_key_hex,
                "signature": identity.sign(message),
            },
        }

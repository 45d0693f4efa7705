import json
import time
from unittest import IsolatedAsyncioTestCase

import httpx
from nacl.signing import VerifyKey

from graffiti import randoms
from graffiti.identities import Identity
from graffiti.ledger_client import LedgerClient
from graffiti.txn_factory import TxnDefaults, TxnFactory

SIGNING_MESSAGE = "b5e97db07fa0bd0e5598aa3643a9bc6f6693bddc1a9fec9e674a461eaa00b193"
ENTRY = {"type": "entry_function_payload", "function": "0x1::m::f", "type_arguments": [], "arguments": []}


class TxnFactoryTests(IsolatedAsyncioTestCase):
    def setUp(self):
        self.identity = Identity.from_private_key("0x" + "22" * 32)
        self.encoded = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/encode_submission"):
                self.encoded.append(json.loads(request.content))
                return httpx.Response(200, json="0x" + SIGNING_MESSAGE)
            return httpx.Response(200, json={"sequence_number": "5"})

        self.client = LedgerClient("https://node.example/v1", transport=httpx.MockTransport(handler))
        self.factory = TxnFactory(self.client, TxnDefaults(gas_unit_price=150, expiration_secs=30))

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_build(self):
        before = int(time.time())
        txn = await self.factory.build(self.identity, ENTRY, 1500)

        self.assertEqual(txn["sender"], self.identity.address)
        self.assertEqual(txn["sequence_number"], "5")
        self.assertEqual(txn["max_gas_amount"], "1500")
        self.assertEqual(txn["gas_unit_price"], "150")
        self.assertGreaterEqual(int(txn["expiration_timestamp_secs"]), before + 30)
        self.assertEqual(txn["payload"], ENTRY)

    async def test_sign_signs_the_node_encoding(self):
        txn = await self.factory.build(self.identity, ENTRY, 900)
        signed = await self.factory.sign(self.identity, txn)

        self.assertEqual(self.encoded, [txn])
        sig = signed["signature"]
        self.assertEqual(sig["type"], "ed25519_signature")
        self.assertEqual(sig["public_key"], self.identity.public_key_hex)
        VerifyKey(bytes.fromhex(sig["public_key"][2:])).verify(
            bytes.fromhex(SIGNING_MESSAGE), bytes.fromhex(sig["signature"][2:])
        )
        self.assertNotIn("signature", txn)

    def test_random_max_gas_range(self):
        randoms.seed(7)
        draws = {self.factory.random_max_gas() for _ in range(500)}
        self.assertTrue(all(700 <= g <= 2000 for g in draws))
        self.assertGreater(len(draws), 100)

"""Thin async client for the node's REST API, optionally through a proxy."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

import graffiti.constants as C
from graffiti.errors import NetworkError, RemoteRejected

log = logging.getLogger("graffiti.client")


@dataclass(slots=True)
class LedgerResponse:
    status: int
    record: dict[str, Any]
    text: str = ""

    @property
    def not_found(self) -> bool:
        return self.status == 404

    @property
    def pending(self) -> bool:
        return self.not_found or self.record.get("type") == C.PENDING_TXN_TYPE

    @property
    def success(self) -> bool:
        return bool(self.record.get("success"))


class LedgerClient:
    """One ``httpx.AsyncClient`` per route, plus a direct one for ``route=None``.

    ``transport`` is handed to every client created, which is how tests plug
    in an ``httpx.MockTransport``.
    """

    def __init__(self, base_url: str, *, timeout: float = C.HTTP_TIMEOUT,
                 transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._clients: dict[str | None, httpx.AsyncClient] = {}

    def _client(self, route: str | None = None) -> httpx.AsyncClient:
        client = self._clients.get(route)
        if client is None:
            kwargs: dict[str, Any] = {"base_url": self.base_url, "timeout": self.timeout}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            elif route is not None:
                kwargs["proxy"] = route
            client = httpx.AsyncClient(**kwargs)
            self._clients[route] = client
        return client

    async def _request(self, method: str, url: str, route: str | None = None, **kwargs) -> httpx.Response:
        try:
            return await self._client(route).request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise NetworkError(f"{type(e).__name__}: {e}") from e

    @staticmethod
    def _raise_for_status(r: httpx.Response) -> None:
        if r.status_code >= 400:
            raise RemoteRejected(r.status_code, r.text)

    async def ledger_info(self) -> dict:
        r = await self._request("GET", "/")
        self._raise_for_status(r)
        return r.json()

    async def account_sequence(self, address: str) -> int:
        r = await self._request("GET", f"/accounts/{address}")
        self._raise_for_status(r)
        return int(r.json()["sequence_number"])

    async def coin_balance(self, address: str) -> int:
        """Octas held in the account's APT coin store. Raises RemoteRejected on 404."""
        r = await self._request("GET", f"/accounts/{address}/resource/{C.APT_COIN_STORE}")
        self._raise_for_status(r)
        return int(r.json()["data"]["coin"]["value"])

    async def encode_submission(self, txn: dict) -> bytes:
        r = await self._request("POST", "/transactions/encode_submission", json=txn)
        self._raise_for_status(r)
        return bytes.fromhex(r.json().removeprefix("0x"))

    async def submit(self, signed_txn: dict, route: str | None = None) -> dict:
        r = await self._request("POST", "/transactions", route, json=signed_txn)
        self._raise_for_status(r)
        return r.json()

    async def fetch_by_hash(self, tx_hash: str, route: str | None = None) -> LedgerResponse:
        r = await self._request("GET", f"/transactions/by_hash/{tx_hash}", route)
        if r.status_code == 404:
            return LedgerResponse(status=404, record={}, text=r.text)
        self._raise_for_status(r)
        return LedgerResponse(status=r.status_code, record=r.json(), text=r.text)

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List

from aiohttp import web
from aiohttp.test_utils import TestServer


@dataclass
class RecordingNodeServer:
    """
    Minimal JSON-RPC node: answers from `results` keyed by "method" or "method params...",
    and records every request body it receives.
    """

    results: Dict[str, Any]
    errors: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    requests: List[Dict[str, Any]] = field(default_factory=list)
    status: int = 200

    @staticmethod
    def key(method: str, params: List[Any]) -> str:
        return " ".join([method, *(str(p) for p in params)])

    async def handler(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.requests.append(body)
        if self.status != 200:
            return web.Response(status=self.status, text="unavailable")
        key = self.key(body["method"], body["params"])
        response: Dict[str, Any] = {"jsonrpc": "2.0", "id": body["id"]}
        if key in self.errors or body["method"] in self.errors:
            response["error"] = self.errors.get(key, self.errors.get(body["method"]))
        elif key in self.results:
            response["result"] = self.results[key]
        else:
            response["result"] = self.results.get(body["method"])
        return web.json_response(response)

    @asynccontextmanager
    async def serve(self) -> AsyncIterator[str]:
        app = web.Application()
        app.router.add_post("/", self.handler)
        server = TestServer(app)
        await server.start_server()
        try:
            yield str(server.make_url("/"))
        finally:
            await server.close()


def rpc_block(number: int, transactions: List[Dict[str, Any]], base_fee: int = 12_000_000_000) -> Dict[str, Any]:
    return {
        "number": hex(number),
        "baseFeePerGas": hex(base_fee),
        "gasUsed": hex(15_000_000),
        "gasLimit": hex(30_000_000),
        "transactions": transactions,
    }


def rpc_tx(tx_type: int, priority_fee: int = 0) -> Dict[str, Any]:
    tx: Dict[str, Any] = {"type": hex(tx_type), "gasPrice": hex(20_000_000_000)}
    if tx_type == 2:
        tx["maxPriorityFeePerGas"] = hex(priority_fee)
        tx["maxFeePerGas"] = hex(priority_fee + 30_000_000_000)
    return tx

from __future__ import annotations

import itertools
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import aiohttp
from typing_extensions import Self

from feebid.estimator.fee_estimation import BlockInfo, PendingBlockInfo, TransactionFeeInfo
from feebid.util.errors import BlockNotFoundError

log = logging.getLogger(__name__)

DEFAULT_RPC_TIMEOUT = 30


# It would be better to not inherit from ValueError.  Callers that only care about
# malformed answers can keep catching ValueError.
class ResponseFailureError(ValueError):
    def __init__(self, response: Dict[str, Any]):
        self.response = response
        super().__init__(f"RPC response failure: {json.dumps(response)}")


def decode_quantity(value: Union[str, int]) -> int:
    """
    JSON-RPC quantities are hex strings ("0x1b4"). They are decoded straight to int,
    never through a float, so fees above 2**53 wei stay exact.
    """
    if isinstance(value, int):
        return value
    if not value.startswith(("0x", "0X")):
        raise ValueError(f"not a hex quantity: {value!r}")
    return int(value, 16)


def decode_transaction(tx: Dict[str, Any]) -> TransactionFeeInfo:
    # pre EIP-2718 nodes omit `type` on legacy transactions
    tx_type = decode_quantity(tx.get("type", 0))
    priority_fee = tx.get("maxPriorityFeePerGas")
    return TransactionFeeInfo(
        tx_type=tx_type,
        max_priority_fee_per_gas=None if priority_fee is None else decode_quantity(priority_fee),
    )


def decode_block(block: Dict[str, Any]) -> BlockInfo:
    transactions: List[TransactionFeeInfo] = []
    for tx in block.get("transactions", []):
        # hashes only, the block was requested without full transactions
        if isinstance(tx, str):
            raise ValueError(f"block {block.get('number')} holds transaction hashes, not transaction objects")
        transactions.append(decode_transaction(tx))
    return BlockInfo(
        number=decode_quantity(block["number"]),
        base_fee_per_gas=decode_quantity(block.get("baseFeePerGas", 0)),
        gas_used=decode_quantity(block["gasUsed"]),
        gas_limit=decode_quantity(block["gasLimit"]),
        transactions=transactions,
    )


@dataclass
class EthRpcClient:
    """
    Client to an Ethereum compatible node's JSON-RPC interface. Uses HTTP/JSON (JSON-RPC 2.0 over POST)
    and converts the hex encoded answers into native python objects before returning.
    Implements the `FeeDataSource` protocol used by the fee estimator.
    """

    url: str
    session: aiohttp.ClientSession
    _request_ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    @classmethod
    async def create(cls, url: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> Self:
        return cls(url=url, session=aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)))

    @classmethod
    @asynccontextmanager
    async def create_as_context(cls, url: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> AsyncIterator[Self]:
        self = await cls.create(url=url, timeout=timeout)
        try:
            yield self
        finally:
            await self.close()

    async def fetch(self, method: str, params: List[Any]) -> Any:
        request_json = {"jsonrpc": "2.0", "id": next(self._request_ids), "method": method, "params": params}
        log.debug(f"-> {method} {params}")
        async with self.session.post(self.url, json=request_json) as response:
            response.raise_for_status()
            res_json = await response.json(content_type=None)
            if "error" in res_json:
                raise ResponseFailureError(res_json)
            return res_json.get("result")

    async def get_block_number(self) -> int:
        return decode_quantity(await self.fetch("eth_blockNumber", []))

    async def get_block_with_transactions(self, number: int) -> BlockInfo:
        block: Optional[Dict[str, Any]] = await self.fetch("eth_getBlockByNumber", [hex(number), True])
        if block is None:
            raise BlockNotFoundError(str(number))
        return decode_block(block)

    async def get_pending_block(self) -> PendingBlockInfo:
        block: Optional[Dict[str, Any]] = await self.fetch("eth_getBlockByNumber", ["pending", False])
        if block is None:
            raise BlockNotFoundError("pending")
        base_fee = block.get("baseFeePerGas")
        return PendingBlockInfo(base_fee_per_gas=None if base_fee is None else decode_quantity(base_fee))

    async def close(self) -> None:
        await self.session.close()

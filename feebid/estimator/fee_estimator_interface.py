from __future__ import annotations

from typing_extensions import Protocol

from feebid.estimator.fee_estimation import BlockInfo, PendingBlockInfo


class FeeDataSource(Protocol):
    async def get_block_number(self) -> int:
        """Number of the latest confirmed block"""

    async def get_block_with_transactions(self, number: int) -> BlockInfo:
        """Header fields and full transaction list of block `number`. Raises if the block is unknown"""

    async def get_pending_block(self) -> PendingBlockInfo:
        """Header of the next, not yet mined, block"""

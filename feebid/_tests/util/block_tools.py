from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from feebid.estimator.fee_estimation import BlockInfo, PendingBlockInfo, TransactionFeeInfo
from feebid.util.errors import BlockNotFoundError

GAS_LIMIT = 30_000_000


def make_block(
    number: int,
    priority_fees: Optional[Sequence[int]] = None,
    legacy_count: int = 0,
    base_fee: int = 10_000_000_000,
    gas_used: int = GAS_LIMIT // 2,
    gas_limit: int = GAS_LIMIT,
) -> BlockInfo:
    transactions = [TransactionFeeInfo(tx_type=0) for _ in range(legacy_count)]
    for fee in priority_fees or []:
        transactions.append(TransactionFeeInfo(tx_type=2, max_priority_fee_per_gas=fee))
    return BlockInfo(
        number=number,
        base_fee_per_gas=base_fee,
        gas_used=gas_used,
        gas_limit=gas_limit,
        transactions=transactions,
    )


@dataclass
class FakeDataSource:
    """
    In memory `FeeDataSource` serving fixture blocks. Records the block numbers requested.
    """

    blocks: List[BlockInfo]
    head: int
    pending_base_fee: Optional[int] = 10_000_000_000
    requested: List[int] = field(default_factory=list)
    calls: int = 0

    @property
    def by_number(self) -> Dict[int, BlockInfo]:
        return {block.number: block for block in self.blocks}

    async def get_block_number(self) -> int:
        self.calls += 1
        return self.head

    async def get_block_with_transactions(self, number: int) -> BlockInfo:
        self.calls += 1
        self.requested.append(number)
        block = self.by_number.get(number)
        if block is None:
            raise BlockNotFoundError(str(number))
        return block

    async def get_pending_block(self) -> PendingBlockInfo:
        self.calls += 1
        return PendingBlockInfo(base_fee_per_gas=self.pending_base_fee)

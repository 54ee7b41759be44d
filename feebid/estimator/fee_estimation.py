from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from feebid.util.statistics import Number


def json_number(value: Number) -> Union[int, float]:
    # json has no exact fractions, interpolated tiers are written as floats
    return value if isinstance(value, int) else float(value)


@dataclass(frozen=True)
class TransactionFeeInfo:
    """
    The fee fields of one transaction, as the fee estimator sees it.
    Legacy (flat gas price) transactions carry no `max_priority_fee_per_gas`.
    """

    tx_type: int
    max_priority_fee_per_gas: Optional[int] = None


@dataclass(frozen=True)
class BlockInfo:
    """
    A confirmed block with its full transaction list, as delivered by a `FeeDataSource`.
    All amounts are in wei.
    """

    number: int
    base_fee_per_gas: int
    gas_used: int
    gas_limit: int
    transactions: List[TransactionFeeInfo] = field(default_factory=list)


@dataclass(frozen=True)
class PendingBlockInfo:
    # None on chains that predate the fee market
    base_fee_per_gas: Optional[int]


@dataclass(frozen=True)
class BlockFeeSummary:
    """
    Per block statistics derived from a `BlockInfo`.

    Attributes:
        block_number (int): number of the summarized block
        base_fee_per_gas (int): base fee of that block, in wei
        priority_fee_tiers (Optional[Tuple]): priority fee quantiles (slow, average, fast),
            None when the block holds no fee-market transaction
        fill_ratio (float): gas used divided by gas limit, how full the block was
        sample_count (int): number of priority fees the tiers were computed from
    """

    block_number: int
    base_fee_per_gas: int
    priority_fee_tiers: Optional[Tuple[Number, Number, Number]]
    fill_ratio: float
    sample_count: int


@dataclass(frozen=True)
class FeeEstimate:
    """
    Total fee bids per gas, in wei: the pending block's base fee plus the mean priority tier.
    """

    slow: int
    average: int
    fast: int
    base_fee_per_gas: int
    priority_fee_tiers: Tuple[int, int, int]
    blocks: List[BlockFeeSummary] = field(default_factory=list)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "slow": self.slow,
            "average": self.average,
            "fast": self.fast,
            "base_fee_per_gas": self.base_fee_per_gas,
            "priority_fee_tiers": list(self.priority_fee_tiers),
            "blocks": [
                {
                    "number": b.block_number,
                    "base_fee_per_gas": b.base_fee_per_gas,
                    "priority_fee_tiers": (
                        None if b.priority_fee_tiers is None else [json_number(t) for t in b.priority_fee_tiers]
                    ),
                    "fill_ratio": b.fill_ratio,
                    "sample_count": b.sample_count,
                }
                for b in self.blocks
            ],
        }

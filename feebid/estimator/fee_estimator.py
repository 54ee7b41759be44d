from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from feebid.estimator.fee_estimation import BlockFeeSummary, BlockInfo, FeeEstimate
from feebid.estimator.fee_estimator_constants import DEFAULT_PERCENTILES, DEFAULT_WINDOW_SIZE, DYNAMIC_FEE_TX_TYPE
from feebid.estimator.fee_estimator_interface import FeeDataSource
from feebid.util.errors import EmptyWindowError, Err, InvalidConfigError, MissingBaseFeeError
from feebid.util.statistics import mean, quantile

log = logging.getLogger(__name__)


def validate_window_size(window_size: int) -> int:
    if isinstance(window_size, bool) or not isinstance(window_size, int) or window_size < 1:
        raise InvalidConfigError(Err.INVALID_WINDOW_SIZE, f"window size must be a positive integer, got {window_size!r}")
    return window_size


def validate_percentiles(percentiles: Sequence[float]) -> Tuple[float, float, float]:
    values = tuple(percentiles)
    if len(values) != 3:
        raise InvalidConfigError(Err.INVALID_PERCENTILES, f"expected 3 percentiles, got {len(values)}")
    if any(not 0 <= p <= 1 for p in values):
        raise InvalidConfigError(Err.INVALID_PERCENTILES, f"percentiles must be in [0, 1], got {list(values)}")
    if list(values) != sorted(values):
        raise InvalidConfigError(Err.INVALID_PERCENTILES, f"percentiles must be non-decreasing, got {list(values)}")
    return values[0], values[1], values[2]


def summarize_block(
    block: BlockInfo, percentiles: Sequence[float] = DEFAULT_PERCENTILES
) -> BlockFeeSummary:
    priority_fees = [
        tx.max_priority_fee_per_gas
        for tx in block.transactions
        if tx.tx_type == DYNAMIC_FEE_TX_TYPE and tx.max_priority_fee_per_gas is not None
    ]
    tiers = None
    if len(priority_fees) > 0:
        slow, average, fast = (quantile(priority_fees, p) for p in percentiles)
        tiers = (slow, average, fast)
    fill_ratio = block.gas_used / block.gas_limit if block.gas_limit > 0 else 0.0
    return BlockFeeSummary(
        block_number=block.number,
        base_fee_per_gas=block.base_fee_per_gas,
        priority_fee_tiers=tiers,
        fill_ratio=fill_ratio,
        sample_count=len(priority_fees),
    )


def aggregate_tiers(summaries: Sequence[BlockFeeSummary], logger: logging.Logger = log) -> Tuple[int, int, int]:
    """
    Mean of each priority tier across the window.
    Blocks without fee-market transactions are left out; if none has any, every tier is 0.
    """
    sampled = [s.priority_fee_tiers for s in summaries if s.priority_fee_tiers is not None]
    if len(sampled) == 0:
        logger.warning(f"No fee-market transactions in the {len(summaries)} sampled blocks, priority tiers set to 0")
        return 0, 0, 0
    if len(sampled) < len(summaries):
        logger.info(f"{len(summaries) - len(sampled)} of {len(summaries)} blocks had no fee-market transactions")
    return (
        mean([tiers[0] for tiers in sampled]),
        mean([tiers[1] for tiers in sampled]),
        mean([tiers[2] for tiers in sampled]),
    )


def combine(
    base_fee_per_gas: int, tiers: Tuple[int, int, int], blocks: Optional[List[BlockFeeSummary]] = None
) -> FeeEstimate:
    slow_tier, average_tier, fast_tier = tiers
    return FeeEstimate(
        slow=base_fee_per_gas + slow_tier,
        average=base_fee_per_gas + average_tier,
        fast=base_fee_per_gas + fast_tier,
        base_fee_per_gas=base_fee_per_gas,
        priority_fee_tiers=tiers,
        blocks=[] if blocks is None else blocks,
    )


@dataclass
class WindowFeeEstimator:
    """
    Estimates slow, average and fast fee bids from the `window_size` most recent confirmed blocks.

    Every block in the window is summarized into priority fee quantiles, the quantiles are averaged
    over the window and added to the base fee of the pending block.
    Any failing fetch aborts the estimate, a partial window would bias it.
    """

    data_source: FeeDataSource
    window_size: int = DEFAULT_WINDOW_SIZE
    percentiles: Tuple[float, float, float] = DEFAULT_PERCENTILES
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def __post_init__(self) -> None:
        validate_window_size(self.window_size)
        self.percentiles = validate_percentiles(self.percentiles)

    def window(self, current_block: int) -> range:
        return range(max(current_block - self.window_size, 0), current_block)

    async def fetch_summaries(self) -> List[BlockFeeSummary]:
        current_block = await self.data_source.get_block_number()
        block_numbers = self.window(current_block)
        if len(block_numbers) == 0:
            raise EmptyWindowError(current_block)
        self.log.debug(f"Sampling blocks {block_numbers.start} to {block_numbers.stop - 1}")
        # gather keeps the order of its arguments
        blocks = await asyncio.gather(*(self.data_source.get_block_with_transactions(n) for n in block_numbers))
        return [summarize_block(block, self.percentiles) for block in blocks]

    async def estimate(self) -> FeeEstimate:
        summaries = await self.fetch_summaries()
        tiers = aggregate_tiers(summaries, self.log)
        pending = await self.data_source.get_pending_block()
        if pending.base_fee_per_gas is None:
            raise MissingBaseFeeError()
        estimate = combine(pending.base_fee_per_gas, tiers, summaries)
        self.log.info(
            f"Fee estimate over {len(summaries)} blocks: slow {estimate.slow} average {estimate.average} "
            f"fast {estimate.fast} (base fee {estimate.base_fee_per_gas})"
        )
        return estimate

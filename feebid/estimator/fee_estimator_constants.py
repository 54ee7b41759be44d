from __future__ import annotations

# Number of most recent confirmed blocks sampled per estimate
DEFAULT_WINDOW_SIZE = 4

# Priority fee quantiles for the slow, average and fast bids
DEFAULT_PERCENTILES = (0.30, 0.60, 0.90)

# EIP-1559 transactions, the only type read for priority fees
DYNAMIC_FEE_TX_TYPE = 2

GWEI = 10**9

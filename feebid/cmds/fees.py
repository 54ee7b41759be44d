from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import aiohttp
import click

from feebid.estimator.fee_estimation import FeeEstimate
from feebid.estimator.fee_estimator import WindowFeeEstimator, validate_percentiles, validate_window_size
from feebid.estimator.fee_estimator_constants import GWEI
from feebid.rpc.rpc_client import EthRpcClient
from feebid.util.config import (
    CONFIG_FILENAME,
    estimator_settings,
    load_config,
    load_env_file,
    override_config,
    resolve_rpc_url,
)
from feebid.util.errors import FeeBidError
from feebid.util.fee_logging import initialize_logging

log = logging.getLogger(__name__)


def format_gwei(wei: float) -> str:
    return f"{wei / GWEI:.4f} gwei"


def print_fee_info(estimate: FeeEstimate, json_flag: bool) -> None:
    if json_flag:
        print(json.dumps(estimate.to_json_dict()))
        return

    print("")
    print("Sampled blocks:")
    print(f"  {'Block':>12} {'Base fee':>18} {'Fill':>7} {'Txs':>5}  Priority fee tiers")
    for block in estimate.blocks:
        tiers = "-"
        if block.priority_fee_tiers is not None:
            tiers = ", ".join(f"{float(t):.0f}" for t in block.priority_fee_tiers)
        print(
            f"  {block.block_number:>12} {block.base_fee_per_gas:>18} {block.fill_ratio:>7.2%} "
            f"{block.sample_count:>5}  {tiers}"
        )
    print("")
    print(f"  Pending base fee: {estimate.base_fee_per_gas:>18} wei ({format_gwei(estimate.base_fee_per_gas)})")
    print("")
    print("Fee estimates per gas:")
    for name, value in (("slow", estimate.slow), ("average", estimate.average), ("fast", estimate.fast)):
        print(f"    {name:>7}: {value:>18} wei ({format_gwei(value)})")
    print("")


async def estimate_cmd_async(
    root_path: Path, rpc_url: Optional[str], window_size: Optional[int], json_flag: bool
) -> FeeEstimate:
    config = load_config(root_path, CONFIG_FILENAME)
    config = override_config(config, {"estimator.window_size": window_size})
    initialize_logging("feebid", config["logging"], root_path)

    window, percentiles = estimator_settings(config)
    # a bad window is a configuration error, reported before anything is fetched
    validate_window_size(window)
    validate_percentiles(percentiles)
    load_env_file()
    url = resolve_rpc_url(config, rpc_url)
    log.info(f"Estimating fees from {url} over {window} blocks")

    async with EthRpcClient.create_as_context(url, timeout=config["rpc"].get("timeout", 30)) as client:
        estimator = WindowFeeEstimator(client, window_size=window, percentiles=percentiles)
        estimate = await estimator.estimate()
    print_fee_info(estimate, json_flag)
    return estimate


@click.command("estimate", short_help="Estimate slow, average and fast fee bids")
@click.option(
    "-u",
    "--rpc-url",
    help="Node JSON-RPC url. Overrides FEEBID_RPC_URL (environment or .env) and config.yaml",
    default=None,
)
@click.option(
    "-w",
    "--window-size",
    help="Number of recent confirmed blocks to sample. See window_size under estimator in config.yaml",
    type=int,
    default=None,
)
@click.option("-j", "--json", "json_flag", is_flag=True, type=bool, default=False, help="print json")
@click.pass_context
def estimate_cmd(ctx: click.Context, rpc_url: Optional[str], window_size: Optional[int], json_flag: bool) -> None:
    # ResponseFailureError and undecodable bodies are ValueErrors, timeouts come from the session ClientTimeout
    try:
        asyncio.run(estimate_cmd_async(ctx.obj["root_path"], rpc_url, window_size, json_flag))
    except (FeeBidError, ValueError, asyncio.TimeoutError, aiohttp.ClientError) as e:
        message = str(e) or type(e).__name__
        log.error(f"Fee estimation failed: {message}")
        raise click.ClickException(message) from e

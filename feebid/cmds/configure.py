from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from feebid.util.config import CONFIG_FILENAME, lock_and_load_config, save_config, str2bool


def configure(
    root_path: Path,
    set_window_size: Optional[int],
    set_rpc_url: Optional[str],
    set_rpc_timeout: Optional[int],
    set_log_level: Optional[str],
    log_stdout: Optional[str],
) -> None:
    with lock_and_load_config(root_path, CONFIG_FILENAME) as config:
        change_made = False
        if set_window_size is not None:
            if set_window_size > 0:
                config["estimator"]["window_size"] = set_window_size
                print("Window size updated")
                change_made = True
            else:
                print("Window size not updated. It must be a positive number of blocks")
        if set_rpc_url is not None:
            config["rpc"]["url"] = set_rpc_url
            print("RPC url updated")
            change_made = True
        if set_rpc_timeout is not None:
            config["rpc"]["timeout"] = set_rpc_timeout
            print("RPC timeout updated")
            change_made = True
        if set_log_level is not None:
            config["logging"]["log_level"] = set_log_level
            print(f"Logging level updated. Check {root_path}/log/debug.log")
            change_made = True
        if log_stdout is not None:
            config["logging"]["log_stdout"] = str2bool(log_stdout)
            if config["logging"]["log_stdout"]:
                print("Logging to stdout enabled")
            else:
                print("Logging to stdout disabled")
            change_made = True

        if change_made:
            save_config(root_path, CONFIG_FILENAME, config)


@click.command("configure", help="Modify configuration", no_args_is_help=True)
@click.option("--set-window-size", help="Number of recent blocks sampled per estimate (default 4)", type=int)
@click.option("--set-rpc-url", help="JSON-RPC url of the node to read blocks from", type=str)
@click.option("--set-rpc-timeout", help="Seconds before an RPC request is abandoned (default 30)", type=int)
@click.option(
    "--set-log-level",
    "--log-level",
    help="Set the instance log level",
    type=click.Choice(["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]),
)
@click.option(
    "--log-stdout",
    help="Log to stdout instead of the log file",
    type=click.Choice(["true", "t", "false", "f"]),
)
@click.pass_context
def configure_cmd(
    ctx: click.Context,
    set_window_size: Optional[int],
    set_rpc_url: Optional[str],
    set_rpc_timeout: Optional[int],
    set_log_level: Optional[str],
    log_stdout: Optional[str],
) -> None:
    configure(ctx.obj["root_path"], set_window_size, set_rpc_url, set_rpc_timeout, set_log_level, log_stdout)

from __future__ import annotations

from pathlib import Path

import click

from feebid.util.config import CONFIG_FILENAME, config_path_for_filename, create_default_feebid_config


def init(root_path: Path, force: bool) -> None:
    config_path = config_path_for_filename(root_path, CONFIG_FILENAME)
    if config_path.is_file() and not force:
        print(f"{config_path} already exists, no change made")
        return
    create_default_feebid_config(root_path)
    print(f"Created {config_path}")


@click.command("init", short_help="Create the configuration")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config.yaml with the defaults")
@click.pass_context
def init_cmd(ctx: click.Context, force: bool) -> None:
    """
    Create a new config.yaml under the root path, see `feebid --help` for the root path in use.
    """
    init(ctx.obj["root_path"], force)

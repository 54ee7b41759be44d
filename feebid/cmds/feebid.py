from __future__ import annotations

import click

from feebid import __version__
from feebid.cmds.configure import configure_cmd
from feebid.cmds.fees import estimate_cmd
from feebid.cmds.init import init_cmd
from feebid.util.default_root import DEFAULT_ROOT_PATH

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(
    help=f"\n  Estimate fee bids for fee-market blockchains ({__version__})\n",
    epilog="Try 'feebid init', then 'feebid estimate -u http://localhost:8545'",
    context_settings=CONTEXT_SETTINGS,
)
@click.option("--root-path", default=DEFAULT_ROOT_PATH, help="Config file root", type=click.Path(), show_default=True)
@click.pass_context
def cli(ctx: click.Context, root_path: str) -> None:
    from pathlib import Path

    ctx.ensure_object(dict)
    ctx.obj["root_path"] = Path(root_path)


@cli.command("version", help="Show feebid version")
def version_cmd() -> None:
    print(__version__)


cli.add_command(init_cmd)
cli.add_command(configure_cmd)
cli.add_command(estimate_cmd)


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()

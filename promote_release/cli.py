import asyncio
import logging
import sys
from functools import update_wrapper
from pathlib import Path
from typing import Optional

import click

from promote_release import __version__
from promote_release.exceptions import PromoteReleaseError
from promote_release.pipelines.rustup import PromoteRustupPipeline
from promote_release.runtime import Runtime

DEFAULT_CONFIG_FILE = Path("~/.config/promote-release.toml").expanduser()


def click_coroutine(f):
    """ A wrapper to allow to use asyncio with click.
    https://github.com/pallets/click/issues/85
    """
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))
    return update_wrapper(wrapper, f)


def print_version(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.echo('promote-release v{}'.format(__version__))
    click.echo('Python v{}'.format(sys.version))
    ctx.exit()


@click.command(context_settings=dict(help_option_names=['-h', '--help']),
               help="Promote a rustup release from the build bucket to the distribution bucket")
@click.option('--version', is_flag=True, callback=print_version,
              expose_value=False, is_eager=True,
              help="Print version information and quit")
@click.option("--config", "-c", metavar='PATH',
              help=f"Configuration file ('{DEFAULT_CONFIG_FILE}' by default, if present)")
@click.option("--dry-run", is_flag=True,
              help="resolve everything and stage artifacts, but only report what would be uploaded")
@click.option("--verbosity", "-v", count=True,
              help="[MULTIPLE] increase output verbosity")
@click_coroutine
async def cli(config: Optional[str], dry_run: bool, verbosity: int):
    # configure logging
    if not verbosity:
        logging.basicConfig(level=logging.WARNING)
    elif verbosity == 1:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.DEBUG)

    if config:
        config_filename = Path(config)
    elif DEFAULT_CONFIG_FILE.is_file():
        config_filename = DEFAULT_CONFIG_FILE
    else:
        config_filename = None

    try:
        runtime = Runtime.from_config_file(config_filename, dry_run=dry_run)
        pipeline = PromoteRustupPipeline(runtime, runtime.promote_config())
        await pipeline.run()
    except (PromoteReleaseError, OSError) as e:
        logging.getLogger("promote_release").error("Promotion failed: %s", e)
        raise click.exceptions.Exit(1)

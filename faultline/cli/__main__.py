"""Faultline CLI - Main Entry Point.

Commands:
    categories    - List error categories with their log level and label
    check-config  - Load configuration and show the resolved values
    run           - Run a Python script under the error handler
"""

import sys
from typing import Optional, Tuple

import click

from . import __cli_name__
from .. import __version__
from ..codes import CATEGORIES, UNHANDLED, label_for, level_for
from ..config import ConfigError, ErrorHandlerConfig
from .utils.colors import error, kv, section, table


def _load_config(config_path: Optional[str], env_file: Optional[str], **overrides) -> ErrorHandlerConfig:
    config = ErrorHandlerConfig.load(path=config_path, env_file=env_file)
    return config.with_overrides(**overrides)


def _format_mask(mask: int) -> str:
    names = [c.name for c in CATEGORIES if mask & c]
    if len(names) == len(CATEGORIES):
        return "ALL"
    return "|".join(names) or "-"


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.pass_context
def cli(ctx):
    """Centralized handling of warnings, uncaught exceptions and fatal errors.

    \b
    Quick start:
      faultline categories
      faultline run app.py --log-uncaught ALL --exception Exception
    """
    ctx.ensure_object(dict)


@cli.command('categories')
def categories():
    """List error categories with their log level and label."""
    rows = [
        (c.name, int(c), level_for(c).name, label_for(c), "shutdown" if c & UNHANDLED else "runtime")
        for c in CATEGORIES
    ]
    section("Error categories")
    table(["Category", "Bit", "Level", "Label", "Detected"], rows)


@cli.command('check-config')
@click.option('--config', 'config_path', type=click.Path(), help='YAML config file')
@click.option('--env-file', type=click.Path(), help='.env file')
def check_config(config_path: Optional[str], env_file: Optional[str]):
    """
    Load configuration and show the resolved values.

    Examples:
      faultline check-config
      faultline check-config --config faultline.yaml --env-file .env
    """
    try:
        config = _load_config(config_path, env_file)
    except ConfigError as e:
        error(f"Invalid configuration: {e}")
        sys.exit(1)

    section("Configuration")
    for key, value in config.to_dict().items():
        if key in ("log_uncaught", "reporting"):
            value = _format_mask(value)
        elif key == "exception_classes":
            value = ", ".join(value) or "-"
        kv(key, value)


@cli.command('run', context_settings={"ignore_unknown_options": True})
@click.argument('script', type=click.Path(exists=True, dir_okay=False))
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.option('--log-uncaught', help='Categories to log, e.g. "ALL,~DEPRECATED"')
@click.option('--exception', 'exceptions', multiple=True, help='Exception class to log when uncaught')
@click.option('--convert-errors', is_flag=True, help='Raise USER_ERROR/RECOVERABLE_ERROR as exceptions')
@click.option('--log-level', help='Log level for failure records')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Write failure records to this file')
@click.option('--config', 'config_path', type=click.Path(), help='YAML config file')
@click.option('--env-file', type=click.Path(), help='.env file')
def run(
    script: str,
    args: Tuple[str, ...],
    log_uncaught: Optional[str],
    exceptions: Tuple[str, ...],
    convert_errors: bool,
    log_level: Optional[str],
    log_file: Optional[str],
    config_path: Optional[str],
    env_file: Optional[str],
):
    """
    Run a Python script under the error handler.

    Examples:
      faultline run app.py
      faultline run app.py --log-uncaught ALL --exception ValueError
      faultline run app.py --log-file errors.log -- --app-flag
    """
    from ..handler import ErrorHandler
    from .commands.run import run_script

    try:
        config = _load_config(
            config_path,
            env_file,
            log_uncaught=log_uncaught,
            exception_classes=list(exceptions) or None,
            convert_fatal_errors=convert_errors or None,
            log_level=log_level,
            log_file=log_file,
        )
        handler = ErrorHandler.from_config(config)
    except (ConfigError, ValueError) as e:
        error(f"Invalid configuration: {e}")
        sys.exit(1)

    run_script(script, args, config, handler=handler)


def main():
    """Entry point for `faultline` command."""
    cli(obj={})


if __name__ == '__main__':
    main()

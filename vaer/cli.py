import asyncio
import inspect
import logging
import sys
from importlib import import_module
from pathlib import Path

import click
import structlog


def configure_logging(level: int) -> None:
    # Command output goes to stdout, log lines to stderr
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


configure_logging(logging.INFO)


class AsyncAwareContext(click.Context):
    """
    A click context that invokes async functions with asyncio.run.
    """

    def invoke(self, *args, **kwargs):
        r = super().invoke(*args, **kwargs)
        if inspect.isawaitable(r):
            return asyncio.run(r)
        else:
            return r


click.Command.context_class = AsyncAwareContext


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    if verbose:
        configure_logging(logging.DEBUG)


def load_apps(path: Path) -> None:
    for cli_module in path.glob("*/cli.py"):
        # Construct the name of the module
        relative_path = cli_module.relative_to(Path(__file__).parent)
        module_path = ".".join(p.name for p in reversed(relative_path.parents))
        module_name = f"{module_path}.{cli_module.stem}"

        # Register the module
        module = import_module(module_name, package="vaer")
        if command := getattr(module, "cli", None):
            cli.add_command(command)


load_apps(Path(__file__).parent)

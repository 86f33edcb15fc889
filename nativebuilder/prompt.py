import os
import sys

import click

from .cli_logger import logger

NON_INTERACTIVE_ENV_VARS = ("NATIVEBUILDER_NON_INTERACTIVE", "CI")
TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


def is_interactive(non_interactive=False):
    """Whether the confirmation gate should block for operator input."""
    if non_interactive:
        return False
    for var in NON_INTERACTIVE_ENV_VARS:
        if os.environ.get(var, "").strip().lower() in TRUTHY:
            return False
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def confirm(title, *statements, interactive=False):
    """Show the pending action and, when interactive, wait for the operator.

    Raises:
        click.Abort: The operator declined.
    """
    logger.info(title)
    for statement in statements:
        logger.step_info(f"- {statement}", indent=2)
    if interactive:
        click.confirm("Continue?", default=True, abort=True)

import click
import shutil
from .. import config as config_module
from ..decorators import handle_exceptions
from ..cli_logger import logger

REQUIRED_TOOLS = ("cmake", "make", "pkg-config")
LINUX_TOOLS = ("clang", "clang++")


def check_environment(platform):
    """Return the required tools that are missing from PATH."""
    tools = REQUIRED_TOOLS + (LINUX_TOOLS if platform.is_linux else ())
    missing = []
    for tool in tools:
        location = shutil.which(tool)
        if location:
            logger.success(f"{tool}: {location}")
        else:
            logger.warning(f"{tool}: not found on PATH")
            missing.append(tool)
    return missing


@click.command()
@click.pass_context
@handle_exceptions
def doctor(ctx):
    """Check that the external build tools are installed."""
    logger.info("Running environment check...")
    conf = config_module.load_config(path=ctx.obj["path"])
    settings = config_module.settings_from_context(ctx.obj, conf)
    if check_environment(settings.platform):
        logger.error("Environment check found issues. Please review the warnings above.")
        ctx.exit(1)
    logger.success("Environment check completed successfully.")

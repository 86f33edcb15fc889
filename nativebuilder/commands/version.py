import click
import importlib.metadata
from ..cli_logger import logger

@click.command()
def version():
    """Print the version of the NativeBuilder tool."""
    try:
        ver = importlib.metadata.version("nativebuilder")
        logger.info(f"NativeBuilder version {ver}")
    except importlib.metadata.PackageNotFoundError:
        logger.error("Error: Could not determine the version of NativeBuilder. Is it installed correctly?")

import functools
import click
import sys
from .cli_logger import logger
from .errors import BuildError, CommandError

def handle_exceptions(func):
    """A decorator to turn errors raised by CLI commands into log output and an exit code."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.Abort:
            logger.warning("Command aborted by user.")
            sys.exit(1)
        except CommandError as e:
            logger.error(str(e))
            sys.exit(e.exit_code)
        except BuildError as e:
            logger.error(f"Error: {e}")
            logger.exception(*sys.exc_info())
            sys.exit(e.exit_code)
        except FileNotFoundError as e:
            logger.error(f"Error: File not found - {e}")
            logger.exception(*sys.exc_info())
            sys.exit(1)
    return wrapper

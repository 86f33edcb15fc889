import click
import sys
from .. import config as config_module
from .. import builder
from ..decorators import handle_exceptions
from ..errors import BuildError
from ..recipes import load_recipes, select_recipes
from ..cli_logger import logger

@click.command()
@click.pass_context
@click.argument("libraries", nargs=-1)
@handle_exceptions
def build(ctx, libraries):
    """Build static libraries from their source archives.

    LIBRARIES: The libraries to build, in order (default: all known libraries).
    """
    conf = config_module.load_config(path=ctx.obj["path"])
    recipes = select_recipes(load_recipes(conf), libraries)
    settings = config_module.settings_from_context(ctx.obj, conf)

    logger.info(f"Building {', '.join(recipe.name for recipe in recipes)} for {settings.platform.os}...")
    results = builder.build_libraries(recipes, settings)

    failures = {name: result for name, result in results.items() if isinstance(result, BuildError)}
    for name, result in results.items():
        if name in failures:
            logger.error(f"{name}: failed ({failures[name]})")
        else:
            logger.success(f"{name}: {result.static_lib_file}")

    if failures:
        logger.error(f"{len(failures)} of {len(results)} libraries failed. Please check the logs for details.")
        sys.exit(next(iter(failures.values())).exit_code)
    logger.success("All libraries built successfully.")

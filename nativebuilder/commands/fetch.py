import click
from .. import config as config_module
from .. import builder
from ..decorators import handle_exceptions
from ..recipes import load_recipes, select_recipes
from ..cli_logger import logger

@click.command()
@click.pass_context
@click.argument("libraries", nargs=-1)
@click.option("--force", is_flag=True, help="Download even if the archive is already present.")
@handle_exceptions
def fetch(ctx, libraries, force):
    """Download missing source archives.

    LIBRARIES: The libraries to fetch (default: all known libraries).
    """
    conf = config_module.load_config(path=ctx.obj["path"])
    recipes = select_recipes(load_recipes(conf), libraries)
    settings = config_module.settings_from_context(ctx.obj, conf)

    for recipe in recipes:
        path = builder.fetch_archive(recipe, settings, force=force)
        logger.success(f"{recipe.name}: {path}")

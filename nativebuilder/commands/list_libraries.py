import click
from .. import config as config_module
from ..errors import ConfigError
from ..recipes import load_recipes
from ..cli_logger import logger

@click.command(name="list-libraries")
@click.pass_context
def list_libraries(ctx):
    """List the libraries nativebuilder knows how to build."""
    conf = config_module.load_config(path=ctx.obj["path"])
    try:
        recipes = load_recipes(conf)
    except ConfigError as e:
        logger.error(f"Invalid library configuration: {e}")
        return

    for recipe in recipes.values():
        logger.info(f"{recipe.name}:")
        logger.step_info(f"archive: {recipe.archive}", indent=2)
        logger.step_info(f"static library: {recipe.static_lib_name}", indent=2)
        if recipe.url:
            logger.step_info(f"url: {recipe.url}", indent=2)
        if recipe.disabled_packages:
            logger.step_info(f"disabled packages: {', '.join(recipe.disabled_packages)}", indent=2)

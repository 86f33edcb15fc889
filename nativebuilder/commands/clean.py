import click
import shutil
import os
from .. import config as config_module
from .. import builder
from ..decorators import handle_exceptions
from ..prompt import confirm
from ..recipes import load_recipes, select_recipes
from ..cli_logger import logger

@click.command()
@click.pass_context
@click.argument("libraries", nargs=-1)
@handle_exceptions
def clean(ctx, libraries):
    """Remove the output directories of the given libraries (default: all known libraries)."""
    conf = config_module.load_config(path=ctx.obj["path"])
    recipes = select_recipes(load_recipes(conf), libraries)
    settings = config_module.settings_from_context(ctx.obj, conf)

    paths = []
    for recipe in recipes:
        task = builder.make_task(recipe, settings)
        paths.extend(path for path in task.output_dirs if os.path.exists(path))

    if not paths:
        logger.info("Output tree is already clean.")
        return

    confirm("Ready to remove output directories", *(f"Will remove: {path}" for path in paths),
            interactive=settings.interactive)

    items_removed = 0
    for path in paths:
        logger.info(f"Attempting to remove directory {path}...")
        try:
            shutil.rmtree(path)
            logger.success(f"Removed directory {path}")
            items_removed += 1
        except OSError as e:
            logger.error(f"Error removing directory {path}: {e}")
            logger.info("Please check file permissions and ensure the directory is not in use.")

    logger.success(f"Cleaning complete. Removed {items_removed} items.")

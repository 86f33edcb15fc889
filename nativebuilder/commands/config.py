import click
import os
import json
import shlex
from .. import config as config_module
from ..errors import ConfigError
from ..recipes import TUPLE_FIELDS
from ..cli_logger import logger

MISSING_CONFIG = "Error: No nativebuilder.toml found. Create one or pass --path to the project directory."

def coerce_value(key, value):
    """Convert a command line string to the type nativebuilder reads for ``key``.

    Recipe list fields are split like a shell command line, so
    ``"-DBUILD_CODEC=OFF -DBUILD_TESTING=OFF"`` becomes two arguments.
    """
    keys = key.split(".")
    if key == "build.interactive":
        return config_module.parse_bool(key, value)
    if key == "build.jobs":
        jobs = config_module.parse_jobs(key, value)
        if jobs < 1:
            raise ConfigError(f"{key} must be at least 1, got {jobs}")
        return jobs
    if len(keys) == 3 and keys[0] == "libraries" and keys[2] in TUPLE_FIELDS:
        return shlex.split(value)
    return value


def format_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return shlex.join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, indent=4)
    return value

@click.group()
@click.pass_context
def config(ctx):
    """View or edit the nativebuilder.toml configuration file."""
    pass

@config.command()
@click.pass_context
def view(ctx):
    """View the contents of the nativebuilder.toml file."""
    config_file_path = os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)
    if not os.path.exists(config_file_path):
        logger.error(MISSING_CONFIG)
        return
    try:
        with open(config_file_path, 'r') as f:
            click.echo(f.read())
    except IOError as e:
        logger.error(f"Error reading nativebuilder.toml at {config_file_path}: {e}")
        logger.info("Please check file permissions.")

@config.command()
@click.pass_context
def edit(ctx):
    """Edit the nativebuilder.toml file in your default editor."""
    config_file_path = os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)
    if not os.path.exists(config_file_path):
        logger.error(MISSING_CONFIG)
        return
    try:
        click.edit(filename=config_file_path)
    except click.ClickException as e:
        logger.error(f"Click error editing nativebuilder.toml: {e}")
        logger.info("This might indicate an issue with your editor configuration or environment variables.")

@config.command(name="list")
@click.pass_context
def list_(ctx):
    """List all configuration keys and values."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(MISSING_CONFIG)
        return
    click.echo(json.dumps(conf, indent=4))

@config.command()
@click.argument('key')
@click.pass_context
def get(ctx, key):
    """Get a value from the nativebuilder.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(MISSING_CONFIG)
        return

    value = conf
    try:
        for k in key.split('.'):
            value = value[k]
        click.echo(format_value(value))
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in nativebuilder.toml")

@config.command(name="set")
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_(ctx, key, value):
    """Set a value in the nativebuilder.toml file, creating it if needed."""
    try:
        value = coerce_value(key, value)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        return
    conf = config_module.load_config(path=ctx.obj["path"])

    keys = key.split('.')
    d = conf
    for k in keys[:-1]:
        d = d.setdefault(k, {})
    d[keys[-1]] = value

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Set '{key}' to {format_value(value)!r}")

@config.command()
@click.argument('key')
@click.pass_context
def unset(ctx, key):
    """Remove a key from the nativebuilder.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(MISSING_CONFIG)
        return

    keys = key.split('.')
    d = conf
    try:
        for k in keys[:-1]:
            d = d[k]
        del d[keys[-1]]
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in nativebuilder.toml")
        return
    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Unset '{key}'")

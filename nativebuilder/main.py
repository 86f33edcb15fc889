import click
from .commands import *


@click.group()
@click.option("--path", "-p", default=".", help="Path to the project directory.")
@click.option("--platform", "platform_name", type=click.Choice(["Darwin", "Linux"], case_sensitive=False),
              default=None, help="Build for this OS instead of the detected one.")
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=None, help="Parallel build jobs.")
@click.option("--non-interactive", is_flag=True, help="Never pause for confirmation.")
@click.option("--verbose", "-v", is_flag=True, help="Stream external tool output.")
@click.pass_context
def cli(ctx, path, platform_name, jobs, non_interactive, verbose):
    """NativeBuilder CLI tool."""
    ctx.obj = {
        "path": path,
        "platform": platform_name,
        "jobs": jobs,
        "non_interactive": non_interactive,
        "verbose": verbose,
    }

cli.add_command(build)
cli.add_command(fetch)
cli.add_command(compare_packages)
cli.add_command(list_libraries)
cli.add_command(clean)
cli.add_command(doctor)
cli.add_command(config)
cli.add_command(log)
cli.add_command(version)

if __name__ == '__main__':
    cli()

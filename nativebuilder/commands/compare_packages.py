import click
import os
from .. import collector
from ..decorators import handle_exceptions

@click.command("compare-packages")
@click.pass_context
@click.option("--output-dir", default=collector.DEFAULT_OUTPUT_DIR, help="Directory for the snapshot files.")
@handle_exceptions
def compare_packages(ctx, output_dir):
    """Snapshot installed packages, pkg-config metadata and environment for diffing against another host."""
    if not os.path.isabs(output_dir):
        output_dir = os.path.join(ctx.obj["path"], output_dir)
    _, files = collector.collect(output_dir=output_dir)
    collector.print_summary(files, output_dir=output_dir)

import os
import shutil
from dataclasses import dataclass

from .cli_logger import logger
from .errors import ArchiveError, ArtifactMissingError, BuildError, DownloadError
from .prompt import confirm
from .utils import cmake_resolver, file_manager, patch_resolver
from .utils.command_executor import build_env, run_checked

BUILD_SUBDIR = "_build"
INSTALL_SUBDIR = "_install"
LIB_DIRS = ("lib", "lib64")


@dataclass(frozen=True)
class LibraryBuildTask:
    name: str
    archive_path: str
    output_include: str
    output_lib: str
    output_src: str

    @property
    def build_dir(self):
        return os.path.join(self.output_src, BUILD_SUBDIR)

    @property
    def install_prefix(self):
        return os.path.join(self.output_src, INSTALL_SUBDIR)

    @property
    def output_dirs(self):
        return (self.output_include, self.output_lib, self.output_src)


@dataclass(frozen=True)
class BuildArtifacts:
    header_dir: str
    static_lib_file: str


def make_task(recipe, settings):
    return LibraryBuildTask(
        name=recipe.name,
        archive_path=os.path.join(settings.source_archives, recipe.archive),
        output_include=os.path.join(settings.output_include, recipe.name),
        output_lib=os.path.join(settings.output_lib, recipe.name),
        output_src=os.path.join(settings.output_src, recipe.name),
    )


def stage(task, settings):
    """Wipe and recreate the task's output directories, then unpack its sources."""
    if not os.path.isfile(task.archive_path):
        raise ArchiveError(f"Source archive not found: {task.archive_path}")

    confirm(
        f"Ready to clean and create output directories for {task.name}",
        *(f"Will remove and recreate: {path}" for path in task.output_dirs),
        interactive=settings.interactive,
    )
    for path in task.output_dirs:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        elif os.path.lexists(path):
            os.remove(path)
    for path in task.output_dirs:
        os.makedirs(path)

    confirm(
        "Ready to extract source archive",
        f"Archive: {task.archive_path}",
        f"Destination: {task.output_src}",
        interactive=settings.interactive,
    )
    file_manager.extract(task.archive_path, task.output_src, strip_components=1, log_each=settings.verbose)


def configure(task, recipe, settings):
    os.makedirs(task.build_dir, exist_ok=True)
    command, env = cmake_resolver.configure_command(
        task, recipe, settings.platform, settings.output_include, settings.output_lib
    )
    run_checked(command, env=build_env(env), cwd=task.build_dir, verbose=settings.verbose, description="cmake")


def patch(task, recipe, settings):
    """Post-configure cleanup of the generated build files. Linux only."""
    if not settings.platform.is_linux or not recipe.strip_link_flags:
        return patch_resolver.PatchReport()
    return patch_resolver.patch_build_dir(task.build_dir, recipe.strip_link_flags, recipe.dependency_marker)


def build(task, settings):
    logger.info(f"Building {task.name} ({settings.platform.jobs} parallel jobs)...")
    run_checked(cmake_resolver.build_command(settings.platform.jobs), cwd=task.build_dir,
                verbose=settings.verbose, description="make")
    run_checked(cmake_resolver.install_command(), cwd=task.build_dir,
                verbose=settings.verbose, description="make install")


def _find_static_lib(task, recipe):
    for lib_dir in LIB_DIRS:
        candidate = os.path.join(task.install_prefix, lib_dir, recipe.static_lib_name)
        if os.path.isfile(candidate):
            return candidate
    return None


def copy_artifacts(task, recipe, settings):
    """Copy installed headers and the static archive into the shared output tree.

    Raises:
        ArtifactMissingError: The install step left out an expected file.
    """
    header_src = os.path.join(task.install_prefix, "include", recipe.header_subdir)
    static_lib_src = _find_static_lib(task, recipe)
    static_lib_dest = os.path.join(task.output_lib, recipe.static_lib_name)

    confirm(
        "Ready to copy headers and libraries",
        f"Headers: {task.output_include}/",
        f"Library: {static_lib_dest}",
        interactive=settings.interactive,
    )

    if not os.path.isdir(header_src):
        raise ArtifactMissingError(f"Installed headers not found at {header_src}")
    if static_lib_src is None:
        raise ArtifactMissingError(
            f"Static library {recipe.static_lib_name} not found under {task.install_prefix}"
        )

    shutil.copytree(header_src, task.output_include, dirs_exist_ok=True)
    shutil.copy2(static_lib_src, static_lib_dest)
    return BuildArtifacts(header_dir=task.output_include, static_lib_file=static_lib_dest)


def build_library(recipe, settings):
    """Run the whole pipeline for one library and return its artifacts."""
    task = make_task(recipe, settings)
    logger.header(f"Starting {task.name} Build")

    stage(task, settings)
    confirm(
        f"Ready to configure and build {task.name}",
        f"Platform: {settings.platform.os}",
        f"Build directory: {task.build_dir}",
        interactive=settings.interactive,
    )
    configure(task, recipe, settings)
    patch(task, recipe, settings)
    build(task, settings)
    artifacts = copy_artifacts(task, recipe, settings)

    logger.success(f"Build complete for {task.name}")
    return artifacts


def build_libraries(recipes, settings):
    """Build each recipe in turn.

    A failing library does not stop the ones after it. Returns a mapping of
    library name to its BuildArtifacts or the BuildError that stopped it.
    """
    results = {}
    for recipe in recipes:
        try:
            results[recipe.name] = build_library(recipe, settings)
        except BuildError as e:
            logger.error(f"Build failed for {recipe.name}: {e}")
            results[recipe.name] = e
    return results


def fetch_archive(recipe, settings, force=False):
    """Download the recipe's source archive unless it is already present."""
    archive_path = os.path.join(settings.source_archives, recipe.archive)
    if os.path.isfile(archive_path) and not force:
        logger.info(f"{recipe.archive} already present, skipping download.")
        return archive_path
    if not recipe.url:
        raise DownloadError(f"No download URL known for {recipe.name}")
    logger.info(f"Fetching {recipe.name} from {recipe.url}")
    return file_manager.download(recipe.url, archive_path)

import toml
import os
from dataclasses import dataclass

from .cli_logger import logger
from .errors import ConfigError
from .platform_info import PlatformInfo, detect_platform
from .prompt import FALSY, TRUTHY, is_interactive

CONFIG_FILE = "nativebuilder.toml"

DEFAULT_SOURCE_ARCHIVES = "source_archives"
DEFAULT_OUTPUT = "output"


@dataclass(frozen=True)
class BuildSettings:
    """Process-wide build configuration, resolved once and passed to every task."""

    platform: PlatformInfo
    source_archives: str
    output_root: str
    interactive: bool = False
    verbose: bool = False

    @property
    def output_include(self):
        return os.path.join(self.output_root, "include")

    @property
    def output_lib(self):
        return os.path.join(self.output_root, "lib")

    @property
    def output_src(self):
        return os.path.join(self.output_root, "src")


def load_config(path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Loading configuration from {config_path}")
    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error(f"Error decoding TOML file at {config_path}: {e}")
            logger.info("Please check the file's format for syntax errors.")
        except IOError as e:
            logger.error(f"Error reading configuration file at {config_path}: {e}")
            logger.info("Please check file permissions.")
    return {}

def save_config(config, path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Saving configuration to {config_path}")
    try:
        with open(config_path, "w") as f:
            toml.dump(config, f)
        return True
    except IOError as e:
        logger.error(f"Error saving configuration to {config_path}: {e}")
        logger.info("Please check file permissions and ensure the directory is writable.")
        return False


def parse_bool(key, value):
    """Read a boolean setting. Strings such as ``false`` or ``on`` come from ``config set``."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUTHY:
        return True
    if text in FALSY:
        return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


def parse_jobs(key, value):
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def _resolve_path(base, value):
    value = os.path.expanduser(value)
    if os.path.isabs(value):
        return value
    return os.path.abspath(os.path.join(base, value))


def resolve_settings(path=".", conf=None, platform_name=None, jobs=None, non_interactive=False, verbose=False):
    """Build the BuildSettings for a run.

    Command line values win over ``nativebuilder.toml``, which wins over the
    built-in defaults. Relative paths are resolved against ``path``.
    """
    if conf is None:
        conf = load_config(path)
    paths = conf.get("paths", {})
    build = conf.get("build", {})

    if jobs is None and "jobs" in build:
        jobs = parse_jobs("build.jobs", build["jobs"])
    platform = detect_platform(os_override=platform_name, jobs=jobs)

    interactive = parse_bool("build.interactive", build.get("interactive", True))
    interactive = interactive and is_interactive(non_interactive)

    return BuildSettings(
        platform=platform,
        source_archives=_resolve_path(path, paths.get("source_archives", DEFAULT_SOURCE_ARCHIVES)),
        output_root=_resolve_path(path, paths.get("output", DEFAULT_OUTPUT)),
        interactive=interactive,
        verbose=verbose,
    )


def settings_from_context(obj, conf):
    """BuildSettings from the global CLI options stored on the click context."""
    return resolve_settings(
        path=obj["path"],
        conf=conf,
        platform_name=obj.get("platform"),
        jobs=obj.get("jobs"),
        non_interactive=obj.get("non_interactive", False),
        verbose=obj.get("verbose", False),
    )

import os
import platform
from dataclasses import dataclass
from typing import Optional

from .cli_logger import logger
from .errors import ConfigError, OSReleaseError, UnsupportedPlatformError

SUPPORTED_OS = ("Darwin", "Linux")
OS_RELEASE_FILE = "/etc/os-release"


@dataclass(frozen=True)
class PlatformInfo:
    os: str
    arch: str
    jobs: int

    @property
    def is_darwin(self) -> bool:
        return self.os == "Darwin"

    @property
    def is_linux(self) -> bool:
        return self.os == "Linux"


def _normalize_os(name):
    for supported in SUPPORTED_OS:
        if name.lower() == supported.lower():
            return supported
    return name


def detect_platform(os_override: Optional[str] = None, jobs: Optional[int] = None) -> PlatformInfo:
    """Detect the host platform.

    Args:
        os_override: Use this OS name instead of the detected one.
        jobs: Parallel build jobs. Defaults to the number of CPUs.

    Raises:
        UnsupportedPlatformError: The OS is neither Darwin nor Linux.
    """
    os_name = _normalize_os(os_override or platform.system())
    if os_name not in SUPPORTED_OS:
        raise UnsupportedPlatformError(
            f"Unsupported operating system '{os_name}'. Supported systems are: {', '.join(SUPPORTED_OS)}."
        )

    if jobs is None:
        jobs = os.cpu_count() or 1
    if jobs < 1:
        raise ConfigError(f"Job count must be at least 1, got {jobs}")

    info = PlatformInfo(os=os_name, arch=platform.machine(), jobs=jobs)
    logger.info(f"Platform: {info.os} ({info.arch}), {info.jobs} parallel jobs")
    return info


def detect_linux_release(os_release_path=OS_RELEASE_FILE):
    """Return the VERSION_ID of a Linux host.

    Raises:
        UnsupportedPlatformError: The host is not Linux.
        OSReleaseError: The OS release descriptor cannot be read.
    """
    os_name = platform.system()
    if os_name != "Linux":
        raise UnsupportedPlatformError("This command is designed for Linux systems")

    try:
        with open(os_release_path, "r") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise OSReleaseError(f"Cannot read {os_release_path}: {e}") from e

    for line in lines:
        key, sep, value = line.partition("=")
        if sep and key.strip() == "VERSION_ID":
            return value.strip().strip('"').strip("'")
    return "unknown"

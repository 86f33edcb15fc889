import os
import shutil
from dataclasses import dataclass
from typing import Optional

from ..cli_logger import logger
from ..errors import CommandError
from .command_executor import run_shell_command


@dataclass(frozen=True)
class PkgConfigCheck:
    name: str
    found: bool
    version: Optional[str] = None
    libs: Optional[str] = None
    cflags: Optional[str] = None


def list_installed_packages():
    """Raw ``dpkg -l`` output.

    Raises:
        CommandError: dpkg is missing or failed.
    """
    command = ["dpkg", "-l"]
    stdout, stderr, returncode = run_shell_command(command)
    if returncode != 0:
        raise CommandError(command, returncode, stdout, stderr)
    return stdout


def installed_rows(dpkg_output):
    """Rows of ``dpkg -l`` output for packages in the installed (``ii``) state."""
    return [line for line in dpkg_output.splitlines() if line.startswith("ii")]


def installed_names(dpkg_output):
    names = []
    for row in installed_rows(dpkg_output):
        fields = row.split()
        if len(fields) > 1:
            names.append(fields[1])
    return sorted(names)


def rows_matching(dpkg_output, pattern):
    """Installed rows containing ``pattern`` anywhere, case-insensitively.

    This deliberately over-matches (``libtiff`` also hits ``libtiff-tools``);
    the output is meant for a human reading a diff.
    """
    pattern = pattern.lower()
    return [row for row in installed_rows(dpkg_output) if pattern in row.lower()]


def dev_packages(names):
    return sorted(name for name in names if "-dev" in name)


def pc_files(directory):
    """Sorted ``.pc`` files below ``directory``; empty when it does not exist."""
    if not os.path.isdir(directory):
        return []
    found = []
    for root, _, files in os.walk(directory):
        for name in files:
            path = os.path.join(root, name)
            if name.endswith(".pc") and os.path.isfile(path):
                found.append(path)
    return sorted(found)


def find_library_files(root, prefix, limit=10):
    """Regular files below ``root`` whose name starts with ``prefix``."""
    if not os.path.isdir(root):
        return []
    found = []
    for dirpath, _, files in os.walk(root):
        for name in files:
            path = os.path.join(dirpath, name)
            if name.startswith(prefix) and os.path.isfile(path) and not os.path.islink(path):
                found.append(path)
    return sorted(found)[:limit]


def pkg_config_available():
    return shutil.which("pkg-config") is not None


def pkg_config_list_all():
    """Package names known to ``pkg-config --list-all``; empty when pkg-config is unavailable."""
    if not pkg_config_available():
        logger.warning("pkg-config not found on PATH, skipping --list-all.")
        return []
    stdout, _, returncode = run_shell_command(["pkg-config", "--list-all"])
    if returncode != 0:
        logger.warning(f"pkg-config --list-all failed (Exit Code: {returncode})")
        return []
    return sorted(line.split()[0] for line in stdout.splitlines() if line.strip())


def _pkg_config_query(option, name):
    stdout, stderr, _ = run_shell_command(["pkg-config", option, name])
    return (stdout or stderr).strip()


def pkg_config_check(name):
    """What pkg-config reports for ``name``."""
    if not pkg_config_available():
        return PkgConfigCheck(name=name, found=False)
    _, _, returncode = run_shell_command(["pkg-config", "--exists", name])
    if returncode != 0:
        return PkgConfigCheck(name=name, found=False)
    return PkgConfigCheck(
        name=name,
        found=True,
        version=_pkg_config_query("--modversion", name),
        libs=_pkg_config_query("--libs", name),
        cflags=_pkg_config_query("--cflags", name),
    )

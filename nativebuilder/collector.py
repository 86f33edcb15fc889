"""Snapshot installed packages, pkg-config metadata and build environment.

The files written here are meant to be compared with ``diff`` against a
snapshot taken on another machine, typically a local VM against a CI runner,
to find out why a configure step detects different optional libraries.
"""
import datetime
import os
import platform
import socket
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from .cli_logger import logger
from .platform_info import OS_RELEASE_FILE, detect_linux_release
from .utils import system_package
from .utils.system_package import PkgConfigCheck

DEFAULT_OUTPUT_DIR = "package_lists"

RELATED_PACKAGE_PATTERNS = (
    "liblcms2",
    "liblqr",
    "libdjvulibre",
    "libopenexr",
    "libjbig",
    "libtiff",
    "libopenjp2",
    "imagemagick",
    "libmagick",
    "libheif",
    "libde265",
    "libturbojpeg",
    "libpng",
    "libjpeg",
    "libfreetype",
    "libfontconfig",
)

ARCH_PKG_CONFIG_DIRS = (
    "/usr/lib/pkgconfig",
    "/usr/lib/aarch64-linux-gnu/pkgconfig",
    "/usr/lib/x86_64-linux-gnu/pkgconfig",
)

PKG_CONFIG_DIRS = ARCH_PKG_CONFIG_DIRS + (
    "/usr/share/pkgconfig",
    "/usr/local/lib/pkgconfig",
    "/usr/local/share/pkgconfig",
)

LIBRARY_ROOT = "/usr/lib"
LIBRARY_FILE_PATTERNS = (
    "liblcms2",
    "liblqr",
    "libdjvulibre",
    "libopenexr",
    "libjbig",
    "libtiff",
    "libopenjp2",
)

PKG_CONFIG_CHECKS = (
    "lcms2",
    "liblqr-1",
    "ddjvuapi",
    "OpenEXR",
    "jbig",
    "libtiff-4",
    "libopenjp2",
)

IMPORTANT_ENV_VARS = (
    "PATH",
    "PKG_CONFIG_PATH",
    "LD_LIBRARY_PATH",
    "CPPFLAGS",
    "CFLAGS",
    "CXXFLAGS",
    "LDFLAGS",
    "CC",
    "CXX",
    "CMAKE_PREFIX_PATH",
    "CMAKE_INCLUDE_PATH",
    "CMAKE_LIBRARY_PATH",
)

KEY_PACKAGES = (
    ("liblcms2-dev", "Little CMS"),
    ("liblqr-1-0-dev", "Liquid Rescale"),
    ("libdjvulibre-dev", "DJVU"),
    ("libopenexr-dev", "OpenEXR"),
    ("libjbig-dev", "JBIG"),
    ("libtiff-dev", "TIFF"),
    ("libopenjp2-dev", "OpenJPEG"),
)


@dataclass(frozen=True)
class PackageSnapshot:
    hostname: str
    os_version: str
    timestamp: str
    package_list: FrozenSet[str]
    pkg_config_list: FrozenSet[str]
    env_vars: Dict[str, str]
    pkg_config_checks: Tuple[PkgConfigCheck, ...] = ()


def _section(lines, title):
    lines.append("")
    lines.append(f"=== {title} ===")


def format_check(check):
    """Report lines for one pkg-config check: a status line, plus details when found."""
    if not check.found:
        return [f"{check.name}: NOT FOUND"]
    return [
        f"{check.name}: FOUND",
        f"  version: {check.version or '(none)'}",
        f"  libs: {check.libs or '(none)'}",
        f"  cflags: {check.cflags or '(none)'}",
    ]


def format_env_var(name, environ):
    value = environ.get(name)
    return f"{name}={value}" if value else f"{name}=(unset)"


def _write_lines(path, lines):
    with open(path, "w") as f:
        for line in lines:
            f.write(f"{line}\n")


def collect(output_dir=DEFAULT_OUTPUT_DIR, hostname=None, now=None, environ=None,
            os_release_path=OS_RELEASE_FILE):
    """Gather a package snapshot of this host and write it to ``output_dir``.

    Returns ``(snapshot, files)`` where ``files`` maps the kind of file
    (``report``, ``all``, ``dpkg_full``, ``pkgconfig_all``, ``env_all``) to its path.

    Raises:
        UnsupportedPlatformError: The host is not Linux.
        OSReleaseError: /etc/os-release cannot be read.
        CommandError: ``dpkg -l`` failed.
    """
    if environ is None:
        environ = dict(os.environ)
    os_version = detect_linux_release(os_release_path)
    hostname = hostname or environ.get("HOSTNAME") or socket.gethostname()
    now = now or datetime.datetime.now()
    timestamp = now.strftime("%Y%m%d_%H%M%S")

    os.makedirs(output_dir, exist_ok=True)
    base = os.path.join(output_dir, f"package_list_{hostname}_{os_version}_{timestamp}.txt")
    files = {
        "report": base,
        "all": f"{base}.all",
        "dpkg_full": f"{base}.dpkg_full",
        "pkgconfig_all": f"{base}.pkgconfig_all",
        "env_all": f"{base}.env_all",
    }

    logger.header("Package Comparison Tool")
    logger.info(f"Hostname: {hostname}")
    logger.info(f"OS Version: {os_version}")
    logger.info(f"Output file: {base}")

    logger.header("Collecting Package Information")
    report = []

    logger.info("Listing all installed packages (detailed)...")
    dpkg_output = system_package.list_installed_packages()
    with open(files["dpkg_full"], "w") as f:
        f.write(dpkg_output)

    logger.info("Listing all installed packages (names only)...")
    names = system_package.installed_names(dpkg_output)
    _write_lines(files["all"], names)

    logger.info("Checking for related packages...")
    _section(report, "ImageMagick Related Packages")
    for pattern in RELATED_PACKAGE_PATTERNS:
        report.extend(system_package.rows_matching(dpkg_output, pattern))

    logger.info("Listing development packages...")
    _section(report, "Development Packages (-dev packages)")
    report.extend(system_package.dev_packages(names))

    logger.info("Checking pkg-config files...")
    for directory in ARCH_PKG_CONFIG_DIRS:
        if os.path.isdir(directory):
            _section(report, f"pkg-config files in {directory}")
            report.extend(system_package.pc_files(directory))

    logger.info("Checking for specific library files...")
    _section(report, "Library files that ImageMagick configure might detect")
    for prefix in LIBRARY_FILE_PATTERNS:
        report.append("")
        report.append(f"--- {prefix} ---")
        report.extend(system_package.find_library_files(LIBRARY_ROOT, prefix))

    logger.info("Collecting system information...")
    uname = platform.uname()
    _section(report, "System Information")
    report.append(f"Hostname: {hostname}")
    report.append(f"OS Version: {os_version}")
    report.append(f"Kernel: {uname.release}")
    report.append(f"Architecture: {uname.machine}")
    report.append(f"Date: {now.strftime('%a %b %d %H:%M:%S %Y')}")

    logger.info("Listing ALL pkg-config packages...")
    pkg_config_names = set()
    for directory in PKG_CONFIG_DIRS:
        for path in system_package.pc_files(directory):
            pkg_config_names.add(os.path.basename(path)[:-len(".pc")])
    pkg_config_names.update(system_package.pkg_config_list_all())
    _write_lines(files["pkgconfig_all"], sorted(pkg_config_names))

    logger.info("Checking what pkg-config finds for optional dependencies...")
    _section(report, "pkg-config detection results (ImageMagick deps)")
    checks = tuple(system_package.pkg_config_check(name) for name in PKG_CONFIG_CHECKS)
    for check in checks:
        report.extend(format_check(check))

    logger.info("Collecting ALL environment variables...")
    _write_lines(files["env_all"], sorted(f"{key}={value}" for key, value in environ.items()))
    _section(report, "Important Environment Variables")
    report.extend(format_env_var(name, environ) for name in IMPORTANT_ENV_VARS)

    _write_lines(files["report"], report)

    snapshot = PackageSnapshot(
        hostname=hostname,
        os_version=os_version,
        timestamp=timestamp,
        package_list=frozenset(names),
        pkg_config_list=frozenset(pkg_config_names),
        env_vars=dict(environ),
        pkg_config_checks=checks,
    )
    return snapshot, files


def print_summary(files, output_dir=DEFAULT_OUTPUT_DIR):
    logger.header("Summary")
    logger.info("Generated files:")
    logger.step_info(f"- {files['report']} (main report)", indent=2)
    logger.step_info(f"- {files['all']} (all package names, sorted)", indent=2)
    logger.step_info(f"- {files['dpkg_full']} (full dpkg -l output)", indent=2)
    logger.step_info(f"- {files['pkgconfig_all']} (all pkg-config packages)", indent=2)
    logger.step_info(f"- {files['env_all']} (all environment variables)", indent=2)
    logger.info("To compare with another system:")
    logger.step_info("1. Run this command on both systems", indent=2)
    logger.step_info(f"2. Compare package lists: diff {output_dir}/*.all", indent=2)
    logger.step_info(f"   and: diff {output_dir}/*.dpkg_full", indent=2)
    logger.step_info(f"3. Compare pkg-config packages: diff {output_dir}/*.pkgconfig_all", indent=2)
    logger.step_info(f"4. Compare environment variables: diff {output_dir}/*.env_all", indent=2)
    logger.info("Key packages to check for:")
    for package, description in KEY_PACKAGES:
        logger.step_info(f"- {package} ({description})", indent=2)

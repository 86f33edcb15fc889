from ..cli_logger import logger

GENERATOR = "Unix Makefiles"

DARWIN_ARCHITECTURES = ("arm64", "x86_64")
DARWIN_DEPLOYMENT_TARGET = "10.15"
DARWIN_IGNORE_PATH = "/usr/local/lib/"

LINUX_CC = "clang"
LINUX_CXX = "clang++"
LINUX_IGNORE_PATH = "/usr/lib/x86_64-linux-gnu/"


def _common_args(task, output_include, output_lib):
    return [
        "cmake",
        "-S", task.output_src,
        "-B", task.build_dir,
        "-G", GENERATOR,
        "-DCMAKE_BUILD_TYPE=RELEASE",
        "-DBUILD_SHARED_LIBS:BOOL=OFF",
        "-DCMAKE_POSITION_INDEPENDENT_CODE=ON",
        f"-DCMAKE_LIBRARY_PATH:PATH={output_lib}",
        f"-DCMAKE_INCLUDE_PATH:PATH={output_include}",
        f"-DCMAKE_INSTALL_PREFIX={task.install_prefix}",
    ]


def _darwin_args(recipe):
    arch_flags = " ".join(f"-arch {arch}" for arch in DARWIN_ARCHITECTURES)
    args = [
        f"-DCMAKE_IGNORE_PATH={DARWIN_IGNORE_PATH}",
        f"-DCMAKE_OSX_ARCHITECTURES={';'.join(DARWIN_ARCHITECTURES)}",
        f"-DCMAKE_OSX_DEPLOYMENT_TARGET={DARWIN_DEPLOYMENT_TARGET}",
    ]
    env = {"CFLAGS": f"{arch_flags} -mmacosx-version-min={DARWIN_DEPLOYMENT_TARGET}"}
    return args, env


def _linux_args(recipe):
    args = [f"-DCMAKE_IGNORE_PATH={LINUX_IGNORE_PATH}"]
    args += [f"-DCMAKE_DISABLE_FIND_PACKAGE_{package}:BOOL=ON" for package in recipe.disabled_packages]
    args += [
        "-DCMAKE_VERBOSE_MAKEFILE:BOOL=ON",
        "-DCMAKE_EXE_LINKER_FLAGS=-Wl,--verbose",
    ]
    env = {"CC": LINUX_CC, "CXX": LINUX_CXX, "CFLAGS": "-fPIC"}
    return args, env


PLATFORM_ARGS = {
    "Darwin": _darwin_args,
    "Linux": _linux_args,
}


def configure_command(task, recipe, platform, output_include, output_lib):
    """Return ``(command, env_overrides)`` for configuring ``task`` on ``platform``."""
    if platform.os not in PLATFORM_ARGS:
        raise ValueError(f"No CMake configuration for platform '{platform.os}'")

    if platform.is_darwin:
        logger.info(f"Configuring for macOS (universal: {' + '.join(DARWIN_ARCHITECTURES)})...")
    else:
        logger.info("Configuring for Linux...")

    platform_args, env = PLATFORM_ARGS[platform.os](recipe)
    command = _common_args(task, output_include, output_lib) + platform_args + list(recipe.cmake_args)
    return command, env


def build_command(jobs):
    return ["make", f"-j{jobs}"]


def install_command():
    return ["make", "install"]

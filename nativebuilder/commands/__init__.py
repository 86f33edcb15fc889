from .build import build
from .fetch import fetch
from .compare_packages import compare_packages
from .list_libraries import list_libraries
from .clean import clean
from .doctor import doctor
from .config import config
from .log import log
from .version import version

__all__ = [
    "build",
    "fetch",
    "compare_packages",
    "list_libraries",
    "clean",
    "doctor",
    "config",
    "log",
    "version",
]

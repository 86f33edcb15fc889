from .command_executor import run_shell_command, run_checked, build_env
from .file_manager import extract, download
from . import cmake_resolver, patch_resolver, system_package

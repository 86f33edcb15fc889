import os
import subprocess
from ..cli_logger import logger
from ..errors import CommandError

def run_shell_command(command, stream_output=False, env=None, input_data=None, cwd=None):
    """
    Executes a command, with options for streaming output and providing input.

    Args:
        command (list): The command to execute as a list of strings.
        stream_output (bool): If True, streams the output in real-time.
        env (dict, optional): A dictionary of environment variables.
        input_data (str, optional): Data to be passed to the command's stdin.
        cwd (str, optional): The working directory for the command.

    Returns:
        If stream_output is True, returns a tuple (line generator, process).
        If stream_output is False, returns a tuple (stdout, stderr, return_code).
    """
    try:
        if stream_output:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=1,
                universal_newlines=True,
                env=env,
                cwd=cwd
            )

            def _generator():
                for line in process.stdout:
                    yield line
                process.communicate()
            return _generator(), process

        else:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                env=env,
                input=input_data,
                check=False,
                cwd=cwd
            )
            return result.stdout, result.stderr, result.returncode

    except FileNotFoundError as e:
        logger.error(f"Command not found: {e.filename}")
        if stream_output:
            return iter([]), type('obj', (object,), {'returncode': 127})
        else:
            return "", str(e), 127


def build_env(overrides=None):
    """Copy of the current environment with ``overrides`` applied."""
    env = os.environ.copy()
    if overrides:
        env.update(overrides)
    return env


def run_checked(command, env=None, cwd=None, verbose=False, description=None):
    """Run ``command`` and raise CommandError on a non-zero exit.

    With ``verbose`` the output is streamed to the log while the command runs;
    otherwise it is captured and only shown when the command fails.
    """
    description = description or command[0]
    logger.info(f"  - Running {description}: {' '.join(command)}")

    if verbose:
        lines, process = run_shell_command(command, stream_output=True, env=env, cwd=cwd)
        output = []
        for line in lines:
            output.append(line)
            logger.step_info(line.rstrip(), indent=4)
        returncode = process.returncode
        stdout, stderr = "".join(output), ""
    else:
        stdout, stderr, returncode = run_shell_command(command, env=env, cwd=cwd)

    if returncode != 0:
        logger.error(f"{description} failed (Exit Code: {returncode}):")
        if stdout and not verbose:
            logger.error(f"Stdout:\n{stdout}")
        if stderr:
            logger.error(f"Stderr:\n{stderr}")
        raise CommandError(command, returncode, stdout, stderr)
    return stdout

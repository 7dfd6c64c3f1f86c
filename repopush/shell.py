#!/usr/bin/env python3

import asyncio
import logging
import os
import subprocess
from typing import Dict, List, Optional, Union

from .common import redact_url

__all__ = [
    "GitCommandError",
    "run_command",
    "get_subprocess_env",
]

log = logging.getLogger(__name__)


class GitCommandError(RuntimeError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        cmd: List[str],
        returncode: int,
        stdout: Union[str, bytes] = "",
        stderr: Union[str, bytes] = "",
    ) -> None:
        super().__init__(message)
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def get_subprocess_env() -> Optional[Dict[str, str]]:
    """
    Get the environment variables to be used for subprocess execution.
    This function can be mocked in tests to control the environment.

    Returns:
        Optional dictionary of environment variables, or None to use the current environment.
    """
    return None


def _build_env(extra: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    base = get_subprocess_env()
    if not extra:
        return base
    env = dict(os.environ if base is None else base)
    env.update(extra)
    return env


async def run_command(
    cmd: List[str],
    cwd: Optional[str] = None,
    check: bool = True,
    capture_output: bool = True,
    text: bool = True,
    wait_time: Optional[float] = None,
    input: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess[Union[str, bytes]]:
    """
    Run a subprocess command with consistent logging asynchronously.

    Args:
        cmd: Command to run as a list of strings
        cwd: Current working directory for the command
        check: If True, raise GitCommandError if the command returns non-zero exit code
        capture_output: If True, capture stdout and stderr
        text: If True, decode stdout and stderr as text
        wait_time: Timeout in seconds
        input: Input to pass to the subprocess's stdin
        env: Extra environment variables layered over the base environment

    Returns:
        CompletedProcess instance with attributes args, returncode, stdout, stderr

    Raises:
        GitCommandError: If check=True and process returns non-zero exit code
        subprocess.TimeoutExpired: If the process times out

    Notes:
        The base environment is obtained from get_subprocess_env(). Credentials
        embedded in URLs are redacted from every log line and error message.
    """
    log_cmd = redact_url(" ".join(str(c) for c in cmd))
    log.info(f"Running command: {log_cmd}")

    stdout_pipe = asyncio.subprocess.PIPE if capture_output else None
    stderr_pipe = asyncio.subprocess.PIPE if capture_output else None
    stdin_pipe = asyncio.subprocess.PIPE if input is not None else None

    input_bytes = None
    if input is not None:
        input_bytes = input.encode()

    process = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=cwd,
        env=_build_env(env),
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        stdin=stdin_pipe,
    )

    try:
        stdout_data, stderr_data = await asyncio.wait_for(
            process.communicate(input=input_bytes), timeout=wait_time
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise subprocess.TimeoutExpired(
            cmd, float(wait_time) if wait_time is not None else 0.0
        )

    stdout: Union[str, bytes] = ""
    stderr: Union[str, bytes] = ""
    if capture_output:
        if text and stdout_data:
            stdout = stdout_data.decode(errors="replace")
            log.debug(f"Command stdout: {redact_url(stdout)}")
        elif stdout_data:
            stdout = stdout_data
            log.debug(f"Command stdout: {len(stdout_data)} bytes")

        if text and stderr_data:
            stderr = stderr_data.decode(errors="replace")
            log.debug(f"Command stderr: {redact_url(stderr)}")
        elif stderr_data:
            stderr = stderr_data
            log.debug(f"Command stderr: {len(stderr_data)} bytes")

    returncode = process.returncode
    log.debug(f"Command return code: {returncode}")

    result = subprocess.CompletedProcess[Union[str, bytes]](
        args=cmd,
        returncode=0 if returncode is None else returncode,
        stdout=stdout,
        stderr=stderr,
    )

    if check and result.returncode != 0:
        error_message = f"Command failed with exit code {result.returncode}: {log_cmd}"
        if result.stdout:
            error_message += f"\nStdout: {redact_url(str(result.stdout))}"
        if result.stderr:
            error_message += f"\nStderr: {redact_url(str(result.stderr))}"
        raise GitCommandError(
            error_message,
            cmd=cmd,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return result

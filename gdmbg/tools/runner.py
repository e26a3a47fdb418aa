"""
External Command Runner

Runs GNOME and systemd helper programs with a PATH lookup up front and a
bounded timeout, translating failures into the tool's error types.
"""

import logging
import shutil
import subprocess
from typing import List, Optional, Sequence, Union

from ..errors import ExternalToolError, ToolNotFoundError, ToolTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


def which(tool: str) -> Optional[str]:
    """Locate a program on PATH."""
    return shutil.which(tool)


def is_available(tool: str) -> bool:
    return which(tool) is not None


def as_user(user: str, argv: Sequence[str]) -> List[str]:
    """Prefix a command so it runs as another user without prompting for a password."""
    return ["sudo", "-n", "-u", user, *argv]


def run_tool(
    argv: Sequence[str],
    timeout: float = DEFAULT_TIMEOUT,
    check: bool = True,
    text: bool = True,
) -> subprocess.CompletedProcess:
    """
    Run an external program and capture its output.

    Args:
        argv: Program and arguments
        timeout: Seconds before the process is killed
        check: Raise ExternalToolError on a non-zero exit status
        text: Decode stdout/stderr as text

    Returns:
        The completed process

    Raises:
        ToolNotFoundError: Program is not on PATH
        ToolTimeoutError: Program ran longer than ``timeout``
        ExternalToolError: Program exited non-zero (when ``check``)
    """
    argv = list(argv)
    executable = which(argv[0])
    if executable is None:
        raise ToolNotFoundError(argv)

    logger.debug("Running: %s (timeout %ss)", " ".join(argv), timeout)
    try:
        result = subprocess.run(
            [executable, *argv[1:]],
            capture_output=True,
            text=text,
            errors="replace" if text else None,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise ToolTimeoutError(argv, timeout)
    except OSError as e:
        raise ExternalToolError(argv, message=f"Could not run '{argv[0]}': {e}")

    logger.debug("%s exited with %s", argv[0], result.returncode)

    if check and result.returncode != 0:
        raise ExternalToolError(argv, result.returncode, _decode(result.stderr))

    return result


def _decode(output: Union[str, bytes, None]) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output

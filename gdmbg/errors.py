"""
Error Types

Exceptions raised by the tool runner, bundle compiler and config loader.
Diagnostic checks convert these into CheckResults instead of letting them
abort the run.
"""

from typing import Optional, Sequence


class GdmBgError(Exception):
    """Base class for all gdm-bg-tool errors."""
    pass


class NotFoundError(GdmBgError):
    """An expected path or tool is missing."""
    pass


class ConfigError(GdmBgError):
    """Configuration loading or validation error."""
    pass


class ExternalToolError(GdmBgError):
    """An external program exited non-zero or could not be run."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        message: Optional[str] = None,
    ):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        if message is None:
            message = f"'{self.command}' exited with status {returncode}"
            if stderr.strip():
                message += f": {stderr.strip()}"
        super().__init__(message)

    @property
    def tool(self) -> str:
        return self.argv[0] if self.argv else ""

    @property
    def command(self) -> str:
        return " ".join(self.argv)


class ToolNotFoundError(ExternalToolError, NotFoundError):
    """The external program is not installed (PATH lookup failed)."""

    def __init__(self, argv: Sequence[str]):
        super().__init__(argv, message=f"'{argv[0]}' not found in PATH")


class ToolTimeoutError(ExternalToolError, TimeoutError):
    """The external program did not finish within its time bound."""

    def __init__(self, argv: Sequence[str], timeout: float):
        self.timeout = timeout
        super().__init__(
            argv,
            message=f"'{' '.join(argv)}' timed out after {timeout:g}s",
        )


class CompileError(ExternalToolError):
    """glib-compile-resources failed; stderr is kept verbatim."""

    def __init__(self, argv: Sequence[str], returncode: Optional[int], stderr: str):
        super().__init__(
            argv,
            returncode=returncode,
            stderr=stderr,
            message=f"Resource compilation failed (status {returncode}): {stderr}",
        )

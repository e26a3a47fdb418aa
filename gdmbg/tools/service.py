"""
Display Manager Service Control

Talks to systemd about the display-manager unit. Ubuntu has shipped the unit
as both ``gdm3`` and ``gdm``, so every operation walks a list of candidate
names and stops at the first one that works.
"""

import logging
from typing import Optional, Sequence

from ..errors import ExternalToolError
from ..models import CheckResult
from .runner import run_tool

logger = logging.getLogger(__name__)

SYSTEMCTL = "systemctl"


class ServiceController:
    """Restarts and queries the display-manager service."""

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout

    def restart(self, service_names: Sequence[str]) -> CheckResult:
        """
        Restart the first candidate service that systemd accepts.

        Args:
            service_names: Candidate unit names, tried in order

        Returns:
            Pass naming the restarted unit, or Fail with the last error seen
        """
        last_error: Optional[ExternalToolError] = None

        for name in service_names:
            try:
                run_tool([SYSTEMCTL, "restart", name], timeout=self.timeout)
            except ExternalToolError as e:
                logger.debug("Restart of %s failed: %s", name, e)
                last_error = e
                continue
            return CheckResult.ok("Restart service", f"Restarted {name}")

        detail = str(last_error) if last_error else "No service names configured"
        return CheckResult.fail(
            "Restart service",
            detail,
            "Restart manually: sudo systemctl restart " + (service_names[0] if service_names else "gdm3"),
        )

    def status(self, service_names: Sequence[str]) -> CheckResult:
        """Report the first candidate unit that is active."""
        states = []

        for name in service_names:
            try:
                result = run_tool(
                    [SYSTEMCTL, "is-active", name], timeout=self.timeout, check=False
                )
            except ExternalToolError as e:
                states.append(f"{name}: {e}")
                continue

            state = result.stdout.strip() or "unknown"
            if result.returncode == 0:
                return CheckResult.ok("Display manager service", f"{name} is {state}")
            states.append(f"{name}: {state}")

        return CheckResult.warn(
            "Display manager service",
            "No active display manager unit (" + "; ".join(states) + ")",
        )

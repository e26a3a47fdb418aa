"""
Symlink Resolution

Follows update-alternatives style link chains such as
``gdm-theme.gresource -> /etc/alternatives/... -> theme bundle`` and checks
where they end up.
"""

import os
from typing import List, Optional, Tuple

from ...config.models import SymlinkSpec
from ...models import CheckResult

# Same limit Linux applies before returning ELOOP
MAX_HOPS = 40


class SymlinkLoopError(OSError):
    """A link chain did not terminate within the hop limit."""
    pass


class SymlinkResolver:
    """Resolves symlink chains with a bounded number of hops."""

    def __init__(self, max_hops: int = MAX_HOPS):
        self.max_hops = max_hops

    def follow(self, link: str) -> Tuple[str, List[str]]:
        """
        Follow a link chain to its final path.

        Returns:
            Final path and the list of hops taken

        Raises:
            SymlinkLoopError: More than ``max_hops`` links in the chain
        """
        current = os.path.abspath(link)
        chain = [current]

        for _ in range(self.max_hops):
            current = self._canonical_parent(current)
            if not os.path.islink(current):
                return current, chain
            target = os.readlink(current)
            current = os.path.normpath(os.path.join(os.path.dirname(current), target))
            chain.append(current)

        raise SymlinkLoopError(f"Too many levels of symbolic links ({self.max_hops}) at {link}")

    def _canonical_parent(self, path: str) -> str:
        """Resolve links in the directory part so only the last component is followed by hand."""
        parent, base = os.path.split(path)
        real_parent = os.path.realpath(parent)
        return os.path.join(real_parent, base)

    def resolve(self, link: str, expected_target: str, name: Optional[str] = None) -> CheckResult:
        """
        Check that ``link`` is a symlink ending at ``expected_target``.

        Args:
            link: Path of the symlink
            expected_target: Path the chain should resolve to
            name: Check name for the report

        Returns:
            Pass on match, Warn on mismatch, Fail if missing, not a link,
            dangling or looping
        """
        name = name or link

        if not os.path.lexists(link):
            return CheckResult.fail(name, f"missing: {link}")
        if not os.path.islink(link):
            return CheckResult.fail(name, f"not a symlink: {link}")

        try:
            final, chain = self.follow(link)
        except SymlinkLoopError as e:
            return CheckResult.fail(name, f"symlink loop: {e}")
        except PermissionError:
            return CheckResult.warn(name, f"Permission denied while resolving {link}",
                                    "Re-run with sudo to resolve this link")

        if not os.path.exists(final):
            return CheckResult.fail(name, f"dangling: {link} -> {final} does not exist")

        route = " -> ".join(chain)
        expected = os.path.normpath(os.path.abspath(expected_target))
        if final == expected or os.path.realpath(final) == os.path.realpath(expected):
            return CheckResult.ok(name, route)

        return CheckResult.warn(
            name,
            f"{link} resolves to {final}, expected {expected}",
            f"Point it at the custom bundle: sudo update-alternatives --set "
            f"{os.path.basename(link)} {expected}",
        )

    def resolve_first(self, spec: SymlinkSpec) -> CheckResult:
        """Resolve the first candidate link that exists."""
        for candidate in spec.candidates:
            if os.path.lexists(candidate):
                return self.resolve(candidate, spec.expected_target, name=spec.label)

        return CheckResult.warn(
            spec.label,
            "No link found at " + ", ".join(spec.candidates),
            "GDM reads the theme bundle directly on this system",
        )

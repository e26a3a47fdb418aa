"""
Resource Bundle Inspection

Reads compiled GResource bundles through the ``gresource`` utility. The
bundle format itself is treated as opaque.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from .runner import DEFAULT_TIMEOUT, run_tool

GRESOURCE = "gresource"


class ResourceBundleInspector:
    """Lists and extracts entries of a compiled resource bundle."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def list_entries(self, bundle_path: Union[str, Path]) -> List[str]:
        """
        List resource paths stored in a bundle.

        Raises:
            ExternalToolError: gresource missing, failed or timed out
        """
        result = run_tool([GRESOURCE, "list", str(bundle_path)], timeout=self.timeout)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def extract_entry(self, bundle_path: Union[str, Path], resource_path: str) -> bytes:
        """
        Extract the raw bytes of one resource.

        Raises:
            ExternalToolError: gresource missing, failed or timed out
        """
        result = run_tool(
            [GRESOURCE, "extract", str(bundle_path), resource_path],
            timeout=self.timeout,
            text=False,
        )
        return result.stdout

    def extract_tree(
        self,
        bundle_path: Union[str, Path],
        prefix: str,
        dest_dir: Union[str, Path],
        entries: Optional[List[str]] = None,
    ) -> Dict[str, Path]:
        """
        Extract every entry under ``prefix`` into ``dest_dir``.

        Returns:
            Mapping of path relative to the prefix to the written file
        """
        dest_dir = Path(dest_dir)
        prefix = prefix.rstrip("/") + "/"
        if entries is None:
            entries = self.list_entries(bundle_path)

        written = {}
        for entry in entries:
            if not entry.startswith(prefix) or entry.endswith("/"):
                continue
            relative = entry[len(prefix):]
            if ".." in Path(relative).parts:
                continue
            target = dest_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(self.extract_entry(bundle_path, entry))
            written[relative] = target

        return written

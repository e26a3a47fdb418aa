"""
Check Result Models

Shared data types for diagnostic checks and write operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class CheckStatus(str, Enum):
    """Outcome of a single check."""
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class CheckResult:
    """Result of a single check."""
    name: str
    status: CheckStatus
    detail: str
    hints: Tuple[str, ...] = ()

    @classmethod
    def ok(cls, name: str, detail: str, *hints: str) -> "CheckResult":
        return cls(name, CheckStatus.PASS, detail, hints)

    @classmethod
    def warn(cls, name: str, detail: str, *hints: str) -> "CheckResult":
        return cls(name, CheckStatus.WARN, detail, hints)

    @classmethod
    def fail(cls, name: str, detail: str, *hints: str) -> "CheckResult":
        return cls(name, CheckStatus.FAIL, detail, hints)

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "detail": self.detail,
            "hints": list(self.hints),
        }

    def __str__(self) -> str:
        return f"[{self.status.label}] {self.name}: {self.detail}"


@dataclass
class DiagnosticReport:
    """Ordered results of one run."""
    checks: List[CheckResult] = field(default_factory=list)

    def add(self, result: CheckResult) -> None:
        self.checks.append(result)

    def extend(self, results: List[CheckResult]) -> None:
        self.checks.extend(results)

    @property
    def passed(self) -> bool:
        """True when no check failed. Warnings do not count."""
        return not self.failures

    @property
    def failures(self) -> List[CheckResult]:
        return [c for c in self.checks if c.status == CheckStatus.FAIL]

    @property
    def warnings(self) -> List[CheckResult]:
        return [c for c in self.checks if c.status == CheckStatus.WARN]

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def summary(self) -> str:
        """Get summary string."""
        total = len(self.checks)
        passed = len([c for c in self.checks if c.passed])
        errors = len(self.failures)
        warnings = len(self.warnings)

        if errors > 0:
            status = "FAILED"
        elif warnings > 0:
            status = "OK with warnings"
        else:
            status = "OK"

        return f"{status}: {passed}/{total} checks passed ({errors} failed, {warnings} warnings)"

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


DEFAULT_TIMEOUT = 60.0
DEFAULT_TOOLS: Tuple[str, ...] = ("Edit", "Write", "MultiEdit", "NotebookEdit")

# Exit codes recorded for commands that never produced one of their own
EXIT_TIMEOUT = 124
EXIT_LAUNCH_FAILED = 127


class ConfigError(Exception):
    """The rule file exists but cannot be turned into a RuleSet."""


@dataclass(frozen=True)
class CheckRule:
    name: str
    patterns: Tuple[str, ...]
    command: str
    enabled: bool = True
    timeout: Optional[float] = None  # None = use RuleSet.timeout


@dataclass(frozen=True)
class RuleSet:
    """
    All check rules loaded from one YAML source, in declaration order.

    Besides the rules it carries the settings that apply to every rule:
    the default command timeout, whether failures should block the caller,
    and which editor tools trigger a dispatch at all.
    """
    rules: Tuple[CheckRule, ...] = ()
    timeout: float = DEFAULT_TIMEOUT
    blocking: bool = False
    tools: Tuple[str, ...] = DEFAULT_TOOLS
    source: Optional[Path] = None

    def __iter__(self):
        return iter(self.rules)

    def __len__(self):
        return len(self.rules)

    def timeout_for(self, rule: CheckRule) -> float:
        return rule.timeout if rule.timeout is not None else self.timeout


@dataclass(frozen=True)
class EditEvent:
    file_path: str
    tool_name: str = ""


@dataclass
class CheckResult:
    rule_name: str
    command_executed: str
    exit_code: int
    stdout: str
    stderr: str
    matched: bool = True
    timed_out: bool = False
    duration: float = 0.0  # seconds

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict:
        return {
            "rule_name": self.rule_name,
            "command_executed": self.command_executed,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "matched": self.matched,
            "timed_out": self.timed_out,
            "duration": round(self.duration, 3),
        }


@dataclass
class DispatchReport:
    """
    Outcome of dispatching one EditEvent.

    Only rules that fired are in `results`. `error` is set when the
    dispatch could not run at all (e.g. a corrupt rule file), in which case
    `results` is empty.
    """
    file_path: str
    results: List[CheckResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and all(r.ok for r in self.results)

    @property
    def failed(self) -> List[CheckResult]:
        return [r for r in self.results if not r.ok]

    def summary(self) -> str:
        if self.error is not None:
            return f"editcheck: {self.error}"

        ran = len(self.results)
        noun = "check" if ran == 1 else "checks"
        lines = [f"ran {ran} {noun}, {len(self.failed)} failed"]
        for res in self.failed:
            lines.append(f"[{res.rule_name}] exit {res.exit_code}: {res.command_executed}")
            detail = (res.stderr or res.stdout).strip()
            if detail:
                lines.append(detail)
        return "\n".join(lines)

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .matching import InvalidPattern, expand_command, matches_any
from .runner import run_command
from .types import CheckResult, CheckRule, DispatchReport, EditEvent, RuleSet


def warn(message: str) -> None:
    # stdout belongs to the hook protocol
    print(f"WARNING: {message}", file=sys.stderr)


def match_path(file_path: str, root: Path) -> str:
    """Path used for pattern matching: relative to root when it lives inside it."""
    path = Path(file_path)
    if path.is_absolute():
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            return file_path
    return file_path


def select_rules(
    event: EditEvent,
    rules: RuleSet,
    root: Path,
) -> List[Tuple[CheckRule, str]]:
    """
    Enabled rules whose patterns match the event, paired with their expanded
    command, in declaration order. Rules with an invalid pattern are skipped.
    """
    target = match_path(event.file_path, root)
    selected: List[Tuple[CheckRule, str]] = []

    for rule in rules:
        if not rule.enabled:
            continue
        try:
            if not matches_any(rule.patterns, target):
                continue
        except InvalidPattern as e:
            warn(f"skipping check '{rule.name}': {e}")
            continue
        selected.append((rule, expand_command(rule.command, event.file_path)))

    return selected


def dispatch(
    event: EditEvent,
    rules: RuleSet,
    root: Optional[Union[str, Path]] = None,
    jobs: int = 1,
) -> DispatchReport:
    """
    Run every enabled rule matching `event.file_path` and collect the results.

    Commands run in `root` (default: cwd). With jobs > 1 they run in a thread
    pool; the report still lists results in rule declaration order. Command
    failures are recorded, not raised.
    """
    if not isinstance(event.file_path, str) or not event.file_path:
        raise ValueError("event.file_path must be a non-empty string")

    root = Path(root) if root is not None else Path.cwd()
    selected = select_rules(event, rules, root)

    def _run(item: Tuple[CheckRule, str]) -> CheckResult:
        rule, command = item
        return run_command(rule.name, command, cwd=root, timeout=rules.timeout_for(rule))

    if jobs > 1 and len(selected) > 1:
        with ThreadPoolExecutor(max_workers=min(jobs, len(selected))) as pool:
            results = list(pool.map(_run, selected))
    else:
        results = [_run(item) for item in selected]

    return DispatchReport(file_path=event.file_path, results=results)

"""
Post-edit hook protocol.

stdin: JSON from the calling tool, e.g.

    {"tool_name": "Edit", "tool_input": {"file_path": "/repo/src/app.ts"}}

stdout: one JSON object

    {
      "summary": "ran 2 checks, 1 failed\n...",
      "blocking": false,
      "success": false,
      "checks": [ {rule_name, command_executed, exit_code, ...}, ... ],
      "systemMessage": "..."            # advisory output
      "decision": "block", "reason": "" # only when blocking
    }

Exit status is 0 whenever the dispatch ran, whatever the checks returned.
A rule file that exists but is corrupt yields an advisory response and
exit status 1.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Dict, Optional

from .loader import load_rules
from .main import dispatch, warn
from .types import ConfigError, DispatchReport, EditEvent, RuleSet


EXIT_OK = 0
EXIT_CONFIG_ERROR = 1


def parse_event(raw: str) -> Optional[EditEvent]:
    """Extract the EditEvent from a hook payload; None if there is nothing to check."""
    if not raw.strip():
        return None
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        warn(f"ignoring hook input that is not JSON: {e}")
        return None
    if not isinstance(payload, dict):
        return None

    tool_input = payload.get("tool_input")
    if not isinstance(tool_input, dict):
        tool_input = {}

    file_path = (
        tool_input.get("file_path")
        or tool_input.get("notebook_path")
        or payload.get("file_path")
    )
    if not isinstance(file_path, str) or not file_path:
        return None

    tool_name = payload.get("tool_name")
    return EditEvent(file_path=file_path, tool_name=tool_name if isinstance(tool_name, str) else "")


def build_response(report: DispatchReport, blocking: bool) -> Dict[str, Any]:
    blocks = blocking and not report.success and report.error is None
    summary = report.summary()
    response: Dict[str, Any] = {
        "summary": summary,
        "blocking": blocks,
        "success": report.success,
        "checks": [r.to_dict() for r in report.results],
    }
    if blocks:
        response["decision"] = "block"
        response["reason"] = summary
    elif report.results or report.error is not None:
        response["systemMessage"] = summary
    return response


def run_hook(
    stdin: IO[str],
    stdout: IO[str],
    root: Path,
    config_path: Optional[Path],
    jobs: int = 1,
) -> int:
    event = parse_event(stdin.read())
    file_path = event.file_path if event else ""

    try:
        rules = load_rules(config_path) if config_path is not None else RuleSet()
    except ConfigError as e:
        warn(str(e))
        report = DispatchReport(file_path=file_path, error=f"configuration error: {e}")
        json.dump(build_response(report, blocking=False), stdout)
        stdout.write("\n")
        return EXIT_CONFIG_ERROR

    if event is None or (event.tool_name and event.tool_name not in rules.tools):
        report = DispatchReport(file_path=file_path)
    else:
        report = dispatch(event, rules, root=root, jobs=jobs)

    json.dump(build_response(report, blocking=rules.blocking), stdout)
    stdout.write("\n")
    return EXIT_OK

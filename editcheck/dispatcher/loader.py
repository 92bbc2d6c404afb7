from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # type: ignore[import]

from .types import DEFAULT_TIMEOUT, DEFAULT_TOOLS, CheckRule, ConfigError, RuleSet


def load_yaml_dict(path: Path) -> Optional[Dict[str, Any]]:
    """
    Load a YAML file that must hold a mapping at the top level.

    - Missing file -> None (caller treats it as "nothing configured").
    - Unreadable file, YAML syntax error or a non-mapping document
      -> ConfigError.
    - Empty file -> {}.
    """
    if not path.exists():
        return None

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read rule file '{path}': {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse rule file '{path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"rule file '{path}' does not contain a mapping at top level")

    return data


def _as_timeout(value: Any, where: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{where}: timeout must be a number, got {value!r}")
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: timeout must be a number, got {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"{where}: timeout must be positive, got {value!r}")
    return timeout


def _parse_rule(index: int, entry: Any) -> CheckRule:
    where = f"checks[{index}]"
    if not isinstance(entry, dict):
        raise ConfigError(f"{where}: expected a mapping, got {type(entry).__name__}")

    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"{where}: 'name' must be a non-empty string")
    where = f"check '{name}'"

    patterns = entry.get("patterns")
    if isinstance(patterns, str):
        patterns = [patterns]
    if not isinstance(patterns, list) or not patterns:
        raise ConfigError(f"{where}: 'patterns' must be a non-empty list")

    command = entry.get("command")
    if not isinstance(command, str) or not command.strip():
        raise ConfigError(f"{where}: 'command' must be a non-empty string")

    enabled = entry.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigError(f"{where}: 'enabled' must be true or false")

    timeout = entry.get("timeout")
    if timeout is not None:
        timeout = _as_timeout(timeout, where)

    # Individual patterns are validated at match time so that one bad glob
    # only disables its own rule.
    return CheckRule(
        name=name,
        patterns=tuple(patterns),
        command=command,
        enabled=enabled,
        timeout=timeout,
    )


def parse_rule_set(data: Dict[str, Any], source: Optional[Path] = None) -> RuleSet:
    """
    Build a RuleSet from an already-loaded YAML mapping.

    Schema:

        timeout: 60
        blocking: false
        tools: [Edit, Write, MultiEdit, NotebookEdit]
        checks:
          - name: ts-lint
            patterns: ["*.ts", "*.tsx"]
            command: "npx eslint --fix {file}"
            enabled: true     # optional, default true
            timeout: 30       # optional, default top-level timeout
    """
    raw_checks = data.get("checks")
    if raw_checks is None:
        raw_checks = []
    if not isinstance(raw_checks, list):
        raise ConfigError("'checks' must be a list")

    rules: List[CheckRule] = []
    seen = set()
    for i, entry in enumerate(raw_checks):
        rule = _parse_rule(i, entry)
        if rule.name in seen:
            raise ConfigError(f"duplicate check name '{rule.name}'")
        seen.add(rule.name)
        rules.append(rule)

    timeout = DEFAULT_TIMEOUT
    if data.get("timeout") is not None:
        timeout = _as_timeout(data["timeout"], "top level")

    blocking = data.get("blocking", False)
    if not isinstance(blocking, bool):
        raise ConfigError("'blocking' must be true or false")

    tools = data.get("tools")
    if tools is None:
        tools = DEFAULT_TOOLS
    elif not isinstance(tools, list) or not all(isinstance(t, str) for t in tools):
        raise ConfigError("'tools' must be a list of tool names")

    return RuleSet(
        rules=tuple(rules),
        timeout=timeout,
        blocking=blocking,
        tools=tuple(tools),
        source=source,
    )


def load_rules(path: Union[str, Path]) -> RuleSet:
    path = Path(path)
    data = load_yaml_dict(path)
    if data is None:
        return RuleSet()
    return parse_rule_set(data, source=path)

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union


CONFIG_ENV = "EDITCHECK_CONFIG"
PROJECT_DIR_ENV = "CLAUDE_PROJECT_DIR"

# Looked up under the project root, first hit wins
CONFIG_CANDIDATES: Sequence[str] = (
    "editcheck.yaml",
    ".editcheck.yaml",
    ".claude/checks.yaml",
)


def _git_toplevel(cwd: Path) -> Optional[Path]:
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if proc.returncode != 0 or not proc.stdout.strip():
        return None
    return Path(proc.stdout.strip())


def find_project_root(explicit: Optional[Union[str, Path]] = None) -> Path:
    """--root, then $CLAUDE_PROJECT_DIR, then the git toplevel, then cwd."""
    if explicit:
        return Path(explicit).resolve()
    env = os.environ.get(PROJECT_DIR_ENV)
    if env:
        return Path(env).resolve()
    cwd = Path.cwd()
    return _git_toplevel(cwd) or cwd


def find_config(root: Path, explicit: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Locate the rule file.

    An explicit path (argument or $EDITCHECK_CONFIG) is returned even if it
    does not exist; the loader then treats it as "no rules". Relative
    explicit paths are resolved against the project root.
    """
    chosen = explicit or os.environ.get(CONFIG_ENV)
    if chosen:
        path = Path(chosen)
        return path if path.is_absolute() else root / path

    for name in CONFIG_CANDIDATES:
        path = root / name
        if path.exists():
            return path
    return None

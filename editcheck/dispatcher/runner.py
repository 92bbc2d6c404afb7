from __future__ import annotations

import os
import signal
import subprocess
import time
from pathlib import Path
from typing import Optional, Union

from .types import EXIT_LAUNCH_FAILED, EXIT_TIMEOUT, CheckResult


def _text(data: Optional[Union[str, bytes]]) -> str:
    # pipes are read in text mode, but stay defensive about partial reads
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_command(
    rule_name: str,
    command: str,
    cwd: Union[str, Path],
    timeout: float,
) -> CheckResult:
    """
    Run one expanded check command through the shell and capture its outcome.

    Never raises for command failures: a non-zero exit, a missing program
    (the shell answers 127), a launch error or a timeout all end up in the
    returned CheckResult. The command gets its own process group; on timeout
    the whole group is killed and reaped before this returns, so nothing the
    check started keeps running.
    """
    started = time.monotonic()
    try:
        proc = subprocess.Popen(
            command,
            shell=True,
            cwd=str(cwd),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except OSError as e:
        return CheckResult(
            rule_name=rule_name,
            command_executed=command,
            exit_code=EXIT_LAUNCH_FAILED,
            stdout="",
            stderr=f"failed to start command: {e}",
            duration=time.monotonic() - started,
        )

    with proc:
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_group(proc)
            stdout, stderr = proc.communicate()
            stderr = _text(stderr)
            if stderr and not stderr.endswith("\n"):
                stderr += "\n"
            stderr += f"timed out after {timeout:g}s"
            return CheckResult(
                rule_name=rule_name,
                command_executed=command,
                exit_code=EXIT_TIMEOUT,
                stdout=_text(stdout),
                stderr=stderr,
                timed_out=True,
                duration=time.monotonic() - started,
            )
        except BaseException:
            _kill_group(proc)
            raise

    return CheckResult(
        rule_name=rule_name,
        command_executed=command,
        exit_code=proc.returncode,
        stdout=stdout,
        stderr=stderr,
        duration=time.monotonic() - started,
    )

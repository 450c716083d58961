# process.py
# Long-lived background processes (dev servers) tracked through a pid file.
from __future__ import annotations

import os
import signal
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from .config import DEFAULT_PID_FILE
from .errors import ProcessNotFoundError


def _alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # exists, owned by someone else
        return True
    return True


def read_pid(pid_file: str | Path = DEFAULT_PID_FILE) -> int:
    """Return the recorded pid. A file that cannot be parsed is removed."""
    p = Path(pid_file)
    if not p.exists():
        raise ProcessNotFoundError(str(p), "no recorded process")
    try:
        pid = int(p.read_text(encoding="utf-8").strip())
    except ValueError:
        pid = 0
    # 0 and negatives would signal whole process groups
    if pid <= 0:
        p.unlink(missing_ok=True)
        raise ProcessNotFoundError(str(p), "invalid pid file")
    return pid


def start(
    argv: List[str],
    pid_file: str | Path = DEFAULT_PID_FILE,
    *,
    cwd: str | Path | None = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.Popen:
    """Launch `argv` in its own session and record its pid."""
    p = Path(pid_file)
    if p.exists():
        try:
            pid = read_pid(p)
        except ProcessNotFoundError:
            pid = None
        if pid is not None and _alive(pid):
            raise RuntimeError(f"A server process is already running (pid={pid}, {p})")

    full_env = os.environ.copy()
    full_env.update(env or {})
    proc = subprocess.Popen(
        argv,
        cwd=str(cwd) if cwd is not None else None,
        env=full_env,
        stdin=subprocess.DEVNULL,
        start_new_session=True,
    )
    p.write_text(str(proc.pid), encoding="utf-8")
    return proc


def stop(pid_file: str | Path = DEFAULT_PID_FILE, sig: int = signal.SIGTERM) -> int:
    """
    Signal the recorded process and forget it.

    Raises ProcessNotFoundError when nothing is recorded or the process is gone;
    a stale pid file is deleted either way.
    """
    p = Path(pid_file)
    pid = read_pid(p)
    try:
        os.kill(pid, sig)
    except ProcessLookupError:
        p.unlink(missing_ok=True)
        raise ProcessNotFoundError(str(p), f"pid {pid} is not running") from None
    except PermissionError:
        # pid was reused by a process we cannot signal
        p.unlink(missing_ok=True)
        raise ProcessNotFoundError(str(p), f"pid {pid} is not ours") from None
    p.unlink(missing_ok=True)
    return pid

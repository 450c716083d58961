# config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_BUILDFILE = "buildfile.py"
DEFAULT_PID_FILE = ".dev.pid"
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_WATCH = ["src/**/*"]

DIST = "dist"
LIB = "lib"


@dataclass
class BuildConfig:
    """
    Runtime settings. CLI options win over environment, environment over defaults:
      BETTERBUILD_BUILDFILE, BETTERBUILD_PID_FILE,
      BETTERBUILD_WORKERS, BETTERBUILD_POLL_INTERVAL
    """
    buildfile: Optional[str] = None
    pid_file: str = DEFAULT_PID_FILE
    workers: Optional[int] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildConfig:
        env = os.environ if environ is None else environ
        workers = env.get("BETTERBUILD_WORKERS")
        return cls(
            buildfile=env.get("BETTERBUILD_BUILDFILE") or None,
            pid_file=env.get("BETTERBUILD_PID_FILE", DEFAULT_PID_FILE),
            workers=int(workers) if workers else None,
            poll_interval=float(env.get("BETTERBUILD_POLL_INTERVAL", DEFAULT_POLL_INTERVAL)),
        )

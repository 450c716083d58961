# steps/compile.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .base import _bin, run_cmd


@dataclass(frozen=True)
class CompileStep:
    """Compile a TypeScript project into `out_dir` with tsc."""
    name: str = "typescript"
    project: str = "tsconfig.json"
    out_dir: str = "lib"
    declaration: bool = True
    source_maps: bool = False
    tool: str = "tsc"
    cwd: str | None = None

    def argv(self) -> List[str]:
        cmd = [_bin(self.tool, self.cwd), "-p", self.project, "--outDir", self.out_dir]
        if self.declaration:
            cmd.append("--declaration")
        if self.source_maps:
            cmd.append("--sourceMap")
        return cmd

    def execute(self) -> None:
        run_cmd(self.name, self.argv(), cwd=self.cwd)

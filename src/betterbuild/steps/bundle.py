# steps/bundle.py
from __future__ import annotations

import gzip
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from ..files import resolve_globs
from ..ui.console import get_console
from .base import _bin, run_cmd


@dataclass(frozen=True)
class BundleOptions:
    minify: bool = False                   # compress + mangle
    source_maps: bool = False              # inline debug maps
    include_builtins: bool = True          # inline standard-library shims
    report_size: bool = False              # print raw/gzip size afterwards
    standalone_export_name: str = "Fuel"   # global the bundle exposes its API under


def bundle_name(entry: str | Path) -> str:
    """lib/index.js -> index.bundle.js"""
    return re.sub(r"\.[^.]+$", "", Path(entry).name) + ".bundle.js"


def report_size(path: str | Path) -> Tuple[int, int]:
    data = Path(path).read_bytes()
    size, gz = len(data), len(gzip.compress(data))
    get_console().print_size(str(path), size, gz)
    return size, gz


@dataclass(frozen=True)
class BundleStep:
    """Bundle one entry file into `<out_dir>/<stem>.bundle.js` with esbuild."""
    entry: str
    out_dir: str = "dist"
    options: BundleOptions = field(default_factory=BundleOptions)
    name: str = ""
    tool: str = "esbuild"
    cwd: str | None = None

    @property
    def output(self) -> Path:
        return Path(self.out_dir) / bundle_name(self.entry)

    def argv(self) -> List[str]:
        opts = self.options
        cmd = [
            _bin(self.tool, self.cwd),
            self.entry,
            "--bundle",
            f"--outfile={self.output}",
            "--format=iife",
            f"--global-name={opts.standalone_export_name}",
            "--platform=browser" if opts.include_builtins else "--platform=neutral",
        ]
        if opts.minify:
            cmd.append("--minify")
        if opts.source_maps:
            cmd.append("--sourcemap=inline")
        return cmd

    def execute(self) -> None:
        run_cmd(self.name or f"bundle {self.entry}", self.argv(), cwd=self.cwd)
        if self.options.report_size:
            report_size(Path(self.cwd or ".") / self.output)


@dataclass(frozen=True)
class BundleAll:
    """Bundle every file matching `patterns`, one after another."""
    patterns: Tuple[str, ...]
    out_dir: str = "dist"
    options: BundleOptions = field(default_factory=lambda: BundleOptions(source_maps=True))
    name: str = "bundle-all"
    cwd: str | None = None

    def steps(self) -> List[BundleStep]:
        root = Path(self.cwd or ".")
        return [
            BundleStep(entry=str(f.relative_to(root)), out_dir=self.out_dir, options=self.options, cwd=self.cwd)
            for f in resolve_globs(root, self.patterns)
        ]

    def execute(self) -> None:
        steps = self.steps()
        if not steps:
            get_console().print_info(f"{self.name}: no files match {list(self.patterns)}")
        for s in steps:
            s.execute()

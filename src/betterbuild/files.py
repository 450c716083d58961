# files.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


def resolve_globs(root: str | Path, patterns: Iterable[str]) -> List[Path]:
    """
    Expand patterns into existing files under `root`.
    Supports:
      - file path: "package.json"
      - dir path:  "src/" (every file below it)
      - glob:      "src/**/__tests__/*.spec.ts*"
    """
    root = Path(root)
    out: List[Path] = []
    for pat in patterns:
        pat = pat.strip()
        if not pat:
            continue
        p = root / pat
        if p.is_file():
            out.append(p)
            continue
        if p.is_dir():
            out.extend(f for f in sorted(p.rglob("*")) if f.is_file())
            continue
        out.extend(m for m in sorted(root.glob(pat)) if m.is_file())

    # de-dupe while preserving order
    seen = set()
    uniq: List[Path] = []
    for p in out:
        rp = str(p.resolve())
        if rp not in seen:
            seen.add(rp)
            uniq.append(p)
    return uniq

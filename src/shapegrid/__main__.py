# どこで: `src/shapegrid/__main__.py`。
# 何を: `python -m shapegrid` を CLI へ委譲する。

from __future__ import annotations

from shapegrid.cli import main

raise SystemExit(main())

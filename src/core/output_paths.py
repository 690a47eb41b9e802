"""
Output path helpers for exported mesh parts.

Centralizes naming conventions so CLI and scripts stay in sync.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

_UNSAFE_CHARS = '<>:"/\\|?* '


def _as_path(value: PathLike) -> Path:
    return value if isinstance(value, Path) else Path(value)


def safe_part_name(name: str) -> str:
    cleaned = "".join("_" if ch in _UNSAFE_CHARS else ch for ch in str(name)).strip("._")
    return cleaned or "part"


def part_output_path(
    input_path: PathLike,
    part_name: str,
    out_dir: Optional[PathLike] = None,
    fmt: str = "ply",
) -> Path:
    """``<out_dir>/<input stem>.<part name>.<fmt>``; ``out_dir`` defaults to the input's folder."""
    src = _as_path(input_path)
    folder = _as_path(out_dir) if out_dir else src.parent
    ext = str(fmt).strip().lstrip(".").lower() or "ply"
    return folder / f"{src.stem}.{safe_part_name(part_name)}.{ext}"

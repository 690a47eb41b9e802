"""
Render state shared between a mesh and the parts split out of it.
렌더 상태 (재질) 정의
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(eq=False)
class RenderState:
    """
    Opaque shading configuration attached to a mesh.

    Compared by identity: split parts hold the *same* object as their source,
    so changing e.g. ``opacity`` through one part affects every part.
    """
    color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    opacity: float = 1.0
    shininess: float = 30.0
    emissive: tuple[float, float, float] = (0.0, 0.0, 0.0)
    double_sided: bool = False
    transparent: bool = False
    depth_write: bool = True
    texture: Optional[np.ndarray] = None

    @staticmethod
    def from_hex(color_int: int, **kwargs) -> "RenderState":
        """Create a render state from an integer hex color (e.g. 0xd4a574)."""
        return RenderState(color=RenderState.hex_to_rgb(color_int), **kwargs)

    @staticmethod
    def hex_to_rgb(color_int: int) -> tuple[float, float, float]:
        r = ((color_int >> 16) & 0xFF) / 255.0
        g = ((color_int >> 8) & 0xFF) / 255.0
        b = (color_int & 0xFF) / 255.0
        return (r, g, b)

    @property
    def has_texture(self) -> bool:
        return self.texture is not None

"""Page placement helpers for raster printing."""

from __future__ import annotations

from typing import Tuple


def compute_fit_rect(
    target_width: float,
    target_height: float,
    source_width: float,
    source_height: float,
) -> Tuple[float, float, float, float]:
    """
    Return centered draw rect (x, y, width, height) that fits the source
    inside the target while keeping its aspect ratio.
    """
    tw = max(1.0, float(target_width))
    th = max(1.0, float(target_height))
    sw = max(1.0, float(source_width))
    sh = max(1.0, float(source_height))

    factor = min(tw / sw, th / sh)
    draw_w = max(1.0, sw * factor)
    draw_h = max(1.0, sh * factor)
    x = (tw - draw_w) / 2.0
    y = (th - draw_h) / 2.0
    return x, y, draw_w, draw_h

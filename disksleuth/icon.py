"""Procedural application icon: a pie chart inside a magnifying glass.

The icon is rendered at any resolution as RGBA pixels and can be packed
into a multi-resolution ICO file.
"""

from __future__ import annotations

import argparse
import math
import os
import struct
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_ICON_PATH = "assets/icon.ico"
DEFAULT_SIZES = (48, 32, 16)

# Pie segments: start and end angle in degrees (clockwise in screen space), colour.
_SEGMENTS: Tuple[Tuple[float, float, Tuple[int, int, int]], ...] = (
    (0.0, 144.0, (0x89, 0xB4, 0xFA)),
    (144.0, 245.0, (0xA6, 0xE3, 0xA1)),
    (245.0, 314.0, (0xF9, 0xE2, 0xAF)),
    (314.0, 360.0, (0xF3, 0x8B, 0xA8)),
)
_BOUNDARIES = tuple(start for start, _, _ in _SEGMENTS)
_BOUNDARY_GAP_HALF = 2.5


def _to_u8(value: float) -> int:
    """Saturating, truncating conversion of a channel value to 0..255."""
    if value != value:  # NaN
        return 0
    return int(min(max(value, 0.0), 255.0))


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _smooth_edge(dist: float, edge: float) -> float:
    """Anti-aliased edge going from 1 to 0 as ``dist`` crosses ``edge``."""
    d = dist - edge
    if d < -1.0:
        return 1.0
    if d > 1.0:
        return 0.0
    return 0.5 - d * 0.5


def _smooth_edge_inv(dist: float, edge: float) -> float:
    """Anti-aliased edge going from 0 to 1 as ``dist`` crosses ``edge``."""
    d = dist - edge
    if d < -1.0:
        return 0.0
    if d > 1.0:
        return 1.0
    return 0.5 + d * 0.5


def _boundary_factor(angle: float) -> float:
    """Darkening factor near the pie segment boundaries."""
    factor = 0.0
    for boundary in _BOUNDARIES:
        d = abs(angle - boundary)
        if d > 180.0:
            d = 360.0 - d
        if d < _BOUNDARY_GAP_HALF:
            factor = max(factor, 1.0 - d / _BOUNDARY_GAP_HALF)
    return factor


def _project_t(px: float, py: float, ax: float, ay: float, bx: float, by: float) -> float:
    abx, aby = bx - ax, by - ay
    len_sq = abx * abx + aby * aby
    if len_sq < 0.0001:
        return 0.0
    return ((px - ax) * abx + (py - ay) * aby) / len_sq


def _point_to_seg_dist(
    px: float, py: float, ax: float, ay: float, bx: float, by: float
) -> float:
    abx, aby = bx - ax, by - ay
    if abx * abx + aby * aby < 0.0001:
        return math.hypot(px - ax, py - ay)
    t = _clamp(_project_t(px, py, ax, ay, bx, by), 0.0, 1.0)
    return math.hypot(px - (ax + t * abx), py - (ay + t * aby))


def _lerp_c(a: int, b: int, t: float) -> int:
    return _to_u8(a * (1.0 - t) + b * t)


def _segment_colour(angle: float) -> Tuple[int, int, int]:
    for start, end, colour in _SEGMENTS:
        if start <= angle < end:
            return colour
    return _SEGMENTS[0][2]


def render_icon(size: int) -> bytes:
    """Render the icon as top-to-bottom RGBA pixels (``size * size * 4`` bytes)."""
    if size < 0:
        raise ValueError(f"icon size must be non-negative, got {size}")
    s = float(size)
    pixels = bytearray(size * size * 4)

    cx = cy = s * 0.42
    radius = s * 0.34
    ring_outer = radius + s * 0.045
    ring_inner = radius - 0.5

    angle_45 = math.pi / 4.0
    h_start_x = cx + ring_outer * math.cos(angle_45)
    h_start_y = cy + ring_outer * math.sin(angle_45)
    h_end_x = h_end_y = s * 0.91
    h_width_start = s * 0.055
    h_width_end = s * 0.075

    for y in range(size):
        for x in range(size):
            px = x + 0.5
            py = y + 0.5
            dx = px - cx
            dy = py - cy
            dist = math.hypot(dx, dy)

            cr = cg = cb = 0
            ca = 0.0

            # Pie-chart lens interior.
            if dist < radius + 1.5:
                angle = math.degrees(math.atan2(dy, dx))
                if angle < 0.0:
                    angle += 360.0
                seg = _segment_colour(angle)
                darken = 1.0 - 0.35 * _boundary_factor(angle)
                cr, cg, cb = (_to_u8(c * darken) for c in seg)
                ca = _smooth_edge(dist, radius)

                shade = 1.0 - 0.12 * (dist / radius)
                cr, cg, cb = (_to_u8(c * shade) for c in (cr, cg, cb))

                h_dist = math.hypot(dx + radius * 0.30, dy + radius * 0.30)
                highlight = max(1.0 - h_dist / (radius * 0.65), 0.0) * 0.18
                cr, cg, cb = (_to_u8(c + highlight * 255.0) for c in (cr, cg, cb))

            # Magnifying-glass ring.
            if ring_inner < dist < ring_outer + 1.5:
                ring_alpha = _smooth_edge_inv(dist, ring_inner) * _smooth_edge(dist, ring_outer)
                grad = 0.5 + 0.5 * (1.0 - _clamp(dy / radius, -1.0, 1.0)) * 0.5
                rr, rg, rb = (_to_u8(c * grad) for c in (0x70, 0x78, 0x85))
                cr = _lerp_c(cr, rr, ring_alpha)
                cg = _lerp_c(cg, rg, ring_alpha)
                cb = _lerp_c(cb, rb, ring_alpha)
                ca = ca + (1.0 - ca) * ring_alpha

            # Handle.
            t = _project_t(px, py, h_start_x, h_start_y, h_end_x, h_end_y)
            if -0.05 < t < 1.05:
                tt = _clamp(t, 0.0, 1.0)
                half_w = h_width_start + (h_width_end - h_width_start) * tt
                ld = _point_to_seg_dist(px, py, h_start_x, h_start_y, h_end_x, h_end_y)
                if ld < half_w + 1.5:
                    handle_aa = _smooth_edge(ld, half_w)
                    hr = _lerp_c(0x78, 0x50, tt)
                    hg = _lerp_c(0x7D, 0x55, tt)
                    hb = _lerp_c(0x88, 0x60, tt)
                    cr = _lerp_c(cr, hr, handle_aa)
                    cg = _lerp_c(cg, hg, handle_aa)
                    cb = _lerp_c(cb, hb, handle_aa)
                    ca = ca + (1.0 - ca) * handle_aa

            idx = (y * size + x) * 4
            pixels[idx:idx + 4] = bytes((cr, cg, cb, _to_u8(ca * 255.0)))

    return bytes(pixels)


def rgba_to_ico_bmp(rgba: bytes, size: int) -> bytes:
    """Convert top-to-bottom RGBA pixels into the BMP blob of an ICO entry.

    The blob holds a BITMAPINFOHEADER with doubled height, bottom-to-top BGRA
    pixels and a 1-bit AND mask set where alpha is below 128.
    """
    if size < 0:
        raise ValueError(f"icon size must be non-negative, got {size}")
    if len(rgba) != size * size * 4:
        raise ValueError(
            f"expected {size * size * 4} bytes of RGBA for size {size}, got {len(rgba)}"
        )

    out = bytearray(struct.pack("<IiiHHIIiiII", 40, size, size * 2, 1, 32, 0, 0, 0, 0, 0, 0))

    rows = [rgba[y * size * 4:(y + 1) * size * 4] for y in range(size)]
    for row in reversed(rows):
        for x in range(0, len(row), 4):
            r, g, b, a = row[x:x + 4]
            out += bytes((b, g, r, a))

    row_bytes = (size + 31) // 32 * 4
    for row in reversed(rows):
        mask = bytearray(row_bytes)
        for x in range(size):
            if row[x * 4 + 3] < 128:
                mask[x // 8] |= 1 << (7 - x % 8)
        out += mask

    return bytes(out)


def generate_ico(sizes: Iterable[int]) -> bytes:
    """Produce a multi-resolution ICO file holding the icon at each size."""
    sizes = list(sizes)
    if len(sizes) > 0xFFFF:
        raise ValueError("too many images for one ICO file")
    images: List[Tuple[int, bytes]] = [
        (sz, rgba_to_ico_bmp(render_icon(sz), sz)) for sz in sizes
    ]

    out = bytearray(struct.pack("<HHH", 0, 1, len(images)))
    offset = 6 + 16 * len(images)
    for sz, bmp in images:
        dim = 0 if sz >= 256 else sz
        out += struct.pack("<BBBBHHII", dim, dim, 0, 0, 1, 32, len(bmp), offset)
        offset += len(bmp)
    for _, bmp in images:
        out += bmp
    return bytes(out)


def write_icon(path: PathLike, sizes: Sequence[int] = DEFAULT_SIZES) -> Path:
    """Write an ICO file at ``path``, creating parent directories."""
    target = Path(path)
    data = generate_ico(sizes)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return target


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Generate the application icon file unless it already exists."""
    parser = argparse.ArgumentParser(description="Generate the application icon.")
    parser.add_argument("output", nargs="?", default=DEFAULT_ICON_PATH, help="ICO file to write")
    parser.add_argument(
        "--sizes", nargs="+", type=int, default=list(DEFAULT_SIZES), help="image sizes in pixels"
    )
    parser.add_argument("--force", action="store_true", help="overwrite an existing file")
    args = parser.parse_args(argv)

    output = Path(args.output)
    if output.exists() and not args.force:
        return 0
    try:
        write_icon(output, args.sizes)
    except (OSError, ValueError) as exc:
        print(f"Failed to generate icon: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
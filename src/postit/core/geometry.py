from __future__ import annotations

"""Pure coordinate transforms between sensor, upright and model space."""

from typing import Optional, Tuple

import numpy as np

from postit.core.errors import InvalidInput
from postit.core.types import Box, LetterboxTransform, Point, Rotation


def rotated_dimensions(width: int, height: int, rotation: Rotation | int) -> Tuple[int, int]:
    """Size of the image after rotating it upright."""
    rot = Rotation.from_degrees(rotation)
    if rot.swaps_axes:
        return height, width
    return width, height


def unrotate_box(box: Box, rotation: Rotation | int, rotated_width: float, rotated_height: float) -> Box:
    """Map a box from the upright frame back to the sensor frame.

    The upright frame is the sensor frame rotated clockwise by `rotation`,
    so the sensor height equals rotated_width for 90 and 270.
    """
    rot = Rotation.from_degrees(rotation)
    w = float(rotated_width)
    h = float(rotated_height)
    if rot == Rotation.DEG_90:
        return Box(box.top, w - box.right, box.bottom, w - box.left)
    if rot == Rotation.DEG_180:
        return Box(w - box.right, h - box.bottom, w - box.left, h - box.top)
    if rot == Rotation.DEG_270:
        return Box(h - box.bottom, box.left, h - box.top, box.right)
    return box


def compute_letterbox(src_w: int, src_h: int, dst_size: int) -> LetterboxTransform:
    """Fit (src_w, src_h) into a dst_size square keeping the aspect ratio."""
    if src_w <= 0 or src_h <= 0:
        raise InvalidInput(f"Image size must be positive, got {src_w}x{src_h}")
    if dst_size <= 0:
        raise InvalidInput(f"Model input size must be positive, got {dst_size}")

    scale = min(dst_size / float(src_w), dst_size / float(src_h))
    resized_w = max(1, int(round(src_w * scale)))
    resized_h = max(1, int(round(src_h * scale)))
    # Integer padding so image placement and the inverse agree exactly.
    return LetterboxTransform(
        scale=scale,
        offset_x=float((dst_size - resized_w) // 2),
        offset_y=float((dst_size - resized_h) // 2),
        resized_width=resized_w,
        resized_height=resized_h,
        size=int(dst_size),
    )


def unletterbox(point: Point, transform: LetterboxTransform) -> Point:
    """Model-space point -> source image point."""
    x, y = point
    return (
        (x - transform.offset_x) / transform.scale,
        (y - transform.offset_y) / transform.scale,
    )


def unletterbox_box(box: Box, transform: LetterboxTransform) -> Box:
    left, top = unletterbox((box.left, box.top), transform)
    right, bottom = unletterbox((box.right, box.bottom), transform)
    return Box(left, top, right, bottom)


def iou(a: Box, b: Box) -> float:
    """Intersection over Union of two boxes; 0.0 when they do not overlap."""
    inter_w = min(a.right, b.right) - max(a.left, b.left)
    inter_h = min(a.bottom, b.bottom) - max(a.top, b.top)
    if not (inter_w > 0.0 and inter_h > 0.0):
        return 0.0

    inter = inter_w * inter_h
    union = a.area + b.area - inter
    if not union > 0.0:
        return 0.0
    return float(inter / union)


def crop_box(image: np.ndarray, box: Box) -> Optional[np.ndarray]:
    """Crop an image region for OCR; None if the clamped region is empty."""
    h, w = image.shape[:2]
    x1 = max(0, int(np.floor(box.left)))
    y1 = max(0, int(np.floor(box.top)))
    x2 = min(w, int(np.ceil(box.right)))
    y2 = min(h, int(np.ceil(box.bottom)))
    if x2 <= x1 or y2 <= y1:
        return None
    return image[y1:y2, x1:x2].copy()

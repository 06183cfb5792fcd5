from __future__ import annotations

"""Decode the raw [1, 5, N] detection head into candidate detections."""

from typing import List

import numpy as np

from postit.core.errors import InvalidInput
from postit.core.types import Box, Detection, LetterboxTransform

# xc <= this means the head emitted fractions of the input size, not pixels.
# 1.1 rather than 1.0 tolerates float overshoot at the right/bottom edge.
NORMALIZED_COORD_LIMIT = 1.1


def _as_rows(raw: np.ndarray) -> np.ndarray:
    """Return the head as a float array shaped (5, N)."""
    arr = np.asarray(raw, dtype=np.float32)
    if arr.ndim == 3 and arr.shape[0] == 1:
        arr = arr[0]
    if arr.ndim != 2 or arr.shape[0] != 5:
        raise InvalidInput(f"Expected raw output shaped [1, 5, N], got {list(np.shape(raw))}")
    return arr


def decode(
    raw: np.ndarray,
    transform: LetterboxTransform,
    image_width: float,
    image_height: float,
    conf_threshold: float = 0.25,
    label: str = "postit",
) -> List[Detection]:
    """Turn every anchor above conf_threshold into a Detection.

    Boxes are mapped from model-input pixels back to the image the letterbox
    was computed for and clamped to its bounds. Candidates with non-finite
    or zero-area boxes are dropped; duplicates are left for NMS.
    """
    rows = _as_rows(raw)
    scores = rows[4]
    keep = scores >= conf_threshold
    if not np.any(keep):
        return []

    xc, yc, w, h = (rows[i][keep].astype(np.float64) for i in range(4))
    scores = scores[keep].astype(np.float64)

    normalized = xc <= NORMALIZED_COORD_LIMIT
    size = float(transform.size)
    xc = np.where(normalized, xc * size, xc)
    yc = np.where(normalized, yc * size, yc)
    w = np.where(normalized, w * size, w)
    h = np.where(normalized, h * size, h)

    left = (xc - w / 2.0 - transform.offset_x) / transform.scale
    top = (yc - h / 2.0 - transform.offset_y) / transform.scale
    right = (xc + w / 2.0 - transform.offset_x) / transform.scale
    bottom = (yc + h / 2.0 - transform.offset_y) / transform.scale

    # Checked before clipping, which would turn +-inf into image edges.
    finite = np.isfinite(left) & np.isfinite(top) & np.isfinite(right) & np.isfinite(bottom) & np.isfinite(scores)

    left = np.clip(left, 0.0, image_width)
    right = np.clip(right, 0.0, image_width)
    top = np.clip(top, 0.0, image_height)
    bottom = np.clip(bottom, 0.0, image_height)

    valid = finite & (right > left) & (bottom > top)

    out: List[Detection] = []
    for i in np.flatnonzero(valid):
        out.append(
            Detection(
                box=Box(float(left[i]), float(top[i]), float(right[i]), float(bottom[i])),
                label=label,
                score=float(scores[i]),
            )
        )
    return out

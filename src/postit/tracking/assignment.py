from __future__ import annotations

"""Greedy detection -> track assignment, kept free of tracker state."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from postit.core.geometry import iou
from postit.core.types import Box


@dataclass(frozen=True)
class Assignment:
    """Outcome for one detection: the claimed track index, or None."""
    detection_index: int
    track_index: Optional[int]
    iou: float


def greedy_assign(
    detection_boxes: Sequence[Box],
    track_boxes: Sequence[Box],
    match_iou: float,
) -> List[Assignment]:
    """Give each detection, in the given order, its best unclaimed track.

    A track is claimed only when its IoU with the detection is >= match_iou.
    Among equal IoUs the earlier track wins. Callers pass detections in
    priority order (highest score first).
    """
    claimed: Set[int] = set()
    out: List[Assignment] = []

    for di, dbox in enumerate(detection_boxes):
        best_idx: Optional[int] = None
        best_iou = 0.0
        for ti, tbox in enumerate(track_boxes):
            if ti in claimed:
                continue
            v = iou(dbox, tbox)
            if best_idx is None or v > best_iou:
                best_idx = ti
                best_iou = v

        if best_idx is not None and best_iou >= match_iou and best_iou > 0.0:
            claimed.add(best_idx)
            out.append(Assignment(detection_index=di, track_index=best_idx, iou=best_iou))
        else:
            out.append(Assignment(detection_index=di, track_index=None, iou=best_iou))
    return out

from __future__ import annotations

from typing import List, Sequence

from postit.core.geometry import iou
from postit.core.types import Detection


def non_max_suppression(candidates: Sequence[Detection], iou_threshold: float = 0.45) -> List[Detection]:
    """Greedy NMS: keep the best box, suppress later boxes overlapping it.

    Ties in score keep their input order, so results are deterministic.
    Output is sorted by score descending.
    """
    ordered = sorted(candidates, key=lambda d: d.score, reverse=True)
    suppressed = [False] * len(ordered)
    kept: List[Detection] = []

    for i, a in enumerate(ordered):
        if suppressed[i]:
            continue
        kept.append(a)
        for j in range(i + 1, len(ordered)):
            if not suppressed[j] and iou(a.box, ordered[j].box) > iou_threshold:
                suppressed[j] = True
    return kept

from __future__ import annotations

from typing import List, Sequence

from postit.core.geometry import iou
from postit.core.types import Detection, TrackedDetection


class TemporalHold:
    """Identity-free smoothing: replay the last detections on empty frames.

    With detections, each one is EMA-blended with the first remembered
    detection overlapping it by more than match_iou. With none, the last
    result is replayed for up to max_hold frames at a linearly decaying
    score, then dropped. Emitted records carry track_id=None.
    """

    def __init__(self, match_iou: float = 0.3, max_hold: int = 5, ema_alpha: float = 0.6):
        self.match_iou = float(match_iou)
        self.max_hold = int(max_hold)
        self.ema_alpha = float(ema_alpha)
        self._previous: List[Detection] = []
        self._frames_since_detection = 0

    def reset(self) -> None:
        self._previous = []
        self._frames_since_detection = 0

    def update(self, detections: Sequence[Detection]) -> List[TrackedDetection]:
        if not detections:
            self._frames_since_detection += 1
            if self._frames_since_detection > self.max_hold:
                self._previous = []
                return []
            factor = 1.0 - self._frames_since_detection / float(self.max_hold + 1)
            return [TrackedDetection(None, d.box, d.label, d.score * factor) for d in self._previous]

        self._frames_since_detection = 0
        smoothed: List[Detection] = []
        for cur in detections:
            prev = next((p for p in self._previous if iou(cur.box, p.box) > self.match_iou), None)
            if prev is None:
                smoothed.append(cur)
            else:
                smoothed.append(Detection(prev.box.blend(cur.box, self.ema_alpha), cur.label, cur.score))

        self._previous = smoothed
        return [TrackedDetection(None, d.box, d.label, d.score) for d in smoothed]

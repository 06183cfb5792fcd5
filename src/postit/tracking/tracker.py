from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Sequence

from postit.core.pipeline.log import LogFn, noop_log
from postit.core.types import Box, Detection, TrackedDetection
from postit.tracking.assignment import greedy_assign


@dataclass(frozen=True)
class Track:
    """Tracker-owned state of one physical post-it."""
    track_id: int
    box: Box
    label: str
    score: float
    frames_since_match: int = 0

    def snapshot(self) -> TrackedDetection:
        return TrackedDetection(track_id=self.track_id, box=self.box, label=self.label, score=self.score)


class IouTracker:
    """IoU-based multi-object tracker with EMA box smoothing.

    Per update():
      - every track ages by one frame;
      - detections, highest score first, greedily claim the unclaimed track
        with the best IoU if it reaches match_iou;
      - matched tracks blend toward the detection and reset their age;
      - unmatched detections open new tracks while below max_tracks;
      - tracks unmatched for more than max_missed frames are dropped for
        good (a returning object gets a new ID).

    IDs start at 1 and are never reused, including across reset().
    Not thread safe: one instance per camera session, one caller.
    """

    def __init__(
        self,
        match_iou: float = 0.3,
        max_missed: int = 5,
        max_tracks: int = 30,
        ema_alpha: float = 0.6,
        score_decay: float = 0.6,
        log: LogFn = noop_log,
    ):
        self.match_iou = float(match_iou)
        self.max_missed = int(max_missed)
        self.max_tracks = int(max_tracks)
        self.ema_alpha = float(ema_alpha)
        self.score_decay = float(score_decay)
        self.log = log

        self._tracks: List[Track] = []
        self._next_id: int = 1

    @property
    def tracks(self) -> List[Track]:
        """Copy of the current track list (tracks themselves are frozen)."""
        return list(self._tracks)

    @property
    def next_id(self) -> int:
        return self._next_id

    def reset(self) -> None:
        """Drop all tracks; the ID counter keeps counting."""
        self._tracks = []

    def _matched(self, track: Track, det: Detection) -> Track:
        return Track(
            track_id=track.track_id,
            box=track.box.blend(det.box, self.ema_alpha),
            label=det.label,
            score=max(track.score * self.score_decay, det.score),
            frames_since_match=0,
        )

    def update(self, detections: Sequence[Detection]) -> List[TrackedDetection]:
        aged = [replace(t, frames_since_match=t.frames_since_match + 1) for t in self._tracks]

        ordered = sorted(detections, key=lambda d: d.score, reverse=True)
        assignments = greedy_assign(
            [d.box for d in ordered],
            [t.box for t in aged],
            self.match_iou,
        )

        updated = list(aged)
        unmatched: List[Detection] = []
        for a in assignments:
            det = ordered[a.detection_index]
            if a.track_index is None:
                unmatched.append(det)
            else:
                updated[a.track_index] = self._matched(aged[a.track_index], det)

        dropped = 0
        for det in unmatched:
            if len(updated) >= self.max_tracks:
                dropped += 1
                continue
            updated.append(Track(track_id=self._next_id, box=det.box, label=det.label, score=det.score))
            self._next_id += 1
        if dropped:
            self.log("track_cap_reached", {"max_tracks": self.max_tracks, "dropped": dropped})

        kept = [t for t in updated if t.frames_since_match <= self.max_missed]
        if len(kept) != len(updated):
            evicted = [t.track_id for t in updated if t.frames_since_match > self.max_missed]
            self.log("tracks_evicted", {"track_ids": evicted})
        self._tracks = kept

        return [t.snapshot() for t in sorted(kept, key=lambda t: t.score, reverse=True)]

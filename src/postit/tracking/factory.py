from __future__ import annotations

"""Build the temporal association stage selected by tracking.mode."""

from typing import List, Protocol, Sequence

from postit.core.pipeline.log import LogFn, noop_log
from postit.core.schema import TrackingCfg
from postit.core.types import Detection, TrackedDetection
from postit.tracking.hold import TemporalHold
from postit.tracking.tracker import IouTracker


class FrameTracker(Protocol):
    def update(self, detections: Sequence[Detection]) -> List[TrackedDetection]: ...
    def reset(self) -> None: ...


def make_tracker(cfg: TrackingCfg, log: LogFn = noop_log) -> FrameTracker:
    if cfg.mode == "track":
        return IouTracker(
            match_iou=cfg.match_iou,
            max_missed=cfg.max_missed,
            max_tracks=cfg.max_tracks,
            ema_alpha=cfg.ema_alpha,
            score_decay=cfg.score_decay,
            log=log,
        )
    if cfg.mode == "hold":
        return TemporalHold(match_iou=cfg.match_iou, max_hold=cfg.max_hold, ema_alpha=cfg.ema_alpha)
    raise ValueError(f"Unsupported tracking mode: {cfg.mode}")

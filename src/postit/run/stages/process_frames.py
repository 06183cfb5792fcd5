from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

import numpy as np
from tqdm import tqdm

from postit.core.io import LatestFrameFeed, append_jsonl, iter_frames
from postit.core.pipeline.base import StageContext
from postit.core.schema import DetectConfig
from postit.core.types import TrackedDetection
from postit.detect.pipeline import DetectionPipeline

FrameIter = Iterable[Tuple[int, np.ndarray]]


def track_row(frame_idx: int, det: TrackedDetection) -> Dict[str, Any]:
    """One JSONL row per tracked detection."""
    left, top, right, bottom = det.bbox
    return {
        "frame": int(frame_idx),
        "track_id": det.track_id,
        "label": det.label,
        "score": round(float(det.score), 4),
        "box": [round(left, 2), round(top, 2), round(right, 2), round(bottom, 2)],
    }


@dataclass
class ProcessFrames:
    """Stage that runs the pipeline over every frame of the source."""

    name: str = "process_frames"
    frames: Optional[Callable[[DetectConfig], FrameIter]] = None
    sample_every: int = 100
    progress: bool = True

    def _frames(self, cfg: DetectConfig) -> FrameIter:
        if self.frames is not None:
            return self.frames(cfg)
        return iter_frames(cfg.run.source, max_frames=cfg.run.max_frames)

    def run(self, ctx: StageContext) -> None:
        cfg: DetectConfig = ctx.cfg
        pipeline: DetectionPipeline = ctx.assets["pipeline"]
        tracks_path: Path = ctx.state["tracks_path"]
        log = ctx.log

        n_frames = 0
        n_rows = 0
        seen_ids: Set[int] = set()
        max_live = 0

        frames = self._frames(cfg)
        feed: Optional[LatestFrameFeed] = None
        if cfg.run.is_live:
            # Camera frames pile up while detect() runs; serve only the newest.
            feed = LatestFrameFeed(frames)
            frames = feed
        if self.progress:
            frames = tqdm(frames, desc="detect", unit="frame")

        try:
            for frame_idx, frame in frames:
                out: List[TrackedDetection] = pipeline.detect(frame, cfg.run.rotation)
                n_rows += append_jsonl(tracks_path, (track_row(frame_idx, d) for d in out))
                seen_ids.update(d.track_id for d in out if d.track_id is not None)
                max_live = max(max_live, len(out))
                n_frames += 1

                if self.sample_every and frame_idx % self.sample_every == 0:
                    log(
                        "frame_sample",
                        {"frame": int(frame_idx), "tracks": [d.track_id for d in out], "n": len(out)},
                    )
        finally:
            if feed is not None:
                feed.close()

        dropped = feed.stats.dropped if feed is not None else 0
        ctx.state.update(
            {
                "frames": n_frames,
                "dropped_frames": dropped,
                "rows": n_rows,
                "track_ids": sorted(seen_ids),
                "max_live_tracks": max_live,
            }
        )
        log(
            "frames_done",
            {"frames": n_frames, "dropped_frames": dropped, "rows": n_rows, "unique_tracks": len(seen_ids)},
        )

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from postit.core.io import dump_json
from postit.core.pipeline.base import StageContext
from postit.core.schema import DetectConfig


@dataclass
class FinalizeRun:
    """Write summary.json and release the engine."""

    name: str = "finalize_run"

    def run(self, ctx: StageContext) -> None:
        cfg: DetectConfig = ctx.cfg
        run_root = ctx.state["run_root"]

        summary = {
            "run_id": cfg.run.run_id,
            "run_stamp": ctx.state.get("run_stamp"),
            "finished_at": datetime.now(timezone.utc).isoformat(),
            "frames": int(ctx.state.get("frames", 0)),
            "dropped_frames": int(ctx.state.get("dropped_frames", 0)),
            "rows": int(ctx.state.get("rows", 0)),
            "unique_tracks": len(ctx.state.get("track_ids", [])),
            "max_live_tracks": int(ctx.state.get("max_live_tracks", 0)),
            "outputs": {"tracks_jsonl": str(ctx.state["tracks_path"])},
            "config": cfg.model_dump(mode="json"),
        }
        path = dump_json(run_root / "summary.json", summary)
        ctx.state["summary_path"] = path

        pipeline = ctx.assets.get("pipeline")
        if pipeline is not None:
            pipeline.close()

        ctx.log("run_done", {"summary": str(path), "frames": summary["frames"]})

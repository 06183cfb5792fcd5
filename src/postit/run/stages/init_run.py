from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from postit.core.io import ensure_dir
from postit.core.pipeline.base import StageContext
from postit.core.pipeline.log import JsonlLogger
from postit.core.schema import DetectConfig


def _ts() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


@dataclass
class InitRun:
    """Prepare the run dir and the JSONL logger."""

    name: str = "init_run"
    echo: bool = True

    def run(self, ctx: StageContext) -> None:
        cfg: DetectConfig = ctx.cfg
        run_stamp = _ts()
        run_root = ensure_dir(Path(cfg.run.out_dir) / cfg.run.run_id / run_stamp)

        log = JsonlLogger(run_root / "detect.log.jsonl", echo=self.echo)
        ctx.assets["log"] = log

        ctx.state.update(
            {
                "run_stamp": run_stamp,
                "run_root": run_root,
                "tracks_path": run_root / "tracks.jsonl",
                "debug": bool(cfg.run.debug),
            }
        )
        log(
            "run_start",
            {
                "run_id": cfg.run.run_id,
                "source": cfg.run.source,
                "rotation": cfg.run.rotation,
                "engine": cfg.pipeline.engine.backend,
                "tracking_mode": cfg.pipeline.tracking.mode,
            },
        )

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from postit.core.pipeline.base import PipelineRunner, StageContext
from postit.core.pipeline.log import noop_log
from postit.core.schema import DetectConfig
from postit.detect.engines.base import InferenceEngine
from postit.run.stages.build_components import BuildComponents
from postit.run.stages.finalize_run import FinalizeRun
from postit.run.stages.init_run import InitRun
from postit.run.stages.process_frames import FrameIter, ProcessFrames


class DetectRun:
    """Batch detection over a video source, written to a run directory."""

    def __init__(
        self,
        *,
        engine: Optional[InferenceEngine] = None,
        frames: Optional[Callable[[DetectConfig], FrameIter]] = None,
        echo: bool = True,
        progress: bool = True,
    ):
        self.engine = engine
        self.frames = frames
        self.echo = bool(echo)
        self.progress = bool(progress)

    def run(self, cfg: DetectConfig) -> Path:
        ctx = StageContext(cfg=cfg, state={}, assets={"log": noop_log})

        stages = [
            InitRun(echo=self.echo),
            BuildComponents(engine=self.engine),
            ProcessFrames(frames=self.frames, progress=self.progress),
            FinalizeRun(),
        ]
        PipelineRunner(stages=stages).run(ctx)
        return Path(ctx.state["run_root"])

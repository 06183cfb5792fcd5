from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from postit.core.pipeline.base import StageContext
from postit.core.pipeline.log import noop_log
from postit.core.schema import DetectConfig
from postit.detect.engines.base import InferenceEngine
from postit.detect.engines.factory import make_engine
from postit.detect.pipeline import DetectionPipeline


@dataclass
class BuildComponents:
    """Stage that constructs the inference engine and detection pipeline.

    An engine may be injected (tests, custom runtimes); otherwise it is
    built from cfg.pipeline.engine.
    """

    name: str = "build_components"
    engine: Optional[InferenceEngine] = None

    def run(self, ctx: StageContext) -> None:
        cfg: DetectConfig = ctx.cfg
        log = ctx.log

        engine = self.engine or make_engine(cfg.pipeline.engine)
        pipeline = DetectionPipeline(
            engine,
            cfg.pipeline,
            # Per-frame candidate events only in debug runs.
            log=log if ctx.state.get("debug") else noop_log,
        )
        log(
            "components_ready",
            {
                "engine": type(engine).__name__,
                "tracker": type(pipeline.tracker).__name__,
                "input_size": cfg.pipeline.model.input_size,
            },
        )

        ctx.assets["engine"] = engine
        ctx.assets["pipeline"] = pipeline

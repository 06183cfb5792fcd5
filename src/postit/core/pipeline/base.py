from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

from postit.core.pipeline.log import LogFn, noop_log


class Stage(Protocol):
    """Protocol for run stages."""
    name: str
    def run(self, ctx: "StageContext") -> None: ...


@dataclass
class StageContext:
    """Shared data passed between run stages."""
    cfg: Any
    state: Dict[str, Any] = field(default_factory=dict)
    assets: Dict[str, Any] = field(default_factory=dict)

    @property
    def log(self) -> LogFn:
        return self.assets.get("log") or noop_log


@dataclass
class PipelineRunner:
    """Sequential runner for run stages."""
    stages: List[Stage]
    fail_fast: bool = True

    def run(self, ctx: StageContext) -> StageContext:
        for st in self.stages:
            # Stages may swap the logger (InitRun does), so look it up each time.
            ctx.log("stage_start", {"stage": st.name})
            try:
                st.run(ctx)
            except Exception as e:
                ctx.log("stage_error", {"stage": st.name, "error": repr(e)})
                if self.fail_fast:
                    raise
                ctx.state.setdefault("errors", []).append((st.name, repr(e)))
                continue
            ctx.log("stage_done", {"stage": st.name})
        return ctx

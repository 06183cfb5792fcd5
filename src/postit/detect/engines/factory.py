from __future__ import annotations

"""Factory for inference engines based on the engine config."""

from postit.core.schema import EngineCfg
from postit.detect.engines.base import InferenceEngine


def make_engine(cfg: EngineCfg) -> InferenceEngine:
    if not cfg.weights:
        raise ValueError(f"Engine '{cfg.backend}' needs engine.weights in the config")

    if cfg.backend == "torchscript":
        from postit.detect.engines.torchscript import TorchScriptEngine

        return TorchScriptEngine(weights=cfg.weights, device=cfg.device)

    if cfg.backend == "ultralytics":
        from postit.detect.engines.yolo_ultralytics import UltralyticsEngine

        return UltralyticsEngine(weights=cfg.weights, device=cfg.device)

    raise ValueError(f"Unsupported engine backend: {cfg.backend}")

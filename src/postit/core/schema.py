from __future__ import annotations

"""Pydantic schema definitions for the detection pipeline and CLI runs."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class ModelCfg(BaseModel):
    """Fixed contract of the exported detection model."""

    input_size: int = Field(640, gt=0, description="Square model input side in pixels.")
    label: str = Field("postit", description="Single class name emitted for every detection.")
    num_anchors: Optional[int] = Field(
        None,
        gt=0,
        description="Expected anchor count N of the [1, 5, N] output; None accepts any.",
    )


class EngineCfg(BaseModel):
    """Inference engine selection."""

    backend: Literal["torchscript", "ultralytics"] = "torchscript"
    weights: Optional[str] = None
    device: str = "cpu"


class ThresholdsCfg(BaseModel):
    """Score and IoU thresholds for candidate filtering."""

    conf: float = Field(0.25, ge=0.0, le=1.0)
    nms_iou: float = Field(0.45, ge=0.0, le=1.0)


class PreprocessCfg(BaseModel):
    """Letterbox padding applied before normalization to [0, 1]."""

    pad_value: int = Field(114, ge=0, le=255)


class TrackingCfg(BaseModel):
    """Temporal association settings.

    mode="track" keeps persistent IDs with EMA smoothing and hard eviction.
    mode="hold" replays the last detections with decaying score and no IDs.
    """

    mode: Literal["track", "hold"] = "track"
    match_iou: float = Field(0.3, ge=0.0, le=1.0)
    max_missed: int = Field(5, ge=0)
    max_tracks: int = Field(30, gt=0)
    ema_alpha: float = Field(0.6, gt=0.0, le=1.0)
    score_decay: float = Field(0.6, ge=0.0, le=1.0)
    max_hold: int = Field(5, ge=0)


class PipelineConfig(BaseModel):
    """All static tuning knobs of the per-frame pipeline."""

    model: ModelCfg = Field(default_factory=ModelCfg)
    engine: EngineCfg = Field(default_factory=EngineCfg)
    thresholds: ThresholdsCfg = Field(default_factory=ThresholdsCfg)
    preprocess: PreprocessCfg = Field(default_factory=PreprocessCfg)
    tracking: TrackingCfg = Field(default_factory=TrackingCfg)


class RunCfg(BaseModel):
    """Batch run over a video file or camera index."""

    run_id: str = "local_detect"
    source: Union[int, str] = 0
    rotation: int = 0
    out_dir: str = "runs/detect"
    max_frames: int = Field(0, ge=0, description="0 processes the whole source.")
    live: Optional[bool] = Field(
        None, description="Read frames on a background thread and drop stale ones. None: only for camera indices."
    )
    debug: bool = False

    @property
    def is_live(self) -> bool:
        if self.live is None:
            return isinstance(self.source, int)
        return self.live

    @field_validator("rotation")
    @classmethod
    def _check_rotation(cls, v: int) -> int:
        if int(v) % 90 != 0:
            raise ValueError(f"rotation must be a multiple of 90, got {v}")
        return int(v)

    @field_validator("source", mode="before")
    @classmethod
    def _camera_index(cls, v):
        # "0" from CLI or YAML means camera 0, not a file called "0".
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        return v


class DetectConfig(BaseModel):
    """Top-level YAML: pipeline knobs plus run settings."""

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    run: RunCfg = Field(default_factory=RunCfg)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data):
        # Allow a flat file holding only pipeline sections.
        if isinstance(data, dict) and "pipeline" not in data:
            pipeline_keys = set(PipelineConfig.model_fields)
            if pipeline_keys & set(data):
                data = dict(data)
                flat = {k: data.pop(k) for k in list(data) if k in pipeline_keys}
                data["pipeline"] = flat
        return data

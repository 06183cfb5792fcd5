from __future__ import annotations

"""YAML and Pydantic config loaders."""

from pathlib import Path
from typing import Any, Dict

import yaml

from postit.core.schema import DetectConfig, PipelineConfig


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping at top-level: {p}")
    return data


def load_detect_config(path: str | Path) -> DetectConfig:
    """Load the CLI run configuration YAML."""
    return DetectConfig.model_validate(load_yaml(path))


def load_pipeline_config(path: str | Path) -> PipelineConfig:
    """Load only the pipeline section (or a flat pipeline file)."""
    return load_detect_config(path).pipeline

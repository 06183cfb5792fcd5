from pathlib import Path

import pytest
from pydantic import ValidationError

from postit.core.config import load_detect_config, load_pipeline_config
from postit.core.schema import PipelineConfig

REPO = Path(__file__).resolve().parents[1]


def test_defaults_match_documented_values():
    cfg = PipelineConfig()
    assert cfg.model.input_size == 640
    assert cfg.thresholds.conf == 0.25
    assert cfg.thresholds.nms_iou == 0.45
    assert cfg.tracking.mode == "track"
    assert cfg.tracking.match_iou == 0.3
    assert cfg.tracking.max_missed == 5
    assert cfg.tracking.max_tracks == 30
    assert cfg.tracking.ema_alpha == 0.6


def test_shipped_config_loads():
    cfg = load_detect_config(REPO / "configs" / "detect.yaml")
    assert cfg.pipeline.model.num_anchors == 8400
    assert cfg.run.rotation == 0


def test_flat_pipeline_file(tmp_path):
    p = tmp_path / "flat.yaml"
    p.write_text("thresholds:\n  conf: 0.1\ntracking:\n  mode: hold\n", encoding="utf-8")
    cfg = load_pipeline_config(p)
    assert cfg.thresholds.conf == 0.1
    assert cfg.tracking.mode == "hold"


def test_camera_index_source(tmp_path):
    p = tmp_path / "cam.yaml"
    p.write_text("run:\n  source: '1'\n", encoding="utf-8")
    cfg = load_detect_config(p)
    assert cfg.run.source == 1
    assert cfg.run.is_live

    p.write_text("run:\n  source: clip.mp4\n", encoding="utf-8")
    assert not load_detect_config(p).run.is_live
    p.write_text("run:\n  source: clip.mp4\n  live: true\n", encoding="utf-8")
    assert load_detect_config(p).run.is_live


def test_invalid_values_are_rejected(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("run:\n  rotation: 45\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_detect_config(p)

    p.write_text("pipeline:\n  tracking:\n    ema_alpha: 0\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_detect_config(p)


def test_missing_and_non_mapping_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_detect_config(tmp_path / "nope.yaml")
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_detect_config(p)

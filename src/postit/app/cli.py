from __future__ import annotations

import argparse
import json

from postit.core.config import load_detect_config
from postit.core.schema import DetectConfig
from postit.run.pipeline import DetectRun


def _load(args: argparse.Namespace) -> DetectConfig:
    cfg = load_detect_config(args.config)

    # overrides
    if args.source is not None:
        cfg.run.source = int(args.source) if args.source.strip().isdigit() else args.source
    if args.rotation is not None:
        cfg.run.rotation = int(args.rotation)
    if args.weights:
        cfg.pipeline.engine.weights = args.weights
    if args.backend:
        cfg.pipeline.engine.backend = args.backend
    if args.device:
        cfg.pipeline.engine.device = args.device
    if args.conf is not None:
        cfg.pipeline.thresholds.conf = float(args.conf)
    if args.mode:
        cfg.pipeline.tracking.mode = args.mode
    if args.out_dir:
        cfg.run.out_dir = args.out_dir
    if args.max_frames is not None:
        cfg.run.max_frames = int(args.max_frames)
    if args.debug:
        cfg.run.debug = True

    # Re-validate so CLI overrides go through the same checks as YAML.
    return DetectConfig.model_validate(cfg.model_dump())


def cmd_config(args: argparse.Namespace) -> int:
    cfg = _load(args)
    print(json.dumps(cfg.model_dump(mode="json"), indent=2))
    return 0


def cmd_detect(args: argparse.Namespace) -> int:
    cfg = _load(args)
    out = DetectRun(progress=not args.no_progress).run(cfg)
    print(f"OK: {out}")
    return 0


def _add_overrides(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default="configs/detect.yaml", help="Detect YAML config.")
    p.add_argument("--source", help="Video path or camera index.")
    p.add_argument("--rotation", type=int, help="Sensor rotation in degrees (0/90/180/270).")
    p.add_argument("--weights", help="Override engine.weights.")
    p.add_argument("--backend", choices=["torchscript", "ultralytics"], help="Override engine.backend.")
    p.add_argument("--device", help="cpu / cuda:0 etc.")
    p.add_argument("--conf", type=float, help="Override confidence threshold.")
    p.add_argument("--mode", choices=["track", "hold"], help="Override tracking.mode.")
    p.add_argument("--out-dir", dest="out_dir", help="Override run.out_dir.")
    p.add_argument("--max-frames", dest="max_frames", type=int, help="Stop after N frames (0 = all).")
    p.add_argument("--debug", action="store_true", help="Log per-frame candidate counts.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="postit")
    sub = p.add_subparsers(dest="cmd", required=True)

    spd = sub.add_parser("detect", help="Run detection + tracking over a video source")
    _add_overrides(spd)
    spd.add_argument("--no-progress", dest="no_progress", action="store_true", help="Hide the progress bar.")
    spd.set_defaults(func=cmd_detect)

    spc = sub.add_parser("config", help="Print the validated configuration")
    _add_overrides(spc)
    spc.set_defaults(func=cmd_config)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())

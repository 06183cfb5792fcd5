from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from postit.core.geometry import compute_letterbox, crop_box, rotated_dimensions, unrotate_box
from postit.core.pipeline.log import LogFn, noop_log
from postit.core.schema import PipelineConfig
from postit.core.types import AnnotatedDetection, Detection, Rotation, TrackedDetection
from postit.detect.decoder import decode
from postit.detect.engines.base import InferenceEngine
from postit.detect.nms import non_max_suppression
from postit.detect.preprocess import check_image, preprocess
from postit.session.annotations import TrackAnnotations
from postit.tracking.factory import FrameTracker, make_tracker


class DetectionPipeline:
    """Per-frame orchestrator: preprocess -> infer -> decode -> NMS -> track.

    detect() advances tracker state, so call it exactly once per frame and
    never from two threads at once. Lock/upload state lives in
    `annotations`, keyed by track ID, outside the tracker.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        cfg: Optional[PipelineConfig] = None,
        *,
        tracker: Optional[FrameTracker] = None,
        log: LogFn = noop_log,
    ):
        self.cfg = cfg or PipelineConfig()
        self.engine = engine
        self.log = log
        self.tracker = tracker if tracker is not None else make_tracker(self.cfg.tracking, log=log)
        self.annotations = TrackAnnotations()
        self.frames_processed = 0

    def candidates(self, image: np.ndarray, rotation: Rotation | int = 0) -> List[Detection]:
        """Decoded and NMS-filtered detections in sensor space; no tracking."""
        image = check_image(image)
        rot = Rotation.from_degrees(rotation)
        src_h, src_w = image.shape[:2]
        up_w, up_h = rotated_dimensions(src_w, src_h, rot)

        model = self.cfg.model
        transform = compute_letterbox(up_w, up_h, model.input_size)
        tensor = preprocess(image, rot, transform, pad_value=self.cfg.preprocess.pad_value)

        raw = np.asarray(self.engine.infer(tensor))
        if model.num_anchors is not None and raw.shape[-1] != model.num_anchors:
            self.log("anchor_count_mismatch", {"expected": model.num_anchors, "got": int(raw.shape[-1])})

        decoded = decode(
            raw,
            transform,
            image_width=up_w,
            image_height=up_h,
            conf_threshold=self.cfg.thresholds.conf,
            label=model.label,
        )
        kept = non_max_suppression(decoded, iou_threshold=self.cfg.thresholds.nms_iou)
        self.log("frame_candidates", {"frame": self.frames_processed, "decoded": len(decoded), "kept": len(kept)})

        if rot == Rotation.DEG_0:
            return kept
        return [
            Detection(box=unrotate_box(d.box, rot, up_w, up_h), label=d.label, score=d.score)
            for d in kept
        ]

    def detect(self, image: np.ndarray, rotation: Rotation | int = 0) -> List[TrackedDetection]:
        """Run one frame; returns tracked detections in sensor pixel space."""
        dets = self.candidates(image, rotation)
        out = self.tracker.update(dets)
        self.frames_processed += 1
        return out

    def detect_annotated(self, image: np.ndarray, rotation: Rotation | int = 0) -> List[AnnotatedDetection]:
        return self.annotations.annotate(self.detect(image, rotation))

    # --- per-track hooks ---

    def lock(self, track_id: int, text: str) -> bool:
        return self.annotations.lock(track_id, text)

    def unlock(self, track_id: int) -> bool:
        return self.annotations.unlock(track_id)

    def toggle_lock(self, detection: TrackedDetection, text: str) -> Optional[bool]:
        return self.annotations.toggle_lock(detection, text)

    def mark_uploading(self, track_ids) -> None:
        self.annotations.mark_uploading(track_ids)

    def mark_uploaded(self, track_ids) -> None:
        self.annotations.mark_uploaded(track_ids)

    def mark_upload_failed(self, track_ids) -> None:
        self.annotations.mark_upload_failed(track_ids)

    def pending_uploads(self, detections: List[TrackedDetection]) -> List[TrackedDetection]:
        return self.annotations.pending_uploads(detections)

    def upload_crops(
        self, image: np.ndarray, detections: List[TrackedDetection]
    ) -> List[Tuple[TrackedDetection, np.ndarray]]:
        """Sensor-frame crops of the locked tracks still waiting for upload.

        Detections whose box falls outside the image are skipped.
        """
        check_image(image)
        out = []
        for det in self.pending_uploads(detections):
            crop = crop_box(image, det.box)
            if crop is not None:
                out.append((det, crop))
        return out

    def reset(self) -> None:
        """Forget tracks and session state; IDs keep counting up."""
        self.tracker.reset()
        self.annotations.reset()
        self.frames_processed = 0

    def close(self) -> None:
        self.engine.close()

from __future__ import annotations

"""Per-track session state kept next to (never inside) the tracker."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from postit.core.types import AnnotatedDetection, TrackedDetection


@dataclass
class TrackAnnotations:
    """Locked OCR text and upload status, keyed by track ID.

    Track IDs are never reused, so entries for evicted tracks cannot leak
    onto a new object.
    """

    locked: Dict[int, str] = field(default_factory=dict)
    uploading: Set[int] = field(default_factory=set)
    uploaded: Set[int] = field(default_factory=set)

    def lock(self, track_id: int, text: str) -> bool:
        """Lock confirmed text to a track. Blank text is refused."""
        if not text or not text.strip():
            return False
        self.locked[int(track_id)] = text
        return True

    def unlock(self, track_id: int) -> bool:
        return self.locked.pop(int(track_id), None) is not None

    def toggle_lock(self, detection: TrackedDetection, text: str) -> Optional[bool]:
        """Flip the lock of a tapped detection.

        Returns the new locked state, or None when nothing changed (no ID,
        or locking blank text).
        """
        if detection.track_id is None:
            return None
        if detection.track_id in self.locked:
            self.unlock(detection.track_id)
            return False
        return True if self.lock(detection.track_id, text) else None

    def is_locked(self, track_id: int) -> bool:
        return int(track_id) in self.locked

    def text_for(self, track_id: int) -> str:
        return self.locked.get(int(track_id), "")

    def mark_uploading(self, track_ids: Iterable[int]) -> None:
        self.uploading.update(int(t) for t in track_ids)

    def mark_uploaded(self, track_ids: Iterable[int]) -> None:
        ids = {int(t) for t in track_ids}
        self.uploaded.update(ids)
        self.uploading.difference_update(ids)

    def mark_upload_failed(self, track_ids: Iterable[int]) -> None:
        """Failed uploads become eligible again on the next frame."""
        self.uploading.difference_update(int(t) for t in track_ids)

    def pending_uploads(self, detections: Sequence[TrackedDetection]) -> List[TrackedDetection]:
        """Locked detections not yet uploaded nor in flight."""
        return [
            d
            for d in detections
            if d.track_id is not None
            and d.track_id in self.locked
            and d.track_id not in self.uploaded
            and d.track_id not in self.uploading
        ]

    def annotate(self, detections: Sequence[TrackedDetection]) -> List[AnnotatedDetection]:
        out: List[AnnotatedDetection] = []
        for d in detections:
            tid = d.track_id
            if tid is None:
                out.append(AnnotatedDetection(detection=d))
                continue
            out.append(
                AnnotatedDetection(
                    detection=d,
                    locked=tid in self.locked,
                    text=self.locked.get(tid, ""),
                    uploading=tid in self.uploading,
                    uploaded=tid in self.uploaded,
                )
            )
        return out

    def reset(self) -> None:
        self.locked.clear()
        self.uploading.clear()
        self.uploaded.clear()

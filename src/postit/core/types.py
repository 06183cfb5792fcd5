from __future__ import annotations

"""Shared value types: boxes, detections, tracks and transforms."""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from postit.core.errors import InvalidInput

# Bounding box in (left, top, right, bottom) pixel coordinates.
BoxLTRB = Tuple[float, float, float, float]
Point = Tuple[float, float]


class Rotation(IntEnum):
    """Clockwise rotation that turns the sensor frame upright."""
    DEG_0 = 0
    DEG_90 = 90
    DEG_180 = 180
    DEG_270 = 270

    @staticmethod
    def from_degrees(degrees: int) -> "Rotation":
        """Normalize any multiple of 90 (negative too) to a Rotation."""
        try:
            whole = int(degrees)
            integral = not isinstance(degrees, bool) and whole == degrees
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidInput(f"Rotation must be an integer, got {degrees!r}") from e
        if not integral:
            raise InvalidInput(f"Rotation must be an integer, got {degrees!r}")
        norm = ((whole % 360) + 360) % 360
        if norm % 90 != 0:
            raise InvalidInput(f"Rotation must be a multiple of 90 degrees, got {degrees!r}")
        return Rotation(norm)

    @property
    def swaps_axes(self) -> bool:
        return self in (Rotation.DEG_90, Rotation.DEG_270)


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle in image pixel coordinates."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.as_tuple())

    @property
    def is_valid(self) -> bool:
        """Finite, ordered and with a positive area."""
        return self.is_finite and self.right > self.left and self.bottom > self.top

    def as_tuple(self) -> BoxLTRB:
        return (self.left, self.top, self.right, self.bottom)

    def clamp(self, width: float, height: float) -> "Box":
        """Clamp all edges to [0, width] x [0, height]."""
        return Box(
            min(max(self.left, 0.0), width),
            min(max(self.top, 0.0), height),
            min(max(self.right, 0.0), width),
            min(max(self.bottom, 0.0), height),
        )

    def blend(self, other: "Box", alpha: float) -> "Box":
        """Component-wise EMA: alpha * other + (1 - alpha) * self."""
        keep = 1.0 - alpha
        return Box(
            alpha * other.left + keep * self.left,
            alpha * other.top + keep * self.top,
            alpha * other.right + keep * self.right,
            alpha * other.bottom + keep * self.bottom,
        )


@dataclass(frozen=True)
class Detection:
    """Single-frame observation produced by the decoder."""
    box: Box
    label: str
    score: float


@dataclass(frozen=True)
class TrackedDetection:
    """Read-only snapshot of a track handed to downstream consumers.

    track_id is None only when the pipeline runs in temporal-hold mode,
    which keeps no per-object identity.
    """
    track_id: Optional[int]
    box: Box
    label: str
    score: float

    @property
    def bbox(self) -> BoxLTRB:
        """Alias for box.as_tuple() for export code."""
        return self.box.as_tuple()


@dataclass(frozen=True)
class AnnotatedDetection:
    """Tracked detection joined with per-track session state."""
    detection: TrackedDetection
    locked: bool = False
    text: str = ""
    uploading: bool = False
    uploaded: bool = False

    @property
    def track_id(self) -> Optional[int]:
        return self.detection.track_id


@dataclass(frozen=True)
class LetterboxTransform:
    """Placement of a resized source image inside the square model input."""
    scale: float
    offset_x: float
    offset_y: float
    resized_width: int
    resized_height: int
    size: int

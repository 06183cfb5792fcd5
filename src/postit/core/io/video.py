from __future__ import annotations

from typing import Iterator, Tuple, Union

import cv2
import numpy as np

Source = Union[int, str]


def open_video(source: Source):
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        raise FileNotFoundError(f"Cannot open video source: {source}")
    return cap


def iter_frames(source: Source, max_frames: int = 0) -> Iterator[Tuple[int, np.ndarray]]:
    """Yield (index, BGR frame); max_frames=0 reads until the source ends."""
    cap = open_video(source)
    idx = 0
    try:
        while max_frames <= 0 or idx < max_frames:
            ok, frame = cap.read()
            if not ok:
                break
            yield idx, frame
            idx += 1
    finally:
        cap.release()

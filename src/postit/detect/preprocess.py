from __future__ import annotations

"""Frame -> model input tensor (rotate upright, letterbox, scale to [0, 1])."""

import cv2
import numpy as np

from postit.core.errors import InvalidInput
from postit.core.types import LetterboxTransform, Rotation

_CV2_ROTATE = {
    Rotation.DEG_90: cv2.ROTATE_90_CLOCKWISE,
    Rotation.DEG_180: cv2.ROTATE_180,
    Rotation.DEG_270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def check_image(image) -> np.ndarray:
    """Validate an HxW or HxWxC pixel buffer with positive size."""
    if not isinstance(image, np.ndarray) or image.ndim not in (2, 3):
        raise InvalidInput(f"Expected an HxW or HxWxC numpy image, got {type(image).__name__}")
    if image.shape[0] <= 0 or image.shape[1] <= 0:
        raise InvalidInput(f"Image has zero size: {image.shape}")
    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        raise InvalidInput(f"Image must have 1, 3 or 4 channels, got {image.shape[2]}")
    return image


def rotate_upright(image: np.ndarray, rotation: Rotation) -> np.ndarray:
    """Rotate the sensor frame clockwise by `rotation`."""
    code = _CV2_ROTATE.get(rotation)
    if code is None:
        return image
    return cv2.rotate(image, code)


def letterbox_image(image: np.ndarray, transform: LetterboxTransform, pad_value: int = 114) -> np.ndarray:
    """Resize into the transform's box and pad to a size x size canvas."""
    if image.ndim == 2 or image.shape[2] == 1:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    resized = cv2.resize(
        image,
        (transform.resized_width, transform.resized_height),
        interpolation=cv2.INTER_LINEAR,
    )
    canvas = np.full((transform.size, transform.size, 3), pad_value, dtype=np.uint8)
    x0 = int(transform.offset_x)
    y0 = int(transform.offset_y)
    canvas[y0:y0 + transform.resized_height, x0:x0 + transform.resized_width] = resized[:, :, :3]
    return canvas


def to_input_tensor(letterboxed_bgr: np.ndarray) -> np.ndarray:
    """BGR uint8 HxWx3 -> RGB float32 [1, 3, H, W] in [0, 1]."""
    rgb = letterboxed_bgr[:, :, ::-1]
    chw = np.transpose(rgb, (2, 0, 1)).astype(np.float32) / 255.0
    return np.ascontiguousarray(chw[np.newaxis, ...])


def preprocess(image: np.ndarray, rotation: Rotation, transform: LetterboxTransform, pad_value: int = 114) -> np.ndarray:
    """Full preprocessing chain; `transform` must match the upright size."""
    upright = rotate_upright(image, rotation)
    return to_input_tensor(letterbox_image(upright, transform, pad_value=pad_value))

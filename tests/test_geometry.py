import numpy as np
import pytest

from postit.core.errors import InvalidInput
from postit.core.geometry import (
    compute_letterbox,
    crop_box,
    iou,
    rotated_dimensions,
    unletterbox,
    unletterbox_box,
    unrotate_box,
)
from postit.core.types import Box, Rotation
from postit.detect.preprocess import rotate_upright


def _ones_bbox(img):
    ys, xs = np.nonzero(img)
    return Box(float(xs.min()), float(ys.min()), float(xs.max() + 1), float(ys.max() + 1))


def test_rotated_dimensions():
    assert rotated_dimensions(640, 480, 0) == (640, 480)
    assert rotated_dimensions(640, 480, 90) == (480, 640)
    assert rotated_dimensions(640, 480, 180) == (640, 480)
    assert rotated_dimensions(640, 480, 270) == (480, 640)
    assert rotated_dimensions(640, 480, -90) == (480, 640)
    assert rotated_dimensions(640, 480, 450) == (480, 640)


def test_rotation_must_be_multiple_of_90():
    with pytest.raises(InvalidInput):
        rotated_dimensions(640, 480, 45)
    with pytest.raises(InvalidInput):
        Rotation.from_degrees(100)
    with pytest.raises(InvalidInput):
        Rotation.from_degrees(90.5)
    with pytest.raises(InvalidInput):
        Rotation.from_degrees(True)
    assert Rotation.from_degrees(180.0) is Rotation.DEG_180


@pytest.mark.parametrize("degrees", [0, 90, 180, 270])
def test_unrotate_box_inverts_upright_rotation(degrees):
    sensor = np.zeros((40, 60), dtype=np.uint8)
    sensor[5:12, 20:35] = 1
    expected = _ones_bbox(sensor)

    upright = rotate_upright(sensor, Rotation(degrees))
    up_h, up_w = upright.shape[:2]
    assert (up_w, up_h) == rotated_dimensions(60, 40, degrees)

    got = unrotate_box(_ones_bbox(upright), degrees, up_w, up_h)
    assert got == expected


def test_letterbox_landscape():
    t = compute_letterbox(1280, 720, 640)
    assert t.scale == pytest.approx(0.5)
    assert (t.resized_width, t.resized_height) == (640, 360)
    assert (t.offset_x, t.offset_y) == (0.0, 140.0)
    assert unletterbox((320.0, 320.0), t) == pytest.approx((640.0, 360.0))


def test_letterbox_portrait_and_box():
    t = compute_letterbox(720, 1280, 640)
    assert (t.resized_width, t.resized_height) == (360, 640)
    assert (t.offset_x, t.offset_y) == (140.0, 0.0)
    b = unletterbox_box(Box(140.0, 0.0, 500.0, 640.0), t)
    assert b.as_tuple() == pytest.approx((0.0, 0.0, 720.0, 1280.0))


def test_letterbox_rejects_empty_sizes():
    with pytest.raises(InvalidInput):
        compute_letterbox(0, 480, 640)
    with pytest.raises(InvalidInput):
        compute_letterbox(640, 480, 0)


def test_iou_basic_properties():
    a = Box(0, 0, 10, 10)
    b = Box(5, 0, 15, 10)
    far = Box(100, 100, 110, 110)
    touching = Box(10, 0, 20, 10)

    assert iou(a, a) == 1.0
    assert iou(a, far) == 0.0
    assert iou(a, touching) == 0.0
    assert iou(a, b) == pytest.approx(1.0 / 3.0)
    assert iou(a, b) == iou(b, a)


def test_iou_with_nan_box_is_zero():
    nan_box = Box(float("nan"), 0, 10, 10)
    assert iou(nan_box, Box(0, 0, 10, 10)) == 0.0


def test_crop_box_clamps_to_image():
    img = np.arange(100, dtype=np.uint8).reshape(10, 10)
    crop = crop_box(img, Box(-5, 2.5, 4, 20))
    assert crop.shape == (8, 4)
    assert crop[0, 0] == img[2, 0]
    assert crop_box(img, Box(20, 20, 30, 30)) is None

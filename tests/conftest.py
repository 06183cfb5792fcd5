import numpy as np
import pytest


def _make_head(boxes, n=64):
    """Raw [1, 5, n] head; boxes are (xc, yc, w, h, score) per anchor."""
    head = np.zeros((1, 5, n), dtype=np.float32)
    for i, (xc, yc, w, h, score) in enumerate(boxes):
        head[0, :, i] = (xc, yc, w, h, score)
    return head


@pytest.fixture
def make_head():
    return _make_head

from __future__ import annotations

import numpy as np

from postit.detect.engines.base import InferenceEngine
from postit.detect.engines.torchscript import _first_tensor

try:  # pragma: no cover
    import torch  # type: ignore
    from ultralytics import YOLO  # type: ignore
except Exception:  # pragma: no cover
    torch = None
    YOLO = None


class UltralyticsEngine(InferenceEngine):
    """Runs the raw nn.Module inside an Ultralytics `.pt` checkpoint.

    Calling YOLO.predict() would apply Ultralytics' own NMS; we want the
    undecoded head so the package's decoder, NMS and tracker stay in charge.
    """

    def __init__(self, weights: str, device: str = "cpu"):
        if YOLO is None or torch is None:
            raise ImportError("ultralytics is not installed. Install extras: pip install -e '.[ultralytics]'")
        self._yolo = YOLO(weights)
        self.device = torch.device(device)
        self.model = self._yolo.model.to(self.device).float()
        self.model.eval()

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        x = torch.from_numpy(np.ascontiguousarray(tensor, dtype=np.float32)).to(self.device)
        with torch.inference_mode():
            out = _first_tensor(self.model(x))
        return out.detach().float().cpu().numpy()

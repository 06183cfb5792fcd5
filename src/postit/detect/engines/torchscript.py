from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from postit.detect.engines.base import InferenceEngine

try:  # pragma: no cover
    import torch  # type: ignore
except Exception:  # pragma: no cover
    torch = None


def _first_tensor(out: Any):
    """Exported heads sometimes return (preds, aux); keep preds."""
    while isinstance(out, (list, tuple)):
        if not out:
            raise RuntimeError("Model returned an empty output sequence")
        out = out[0]
    return out


class TorchScriptEngine(InferenceEngine):
    """Runs a TorchScript export (e.g. `yolo export format=torchscript`)."""

    def __init__(self, weights: str, device: str = "cpu"):
        if torch is None:
            raise ImportError("torch is not installed. Install extras: pip install -e '.[torch]'")
        p = Path(weights)
        if not p.exists():
            raise FileNotFoundError(f"TorchScript weights not found: {weights!r}")

        self.device = torch.device(device)
        self.model = torch.jit.load(str(p), map_location=self.device)
        self.model.eval()

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        x = torch.from_numpy(np.ascontiguousarray(tensor, dtype=np.float32)).to(self.device)
        with torch.inference_mode():
            out = _first_tensor(self.model(x))
        return out.detach().float().cpu().numpy()

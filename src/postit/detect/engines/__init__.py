from .base import CallableEngine, InferenceEngine
from .factory import make_engine

__all__ = ["CallableEngine", "InferenceEngine", "make_engine"]

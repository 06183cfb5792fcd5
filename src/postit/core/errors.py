from __future__ import annotations

"""Exception types raised by the detection core."""


class PostItError(Exception):
    """Base class for errors raised by this package."""


class InvalidInput(PostItError, ValueError):
    """Caller passed an image, rotation, size or tensor the core cannot use."""

from __future__ import annotations

"""Single-slot frame buffer: the consumer only ever sees the newest frame."""

import threading
from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SlotStats:
    delivered: int
    dropped: int


class LatestFrameSlot(Generic[T]):
    """Hold at most one pending frame; a newer put() replaces an unread one.

    The camera thread calls put(), the pipeline thread calls take(). Frames
    overwritten before being taken are counted as dropped, never queued.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._frame: Optional[T] = None
        self._has_frame = False
        self._delivered = 0
        self._dropped = 0

    def put(self, frame: T) -> bool:
        """Store a frame; returns True if an unread frame was dropped."""
        with self._cond:
            dropped = self._has_frame
            if dropped:
                self._dropped += 1
            self._frame = frame
            self._has_frame = True
            self._cond.notify_all()
            return dropped

    def take(self, timeout: float = 0.0) -> Optional[T]:
        """Return the newest pending frame and clear the slot.

        Waits up to `timeout` seconds for a frame; None if none arrived.
        """
        with self._cond:
            if not self._has_frame and timeout > 0:
                self._cond.wait_for(lambda: self._has_frame, timeout=timeout)
            if not self._has_frame:
                return None
            frame = self._frame
            self._frame = None
            self._has_frame = False
            self._delivered += 1
            return frame

    def clear(self) -> None:
        with self._cond:
            self._frame = None
            self._has_frame = False

    @property
    def stats(self) -> SlotStats:
        with self._cond:
            return SlotStats(delivered=self._delivered, dropped=self._dropped)


class LatestFrameFeed(Generic[T]):
    """Drain a frame source on a background thread, yielding only the newest frame.

    Frames that arrive while the consumer is busy are dropped in the slot.
    Iterate once; the reader thread is stopped and joined when iteration
    ends, and an error raised by the source is re-raised to the consumer.
    """

    def __init__(self, frames: Iterable[T], poll: float = 0.05, join_timeout: float = 5.0):
        self.slot: LatestFrameSlot[T] = LatestFrameSlot()
        self._frames = frames
        self._poll = poll
        self._join_timeout = join_timeout
        self._stop = threading.Event()
        self._done = threading.Event()
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._read, name="frame-feed", daemon=True)

    @property
    def stats(self) -> SlotStats:
        return self.slot.stats

    def _read(self) -> None:
        try:
            for frame in self._frames:
                if self._stop.is_set():
                    break
                self.slot.put(frame)
        except Exception as e:
            self._error = e
        finally:
            self._done.set()

    def __iter__(self) -> Iterator[T]:
        self._thread.start()
        try:
            while True:
                frame = self.slot.take(timeout=self._poll)
                if frame is not None:
                    yield frame
                    continue
                if self._done.is_set():
                    # The reader may have put a last frame after our take().
                    frame = self.slot.take()
                    if frame is None:
                        break
                    yield frame
            if self._error is not None:
                raise self._error
        finally:
            self.close()

    def close(self) -> None:
        self._stop.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(self._join_timeout)

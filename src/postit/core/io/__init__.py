from .fs import ensure_dir
from .json import append_jsonl, dump_json
from .frames import LatestFrameFeed, LatestFrameSlot, SlotStats
from .video import iter_frames, open_video

__all__ = [
    "ensure_dir",
    "append_jsonl",
    "dump_json",
    "LatestFrameFeed",
    "LatestFrameSlot",
    "SlotStats",
    "iter_frames",
    "open_video",
]

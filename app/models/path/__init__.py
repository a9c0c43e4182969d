"""Models for saved learning paths and their per-item progress."""

from .saved_path_model import PathFormat, PathStatus, SavedPath
from .path_progress_model import PathProgress
from .position_key import PositionKey

__all__ = [
    "PathFormat",
    "PathStatus",
    "SavedPath",
    "PathProgress",
    "PositionKey",
]

"""Multi-track timeline data: evaluation, scrubbing, editing and undo."""

from .config import EditorConfig, MIN_SEPARATION
from .core import AnimationCore
from .edit import EditEngine, EditResult, separate
from .evaluate import evaluate, evaluate_enum, evaluate_number, hits_in_range
from .history import HistoryManager
from .scrubber import Scrubber
from .signal import Signal
from .timeindex import clamp, lerp, upper_bound
from .tracks import (
    EnumKey,
    EnumTrackDef,
    FieldType,
    FuncCall,
    FuncKey,
    FuncTrackDef,
    NumberKey,
    NumberTrackDef,
    StoreSnapshot,
    Track,
    TrackDef,
    TrackStore,
)

__all__ = [
    "AnimationCore",
    "clamp",
    "EditEngine",
    "EditorConfig",
    "EditResult",
    "EnumKey",
    "EnumTrackDef",
    "evaluate",
    "evaluate_enum",
    "evaluate_number",
    "FieldType",
    "FuncCall",
    "FuncKey",
    "FuncTrackDef",
    "HistoryManager",
    "hits_in_range",
    "lerp",
    "MIN_SEPARATION",
    "NumberKey",
    "NumberTrackDef",
    "Scrubber",
    "separate",
    "Signal",
    "StoreSnapshot",
    "Track",
    "TrackDef",
    "TrackStore",
    "upper_bound",
]

__version__ = "0.1.0"

"""
モデル層

スロットレイアウトのデータ構造を提供します。
"""

from .slot_models import (
    SLOT_COLUMNS,
    MAX_TASKS_PER_SLOT,
    Period,
    ResizeEdge,
    SlotKey,
    Task,
    Placement,
    PlacementDelta,
    PlacementUpdate,
    RearrangementResult,
    ResizeProposal,
    validate_duration,
    validate_column,
    validate_placements,
    is_valid_layout,
    sort_by_column
)

__all__ = [
    "SLOT_COLUMNS",
    "MAX_TASKS_PER_SLOT",
    "Period",
    "ResizeEdge",
    "SlotKey",
    "Task",
    "Placement",
    "PlacementDelta",
    "PlacementUpdate",
    "RearrangementResult",
    "ResizeProposal",
    "validate_duration",
    "validate_column",
    "validate_placements",
    "is_valid_layout",
    "sort_by_column"
]

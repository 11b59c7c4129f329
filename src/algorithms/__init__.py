"""
アルゴリズム層

スロットレイアウトエンジン（正規化・配置・再配置・リサイズ・リフロー）を提供します。
"""

from .column_model import (
    normalize,
    get_auto_calculated_hours,
    get_auto_calculated_column_start,
    validate_task_boundaries,
    is_legacy_layout
)
from .placement_solver import (
    PLACEMENT_RIGHTMOST,
    find_placement,
    get_column_occupancy,
    get_total_used_hours,
    get_max_available_duration,
    get_available_space_after
)
from .rearrangement import rearrange, drop_new_task, calculate_drop_column
from .resize import propose_resize, commit_resize, delta_columns_from_pixels, ResizeSession
from .reflow import reflow, remove_and_reflow

__all__ = [
    "normalize",
    "get_auto_calculated_hours",
    "get_auto_calculated_column_start",
    "validate_task_boundaries",
    "is_legacy_layout",
    "PLACEMENT_RIGHTMOST",
    "find_placement",
    "get_column_occupancy",
    "get_total_used_hours",
    "get_max_available_duration",
    "get_available_space_after",
    "rearrange",
    "drop_new_task",
    "calculate_drop_column",
    "propose_resize",
    "commit_resize",
    "delta_columns_from_pixels",
    "ResizeSession",
    "reflow",
    "remove_and_reflow"
]

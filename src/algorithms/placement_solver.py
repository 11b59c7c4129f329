"""
配置ソルバー

スロット内の既存配置と新しいタスクの幅から、空いているカラム範囲を探します。
"""

import logging
from typing import List, Optional, Sequence, Union

from models.slot_models import (
    SLOT_COLUMNS, MAX_TASKS_PER_SLOT, Placement,
    validate_duration, validate_column
)

logger = logging.getLogger(__name__)

PLACEMENT_RIGHTMOST = "rightmost"


def get_column_occupancy(placements: Sequence[Placement]) -> List[bool]:
    """4カラムの占有状況を返す（True: 占有）"""
    occupancy = [False] * SLOT_COLUMNS
    for placement in placements:
        for column in placement.columns:
            occupancy[column] = True
    return occupancy


def _is_free(occupancy: List[bool], column_start: int, duration_columns: int) -> bool:
    """指定範囲がすべて空いているか"""
    if column_start < 0 or column_start + duration_columns > SLOT_COLUMNS:
        return False
    return not any(occupancy[column_start:column_start + duration_columns])


def find_placement(existing: Sequence[Placement], duration_columns: int,
                   preference: Union[str, int] = PLACEMENT_RIGHTMOST) -> Optional[int]:
    """
    新しいタスクを配置できる開始カラムを探す

    Args:
        existing: スロット内の既存配置
        duration_columns: 必要なカラム幅（1〜4）
        preference: "rightmost"（右端優先）または目標カラム（int）

    Returns:
        開始カラム。配置できない場合はNone
    """
    validate_duration(duration_columns)
    if preference != PLACEMENT_RIGHTMOST:
        validate_column(preference, "preference")

    if len(existing) >= MAX_TASKS_PER_SLOT:
        logger.debug("スロットが満杯のため配置できません")
        return None

    occupancy = get_column_occupancy(existing)

    if preference == PLACEMENT_RIGHTMOST:
        for column_start in range(SLOT_COLUMNS - duration_columns, -1, -1):
            if _is_free(occupancy, column_start, duration_columns):
                return column_start
        return None

    # 目標カラムモード：空いていなければ再配置エンジンに委ねる
    if _is_free(occupancy, preference, duration_columns):
        return preference
    return None


def get_total_used_hours(existing: Sequence[Placement]) -> int:
    """既存配置が使用している合計カラム数"""
    return sum(p.duration_columns for p in existing)


def get_max_available_duration(existing: Sequence[Placement]) -> int:
    """連続した空きカラムの最大長"""
    occupancy = get_column_occupancy(existing)
    max_duration = 0
    current = 0
    for occupied in occupancy:
        if occupied:
            current = 0
        else:
            current += 1
            max_duration = max(max_duration, current)
    return max_duration


def get_available_space_after(existing: Sequence[Placement], after_column: int) -> int:
    """指定カラムから右方向に連続する空きカラム数"""
    validate_column(after_column, "after_column")
    occupancy = get_column_occupancy(existing)
    space = 0
    for occupied in occupancy[after_column:]:
        if occupied:
            break
        space += 1
    return space

"""
カラムモデル

タスクの hours（1〜4）と column_start（0〜3）を正規化された
Placement に変換します。カラム情報を持たない旧形式のタスクは、
兄弟タスクの数とインデックスから決定的に配置を割り当てます。
"""

import logging
from typing import List, Optional, Sequence

from models.slot_models import (
    SLOT_COLUMNS, MAX_TASKS_PER_SLOT, Placement, SlotItem,
    item_id, item_columns, is_valid_layout
)

logger = logging.getLogger(__name__)


def get_auto_calculated_hours(task_index: int, total_tasks: int) -> int:
    """
    均等分割による旧形式タスクの幅を計算

    先頭 total_tasks-1 個は 4 // total_tasks、最後のタスクが余りを含めて受け取る。

    Args:
        task_index: 兄弟タスク中のインデックス
        total_tasks: 兄弟タスク数

    Returns:
        カラム幅
    """
    if not 1 <= total_tasks <= MAX_TASKS_PER_SLOT:
        raise ValueError(f"タスク数は1〜{MAX_TASKS_PER_SLOT}である必要があります: {total_tasks}")
    if not 0 <= task_index < total_tasks:
        raise ValueError(f"インデックスが範囲外です: {task_index} / {total_tasks}")

    base = SLOT_COLUMNS // total_tasks
    if task_index == total_tasks - 1:
        return SLOT_COLUMNS - base * (total_tasks - 1)
    return base


def get_auto_calculated_column_start(task_index: int, total_tasks: int) -> int:
    """均等分割による旧形式タスクの開始カラムを計算"""
    # 幅の検証を兼ねる
    get_auto_calculated_hours(task_index, total_tasks)
    return task_index * (SLOT_COLUMNS // total_tasks)


def validate_task_boundaries(hours, column_start) -> bool:
    """タスクが4カラムの境界内に収まるかチェック"""
    for value in (hours, column_start):
        if isinstance(value, bool) or not isinstance(value, int):
            return False
    return (1 <= hours <= SLOT_COLUMNS and
            0 <= column_start < SLOT_COLUMNS and
            column_start + hours <= SLOT_COLUMNS)


def is_legacy_layout(tasks: Sequence[SlotItem]) -> bool:
    """カラム情報を持たないタスクが含まれているか"""
    return any(None in item_columns(item) for item in tasks)


def _explicit_placements(items: Sequence[SlotItem]) -> Optional[List[Placement]]:
    """明示的なカラム情報からPlacementを作成（作成できない場合はNone）"""
    placements = []
    for item in items:
        hours, column_start = item_columns(item)
        if not validate_task_boundaries(hours, column_start):
            return None
        placements.append(Placement(item_id(item), hours, column_start))
    return placements


def _legacy_placements(items: Sequence[SlotItem]) -> List[Placement]:
    """均等分割で旧形式タスクを移行"""
    count = len(items)
    return [
        Placement(
            placement_id=item_id(item),
            duration_columns=get_auto_calculated_hours(index, count),
            column_start=get_auto_calculated_column_start(index, count)
        )
        for index, item in enumerate(items)
    ]


def normalize(tasks: Sequence[SlotItem]) -> List[Placement]:
    """
    スロット内のタスクを正規化されたPlacementのリストに変換

    全タスクが明示的なカラム情報を持ち、スロット全体として不変条件を満たす場合は
    その値をそのまま使用する。それ以外はスロット全体を均等分割で移行する。
    出力順は入力順。純粋関数であり冪等。

    Args:
        tasks: TaskまたはPlacementのリスト

    Returns:
        Placementのリスト
    """
    items = list(tasks)
    if len(items) > MAX_TASKS_PER_SLOT:
        raise ValueError(f"1スロットのタスク数は最大{MAX_TASKS_PER_SLOT}です: {len(items)}")
    if not items:
        return []

    explicit = _explicit_placements(items)
    if explicit is not None and is_valid_layout(explicit):
        return explicit

    migrated = _legacy_placements(items)
    logger.debug(
        "旧形式レイアウトを移行しました: %s",
        [(p.placement_id, p.column_start, p.duration_columns) for p in migrated]
    )
    return migrated

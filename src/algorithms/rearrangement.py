"""
再配置エンジン

ドロップ先カラムを受け取り、ドロップされたタスクを含むスロット内の
全配置を再計算します。衝突する既存タスクは幅と順序を変えずに左右へ圧縮し、
開始カラムが変わったタスクを呼び出し側へ報告します。
"""

import logging
from typing import List, Optional, Sequence, Tuple

from models.slot_models import (
    SLOT_COLUMNS, MAX_TASKS_PER_SLOT, Placement, PlacementDelta,
    RearrangementResult, SlotItem, Task, item_id, is_valid_layout,
    sort_by_column, validate_column, validate_duration
)
from .placement_solver import find_placement

logger = logging.getLogger(__name__)


def incoming_duration(incoming: SlotItem) -> int:
    """投入タスクの幅（新規タスクでhours未設定の場合は1）"""
    if isinstance(incoming, Placement):
        return incoming.duration_columns
    if incoming.hours is None:
        return 1
    return validate_duration(incoming.hours)


def calculate_drop_column(drop_x: float, slot_left: float, slot_width: float) -> int:
    """
    ポインタのX座標からドロップ先カラム（0〜3）を計算

    Args:
        drop_x: ドロップ位置のX座標
        slot_left: スロット要素の左端X座標
        slot_width: スロット要素の幅

    Returns:
        カラム番号
    """
    if slot_width <= 0:
        raise ValueError(f"スロット幅は正の値である必要があります: {slot_width}")
    column_width = slot_width / SLOT_COLUMNS
    column = int((drop_x - slot_left) // column_width)
    return max(0, min(SLOT_COLUMNS - 1, column))


def _compress_left(group: Sequence[Placement], boundary: int) -> List[Placement]:
    """左グループを右から順に境界より左へ詰める"""
    result = []
    for placement in reversed(group):
        new_end = min(placement.column_end, boundary)
        new_start = new_end - placement.duration_columns
        if new_start < 0:
            return []
        result.append(placement.moved_to(new_start))
        boundary = new_start
    result.reverse()
    return result


def _compress_right(group: Sequence[Placement], boundary: int) -> List[Placement]:
    """右グループを左から順に境界より右へ詰める"""
    result = []
    for placement in group:
        new_start = max(placement.column_start, boundary)
        if new_start + placement.duration_columns > SLOT_COLUMNS:
            return []
        result.append(placement.moved_to(new_start))
        boundary = new_start + placement.duration_columns
    return result


def _diff(before: Sequence[Placement], after: Sequence[Placement],
          exclude_id: int) -> List[PlacementDelta]:
    """開始カラムが変わった配置を抽出"""
    previous = {p.placement_id: p for p in before}
    moved = []
    for placement in sort_by_column(after):
        if placement.placement_id == exclude_id:
            continue
        old = previous.get(placement.placement_id)
        if old is not None and old.column_start != placement.column_start:
            moved.append(PlacementDelta(
                placement_id=placement.placement_id,
                old_column_start=old.column_start,
                new_column_start=placement.column_start,
                duration_columns=placement.duration_columns
            ))
    return moved


def _order_preserving_layout(others: Sequence[Placement], dropped_id: int, duration: int,
                             desired_start: int, split_column: int,
                             fixed_start: bool) -> Optional[Tuple[List[Placement], Placement]]:
    """
    既存タスクの順序を保ったまま、投入タスクの開始カラムと圧縮後の配置を決定

    split_column より左から始まるタスクは左グループ（左へ圧縮）、
    それ以外は右グループ（右へ圧縮）とし、グループは入れ替わらない。
    開始カラムは取り得る範囲 [左グループの幅合計, 4 - 幅 - 右グループの幅合計] のうち
    desired_start に最も近い値。fixed_start の場合は desired_start のみ許可する。
    """
    ordered = sort_by_column(others)
    left = [p for p in ordered if p.column_start < split_column]
    right = [p for p in ordered if p.column_start >= split_column]

    lowest = sum(p.duration_columns for p in left)
    highest = SLOT_COLUMNS - duration - sum(p.duration_columns for p in right)
    if lowest > highest:
        return None

    start = max(lowest, min(highest, desired_start))
    if fixed_start and start != desired_start:
        return None

    dropped = Placement(dropped_id, duration, start)
    new_left = _compress_left(left, start)
    new_right = _compress_right(right, dropped.column_end)
    if len(new_left) != len(left) or len(new_right) != len(right):
        return None

    layout = new_left + [dropped] + new_right
    if not is_valid_layout(layout):
        return None
    return layout, dropped


def _reject(existing: Sequence[Placement], reason: str) -> RearrangementResult:
    """配置不可の結果を作成"""
    logger.info("ドロップを拒否しました: %s", reason)
    return RearrangementResult(
        can_place=False,
        arrangement=sort_by_column(existing),
        moved=[],
        placement=None,
        reason=reason
    )


def rearrange(existing_in_slot: Sequence[Placement], incoming: SlotItem,
              target_column: int, split_column: Optional[int] = None,
              fixed_start: bool = False) -> RearrangementResult:
    """
    ドロップされたタスクを目標カラムに配置し、スロット全体の配置を再計算

    1. 目標範囲が空いていればそのまま配置（他タスクは動かない）
    2. 衝突する場合は既存タスクを幅と順序を変えずに左右へ圧縮
       （目標カラムより左から始まるタスクは左側、それ以外は右側に残る）
    3. 容量不足・タスク数超過の場合は配置不可

    Args:
        existing_in_slot: スロット内の現在の配置（投入タスク自身を含んでもよい）
        incoming: ドロップされたタスク
        target_column: ドロップ先カラム（0〜3）
        split_column: 左右グループの境界（未指定時は target_column）
        fixed_start: Trueの場合、開始カラムを目標から動かさない（リサイズ用）

    Returns:
        RearrangementResult
    """
    validate_column(target_column, "target_column")
    duration = incoming_duration(incoming)
    dropped_id = item_id(incoming)
    if split_column is None:
        split_column = target_column

    existing = list(existing_in_slot)
    others = [p for p in existing if p.placement_id != dropped_id]
    desired_start = min(target_column, SLOT_COLUMNS - duration)

    logger.debug(
        "再配置開始: id=%s 幅=%s 目標=%s 既存=%s",
        dropped_id, duration, target_column,
        [(p.placement_id, p.column_start, p.duration_columns) for p in others]
    )

    if len(others) >= MAX_TASKS_PER_SLOT:
        return _reject(existing, f"スロットが満杯です（最大{MAX_TASKS_PER_SLOT}タスク）")

    used = sum(p.duration_columns for p in others)
    if used + duration > SLOT_COLUMNS:
        return _reject(existing, f"容量不足です: 使用{used} + 必要{duration} > {SLOT_COLUMNS}")

    # 直接配置
    if find_placement(others, duration, desired_start) == desired_start:
        dropped = Placement(dropped_id, duration, desired_start)
        return RearrangementResult(
            can_place=True,
            arrangement=sort_by_column(others + [dropped]),
            moved=[],
            placement=dropped
        )

    resolved = _order_preserving_layout(others, dropped_id, duration, desired_start,
                                        split_column, fixed_start)
    if resolved is None:
        return _reject(existing, "順序を保ったまま連続した空きカラムを確保できません")

    layout, dropped = resolved
    moved = _diff(others, layout, dropped_id)
    logger.debug("再配置完了: 開始=%s 移動=%s", dropped.column_start, moved)

    return RearrangementResult(
        can_place=True,
        arrangement=sort_by_column(layout),
        moved=moved,
        placement=dropped
    )


def drop_new_task(existing_in_slot: Sequence[Placement], task: Task,
                  target_column: Optional[int] = None) -> RearrangementResult:
    """新規タスクを目標カラム（未指定の場合は右端）にドロップ"""
    duration = incoming_duration(task)
    if target_column is None:
        target_column = SLOT_COLUMNS - duration
    return rearrange(existing_in_slot, task, target_column)

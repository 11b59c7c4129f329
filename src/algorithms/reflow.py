"""
リフロー（左詰め）

タスク削除後や表示前の正規化として、スロット内の配置を
隙間なく左詰めに並べ直します。幅と相対順序は保持します。
"""

from typing import List, Optional, Sequence

from models.slot_models import SLOT_COLUMNS, MAX_TASKS_PER_SLOT, Placement


def reflow(tasks: Sequence[Placement], id_order: Optional[Sequence[int]] = None) -> List[Placement]:
    """
    左詰めの正規配置を作成

    Args:
        tasks: スロット内の配置
        id_order: 開始カラムが同じ場合の並び順（IDのリスト）。未指定時はID順

    Returns:
        i番目のタスクの開始カラムが前のタスクの幅の合計となる配置リスト
    """
    placements = list(tasks)
    if len(placements) > MAX_TASKS_PER_SLOT:
        raise ValueError(f"1スロットのタスク数は最大{MAX_TASKS_PER_SLOT}です: {len(placements)}")
    total = sum(p.duration_columns for p in placements)
    if total > SLOT_COLUMNS:
        raise ValueError(f"容量超過のスロットはリフローできません: 合計{total}カラム")

    rank = {}
    if id_order is not None:
        rank = {placement_id: index for index, placement_id in enumerate(id_order)}
    fallback = len(rank)

    ordered = sorted(
        placements,
        key=lambda p: (p.column_start, rank.get(p.placement_id, fallback), p.placement_id)
    )

    result = []
    position = 0
    for placement in ordered:
        result.append(placement.moved_to(position))
        position += placement.duration_columns
    return result


def remove_and_reflow(tasks: Sequence[Placement], placement_id: int) -> List[Placement]:
    """指定タスクを除いて残りを左詰め"""
    return reflow([p for p in tasks if p.placement_id != placement_id])

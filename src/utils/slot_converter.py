"""
スロット変換モジュール

配置リストと移動差分を表示・ダウンロード用のDataFrameに変換します。
"""

import pandas as pd
from typing import Dict, List, Mapping, Optional, Sequence

from models.slot_models import Placement, PlacementDelta, SlotKey, sort_by_column
from .constants import GRID_COLS


def placements_to_dataframe(placements: Sequence[Placement],
                            titles: Optional[Mapping[int, str]] = None) -> pd.DataFrame:
    """
    配置リストをDataFrameに変換

    Args:
        placements: スロット内の配置
        titles: タスクIDからタイトルへのマッピング

    Returns:
        id, title, column_start, duration_columns, column_end 列のDataFrame（開始カラム順）
    """
    titles = titles or {}
    rows = [
        {
            "id": p.placement_id,
            "title": titles.get(p.placement_id, ""),
            "column_start": p.column_start,
            "duration_columns": p.duration_columns,
            "column_end": p.column_end
        }
        for p in sort_by_column(placements)
    ]
    columns = ["id", "title", "column_start", "duration_columns", "column_end"]
    return pd.DataFrame(rows, columns=columns)


def moved_to_dataframe(moved: Sequence[PlacementDelta]) -> pd.DataFrame:
    """移動差分をDataFrameに変換"""
    rows = [
        {
            "id": delta.placement_id,
            "old_column_start": delta.old_column_start,
            "new_column_start": delta.new_column_start,
            "shift": delta.shift,
            "duration_columns": delta.duration_columns
        }
        for delta in moved
    ]
    columns = ["id", "old_column_start", "new_column_start", "shift", "duration_columns"]
    return pd.DataFrame(rows, columns=columns)


def slot_occupancy_grid(slots: Mapping[SlotKey, Sequence[Placement]]) -> pd.DataFrame:
    """
    複数スロットの占有状況をグリッドに変換

    Args:
        slots: スロットキーから配置リストへのマッピング

    Returns:
        1スロット1行、c0〜c3列に占有タスクIDを持つDataFrame（空きは空文字）
    """
    records: List[Dict] = []
    for slot_key, placements in slots.items():
        row = {
            "employee": slot_key.employee_id,
            "date": slot_key.date.isoformat(),
            "period": slot_key.period.value
        }
        row.update({col: "" for col in GRID_COLS})
        for placement in placements:
            for column in placement.columns:
                row[GRID_COLS[column]] = str(placement.placement_id)
        records.append(row)

    grid = pd.DataFrame(records, columns=["employee", "date", "period"] + GRID_COLS)
    if grid.empty:
        return grid
    return grid.sort_values(["employee", "date", "period"]).reset_index(drop=True)

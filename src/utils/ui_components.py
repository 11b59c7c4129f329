"""
UIコンポーネントモジュール

Streamlitアプリケーションで使用する共通UIコンポーネントを提供します。
"""

import streamlit as st
import pandas as pd
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence
from io import StringIO

from models.slot_models import Placement, RearrangementResult, ResizeProposal
from .slot_converter import placements_to_dataframe, moved_to_dataframe
from .constants import SLOT_COLUMNS


def render_slot_bar(placements: Sequence[Placement], titles: Optional[Mapping[int, str]] = None) -> str:
    """
    スロットの占有状況を1行のテキストバーで表現

    例: "[ 1 | 1 | 2 | . ]"
    """
    titles = titles or {}
    cells = ["."] * SLOT_COLUMNS
    for placement in placements:
        label = titles.get(placement.placement_id) or str(placement.placement_id)
        for column in placement.columns:
            cells[column] = label
    return "[ " + " | ".join(cells) + " ]"


def display_slot_layout(placements: Sequence[Placement], titles: Optional[Mapping[int, str]] = None) -> None:
    """
    スロットの配置を表示

    Args:
        placements: スロット内の配置
        titles: タスクIDからタイトルへのマッピング
    """
    st.subheader("🗂️ スロット配置")
    st.code(render_slot_bar(placements, titles))
    st.dataframe(placements_to_dataframe(placements, titles), use_container_width=True)


def display_rearrangement_result(result: RearrangementResult) -> None:
    """再配置結果を表示"""
    if not result.can_place:
        st.warning(f"⚠️ 配置できません: {result.reason}")
        return

    st.success("✅ 配置しました")
    if result.moved:
        st.write("**移動したタスク**")
        st.dataframe(moved_to_dataframe(result.moved), use_container_width=True)
    else:
        st.info("他のタスクは移動していません")


def display_resize_preview(proposal: ResizeProposal) -> None:
    """リサイズのプレビューを表示"""
    preview = Placement(proposal.placement_id, proposal.duration_columns, proposal.column_start)
    st.caption(f"プレビュー: 開始 {proposal.column_start} / 幅 {proposal.duration_columns}")
    st.code(render_slot_bar([preview]))


def display_slot_summary(summary: Dict[str, Any]) -> None:
    """スロットの使用状況を表示"""
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("タスク数", summary["task_count"])
    c2.metric("使用カラム", summary["used_hours"])
    c3.metric("空きカラム", summary["free_hours"])
    c4.metric("最大連続空き", summary["max_available_duration"])
    if summary.get("is_legacy_layout"):
        st.info("カラム情報のないタスクを均等分割で表示しています")
    if summary.get("is_blocked"):
        st.warning("このスロットは休暇・祝日のためブロックされています")


def generate_filename(prefix: str, extension: str = "csv") -> str:
    """タイムスタンプ付きファイル名を生成"""
    return f"{prefix}_{datetime.now():%Y%m%d_%H%M}.{extension}"


def create_download_button(df: pd.DataFrame, label: str, prefix: str) -> None:
    """DataFrameのCSVダウンロードボタンを作成"""
    buf = StringIO()
    df.to_csv(buf, index=False)
    st.download_button(label, buf.getvalue(), file_name=generate_filename(prefix), mime="text/csv")

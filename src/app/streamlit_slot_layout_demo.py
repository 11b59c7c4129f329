import streamlit as st
from dataclasses import replace
from datetime import date
import sys
import os

# プロジェクトルートをパスに追加
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from models.slot_models import Period, ResizeEdge, SlotKey, Task, PlacementUpdate
from algorithms.column_model import normalize
from utils.config import get_config
from utils.constants import COLUMN_INDEXES, DEFAULT_EMPLOYEES, OPERATION_CHOICES, PERIOD_CHOICES, DEFAULT_SETTINGS
from utils.logger import setup_logging, get_logger
from utils.slot_converter import slot_occupancy_grid
from utils.slot_operations import SlotOperationExecutor
from utils.ui_components import (
    display_slot_layout, display_rearrangement_result, display_resize_preview,
    display_slot_summary, create_download_button
)

logger = get_logger(__name__)

PERIODS = {"午前": Period.MORNING, "午後": Period.AFTERNOON}


# ---------- インメモリのスロットストア ----------
def _store() -> dict:
    if "slot_store" not in st.session_state:
        st.session_state.slot_store = {}
        st.session_state.blocked_slots = set()
        st.session_state.next_task_id = 1
    return st.session_state.slot_store


def _find_slot_of(task_id: int):
    for slot_key, tasks in _store().items():
        if task_id in tasks:
            return slot_key
    return None


def provide_slot(slot_key: SlotKey) -> list:
    """ストアから最新のタスク一覧を返す（コピー）"""
    tasks = _store().get(slot_key, {})
    return [replace(task) for task in tasks.values()]


def persist_update(update: PlacementUpdate) -> None:
    """更新情報をストアに反映"""
    store = _store()
    current_slot = _find_slot_of(update.task_id)
    target_slot = update.slot_key or current_slot
    task = store[current_slot].pop(update.task_id) if current_slot else Task(task_id=update.task_id)
    task.hours = update.duration_columns
    task.column_start = update.column_start
    store.setdefault(target_slot, {})[update.task_id] = task


def is_blocked(slot_key: SlotKey) -> bool:
    return slot_key in st.session_state.blocked_slots


def main():
    setup_logging()
    config = get_config()
    _store()

    st.title("🗓️ スロットレイアウト デモ")

    # ---------- Sidebar：スロット選択 ----------
    st.sidebar.header("1️⃣ スロット選択")
    employee = st.sidebar.selectbox("従業員", DEFAULT_EMPLOYEES)
    target_date = st.sidebar.date_input("日付", date.today())
    period_label = st.sidebar.radio("期間", PERIOD_CHOICES, horizontal=True)
    slot_key = SlotKey(employee, target_date, PERIODS[period_label])

    blocked = st.sidebar.checkbox("休暇・祝日でブロック", value=slot_key in st.session_state.blocked_slots)
    if blocked:
        st.session_state.blocked_slots.add(slot_key)
    else:
        st.session_state.blocked_slots.discard(slot_key)

    # ---------- Sidebar：動作設定 ----------
    st.sidebar.header("2️⃣ 動作設定")
    config = replace(
        config,
        persist_displaced_siblings=st.sidebar.checkbox(
            "移動したタスクも保存", value=DEFAULT_SETTINGS["persist_displaced_siblings"]),
        create_fallback_to_rearrange=st.sidebar.checkbox(
            "空きがない場合は再配置して作成", value=DEFAULT_SETTINGS["create_fallback_to_rearrange"])
    )

    executor = SlotOperationExecutor(provide_slot, persist_update, is_blocked, config)

    display_slot_summary(executor.summarize_slot(slot_key))
    tasks = provide_slot(slot_key)
    titles = {task.task_id: task.title for task in tasks}
    display_slot_layout(normalize(tasks), titles)

    # ---------- 操作 ----------
    st.header("3️⃣ 操作")
    operation = st.selectbox("操作", OPERATION_CHOICES)

    if operation == "タスク作成":
        title = st.text_input("タイトル", "New Task")
        hours = st.slider("時間（カラム数）", 1, 4, config.default_new_task_hours)
        if st.button("➕ 作成"):
            task_id = st.session_state.next_task_id
            st.session_state.next_task_id += 1
            result = executor.create_task(slot_key, Task(task_id=task_id, hours=hours, title=title))
            if result.can_place:
                _store()[slot_key][task_id].title = title
            logger.info("タスク作成: id=%s 結果=%s", task_id, result.can_place)
            display_rearrangement_result(result)

    elif operation == "ドロップ（カラム指定）":
        all_tasks = {task_id: key for key, items in _store().items() for task_id in items}
        if not all_tasks:
            st.info("ドラッグできるタスクがありません")
        else:
            task_id = st.selectbox("タスク", sorted(all_tasks))
            target_column = st.select_slider("ドロップ先カラム", COLUMN_INDEXES)
            if st.button("🎯 ドロップ"):
                source_key = all_tasks[task_id]
                task = replace(_store()[source_key][task_id])
                result = executor.drop_task(task, source_key, slot_key, target_column)
                display_rearrangement_result(result)

    elif operation == "リサイズ":
        if not tasks:
            st.info("このスロットにタスクがありません")
        else:
            task_id = st.selectbox("タスク", [task.task_id for task in tasks])
            edge = ResizeEdge(st.radio("辺", ["left", "right"], horizontal=True))
            delta = st.slider("移動量（カラム）", -3, 3, 0)
            session = executor.begin_resize(slot_key, task_id, edge)
            display_resize_preview(session.update(delta))
            if st.button("✅ 確定"):
                display_rearrangement_result(executor.release_resize(slot_key, session))
            else:
                session.cancel()

    elif operation == "タスク削除":
        if not tasks:
            st.info("このスロットにタスクがありません")
        else:
            task_id = st.selectbox("タスク", [task.task_id for task in tasks])
            if st.button("🗑️ 削除"):
                updates = executor.delete_task(slot_key, task_id)
                _store()[slot_key].pop(task_id, None)
                st.success(f"削除しました（左詰めで{len(updates)}件移動）")

    # ---------- 全スロット ----------
    st.header("📅 全スロットの占有状況")
    grid = slot_occupancy_grid({key: normalize(provide_slot(key)) for key in _store()})
    st.dataframe(grid, use_container_width=True)
    if not grid.empty:
        create_download_button(grid, "占有状況 CSV DL", "slots")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
スロット操作実行のテスト

インメモリのストアをプロバイダー・永続化シンクとして使い、
作成・ドロップ・リサイズ・削除の各操作と永続化される更新をテストします。
"""

import sys
import os
import pytest
from dataclasses import replace
from datetime import date

# プロジェクトルートをパスに追加
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from models.slot_models import Period, Placement, PlacementUpdate, ResizeEdge, SlotKey, Task, sort_by_column
from utils.config import get_config
from utils.slot_operations import SlotOperationExecutor, diff_updates

SLOT = SlotKey("Emp A", date(2024, 1, 1), Period.MORNING)
OTHER = SlotKey("Emp B", date(2024, 1, 1), Period.MORNING)
BLOCKED = SlotKey("Emp A", date(2024, 1, 2), Period.AFTERNOON)


class InMemorySlotStore:
    """テスト用のスロットストア"""

    def __init__(self, slots=None):
        self.slots = {key: {task.task_id: task for task in tasks} for key, tasks in (slots or {}).items()}
        self.updates = []
        self.fetch_count = 0

    def provide(self, slot_key):
        self.fetch_count += 1
        return [replace(task) for task in self.slots.get(slot_key, {}).values()]

    def persist(self, update):
        self.updates.append(update)
        current = next((key for key, tasks in self.slots.items() if update.task_id in tasks), None)
        target = update.slot_key or current
        task = self.slots[current].pop(update.task_id) if current is not None else Task(update.task_id)
        task.hours = update.duration_columns
        task.column_start = update.column_start
        self.slots.setdefault(target, {})[update.task_id] = task

    def layout(self, slot_key):
        tasks = self.slots.get(slot_key, {}).values()
        return sorted((task.task_id, task.column_start, task.hours) for task in tasks)


def make_executor(store, **overrides):
    settings = {
        "persist_displaced_siblings": True,
        "create_fallback_to_rearrange": True,
        "default_new_task_hours": 1,
    }
    settings.update(overrides)
    config = replace(get_config(), **settings)
    return SlotOperationExecutor(store.provide, store.persist, lambda key: key == BLOCKED, config)


class TestCreateTask:
    """タスク作成"""

    def test_rightmost(self):
        """空きの右端に作成"""
        store = InMemorySlotStore()
        result = make_executor(store).create_task(SLOT, Task(1, hours=2))
        assert result.can_place
        assert result.placement == Placement(1, 2, 2)
        assert store.updates == [PlacementUpdate(1, 2, 2, SLOT)]
        assert store.layout(SLOT) == [(1, 2, 2)]

    def test_default_hours(self):
        """hours未設定の場合は設定値を使用"""
        store = InMemorySlotStore()
        result = make_executor(store, default_new_task_hours=3).create_task(SLOT, Task(1))
        assert result.placement == Placement(1, 3, 1)

    def test_fallback_to_rearrange(self):
        """連続した空きがない場合は右端へのドロップとして再配置"""
        store = InMemorySlotStore({SLOT: [Task(1, hours=1, column_start=1), Task(2, hours=1, column_start=3)]})
        result = make_executor(store).create_task(SLOT, Task(3, hours=2))
        assert result.can_place
        assert result.arrangement == [Placement(1, 1, 0), Placement(3, 2, 1), Placement(2, 1, 3)]
        assert store.updates == [
            PlacementUpdate(1, 0, 1),
            PlacementUpdate(3, 1, 2, SLOT),
        ]
        assert store.layout(SLOT) == [(1, 0, 1), (2, 3, 1), (3, 1, 2)]

    def test_fallback_disabled(self):
        """再配置が無効なら作成しない"""
        store = InMemorySlotStore({SLOT: [Task(1, hours=1, column_start=1), Task(2, hours=1, column_start=3)]})
        result = make_executor(store, create_fallback_to_rearrange=False).create_task(SLOT, Task(3, hours=2))
        assert not result.can_place
        assert result.reason
        assert store.updates == []

    def test_full_slot(self):
        """容量が埋まったスロットには作成できない"""
        store = InMemorySlotStore({SLOT: [Task(1, hours=2, column_start=0), Task(2, hours=2, column_start=2)]})
        result = make_executor(store).create_task(SLOT, Task(3, hours=1))
        assert not result.can_place
        assert store.updates == []

    def test_blocked_slot(self):
        """ブロックされたスロットは現在の配置のまま拒否"""
        store = InMemorySlotStore({BLOCKED: [Task(1, hours=1, column_start=2)]})
        result = make_executor(store).create_task(BLOCKED, Task(2, hours=1))
        assert not result.can_place
        assert result.reason
        assert result.arrangement == [Placement(1, 1, 2)]
        assert store.updates == []


class TestDropTask:
    """ドロップ"""

    def test_cross_slot_move(self):
        """別スロットへの移動では元スロットを左詰め"""
        store = InMemorySlotStore({
            SLOT: [Task(1, hours=2, column_start=0), Task(2, hours=2, column_start=2)],
            OTHER: [Task(3, hours=1, column_start=0)],
        })
        # ドラッグ開始時の古い情報（幅1）ではなく最新の幅2が使われる
        stale = Task(1, hours=1, column_start=0)
        result = make_executor(store).drop_task(stale, SLOT, OTHER, 1)
        assert result.can_place
        assert result.placement == Placement(1, 2, 1)
        assert store.updates == [
            PlacementUpdate(1, 1, 2, OTHER),
            PlacementUpdate(2, 0, 2),
        ]
        assert store.layout(OTHER) == [(1, 1, 2), (3, 0, 1)]
        assert store.layout(SLOT) == [(2, 0, 2)]

    def test_same_slot_swap(self):
        """同じスロット内での入れ替え"""
        store = InMemorySlotStore({SLOT: [Task(1, hours=2, column_start=0), Task(2, hours=2, column_start=2)]})
        result = make_executor(store).drop_task(Task(2), SLOT, SLOT, 0)
        assert result.can_place
        assert store.updates == [PlacementUpdate(1, 2, 2), PlacementUpdate(2, 0, 2, SLOT)]
        assert store.layout(SLOT) == [(1, 2, 2), (2, 0, 2)]

    def test_displaced_siblings_not_persisted(self):
        """設定により移動した兄弟タスクは永続化しない"""
        store = InMemorySlotStore({SLOT: [Task(1, hours=2, column_start=0), Task(2, hours=2, column_start=2)]})
        executor = make_executor(store, persist_displaced_siblings=False)
        result = executor.drop_task(Task(2), SLOT, SLOT, 0)
        assert result.moved
        assert store.updates == [PlacementUpdate(2, 0, 2, SLOT)]

    def test_rejected_drop(self):
        """配置不可のドロップでは何も永続化しない"""
        store = InMemorySlotStore({
            SLOT: [Task(1, hours=1, column_start=0)],
            OTHER: [Task(2, hours=2, column_start=0), Task(3, hours=2, column_start=2)],
        })
        result = make_executor(store).drop_task(Task(1), SLOT, OTHER, 1)
        assert not result.can_place
        assert store.updates == []
        assert store.layout(SLOT) == [(1, 0, 1)]

    def test_drop_from_palette(self):
        """ドラッグ元のない新規タスクのドロップ"""
        store = InMemorySlotStore()
        result = make_executor(store).drop_task(Task(9, hours=1), None, SLOT, 0)
        assert result.placement == Placement(9, 1, 0)
        assert store.updates == [PlacementUpdate(9, 0, 1, SLOT)]

    def test_drop_into_blocked_slot(self):
        store = InMemorySlotStore({
            SLOT: [Task(1, hours=1, column_start=0)],
            BLOCKED: [Task(2, hours=2, column_start=0)],
        })
        result = make_executor(store).drop_task(Task(1), SLOT, BLOCKED, 0)
        assert not result.can_place
        assert result.arrangement == [Placement(2, 2, 0)]
        assert store.updates == []

    def test_palette_drop_uses_default_hours(self):
        """hours未設定の新規ドロップは作成時と同じ既定の幅を使う"""
        store = InMemorySlotStore()
        result = make_executor(store, default_new_task_hours=2).drop_task(Task(9), None, SLOT, 0)
        assert result.placement == Placement(9, 2, 0)
        assert store.updates == [PlacementUpdate(9, 0, 2, SLOT)]


class TestDeleteTask:
    """削除後の左詰め"""

    def test_delete_reflows(self):
        store = InMemorySlotStore({SLOT: [
            Task(1, hours=1, column_start=0),
            Task(2, hours=1, column_start=1),
            Task(3, hours=2, column_start=2),
        ]})
        updates = make_executor(store).delete_task(SLOT, 2)
        assert updates == [PlacementUpdate(3, 1, 2)]
        assert store.updates == updates

    def test_delete_missing(self):
        store = InMemorySlotStore({SLOT: [Task(1, hours=1, column_start=0)]})
        assert make_executor(store).delete_task(SLOT, 9) == []
        assert store.updates == []


class TestResize:
    """リサイズの開始と確定"""

    def test_release_reads_fresh_slot(self):
        """セッション中に追加されたタスクも衝突解決に含まれる"""
        store = InMemorySlotStore({SLOT: [Task(1, hours=1, column_start=0)]})
        executor = make_executor(store)
        session = executor.begin_resize(SLOT, 1, ResizeEdge.RIGHT)
        session.update(1)

        store.slots[SLOT][2] = Task(2, hours=1, column_start=1)
        result = executor.release_resize(SLOT, session)

        assert result.can_place
        assert result.arrangement == [Placement(1, 2, 0), Placement(2, 1, 2)]
        assert store.updates == [PlacementUpdate(2, 2, 1), PlacementUpdate(1, 0, 2)]
        assert store.fetch_count == 2

    def test_begin_missing_task(self):
        store = InMemorySlotStore()
        with pytest.raises(ValueError):
            make_executor(store).begin_resize(SLOT, 1, ResizeEdge.LEFT)


class TestLegacySlots:
    """旧形式（カラム情報なし）のスロットを変更した後の再読み込み"""

    def test_resize_survives_reread(self):
        """リサイズ確定後も再読み込みで同じ配置になる"""
        store = InMemorySlotStore({SLOT: [Task(1), Task(2)]})
        executor = make_executor(store)
        session = executor.begin_resize(SLOT, 1, ResizeEdge.RIGHT)
        session.update(-1)
        result = executor.release_resize(SLOT, session)

        assert result.can_place
        assert result.arrangement == [Placement(1, 1, 0), Placement(2, 2, 2)]
        assert store.layout(SLOT) == [(1, 0, 1), (2, 2, 2)]
        assert sort_by_column(executor.fetch_slot(SLOT)) == result.arrangement

    def test_delete_survives_reread(self):
        """削除後の左詰めが移行された兄弟タスクにも永続化される"""
        store = InMemorySlotStore({SLOT: [Task(1), Task(2), Task(3)]})
        executor = make_executor(store)
        updates = executor.delete_task(SLOT, 2)
        store.slots[SLOT].pop(2)

        assert updates == [PlacementUpdate(1, 0, 1), PlacementUpdate(3, 1, 2)]
        assert sort_by_column(executor.fetch_slot(SLOT)) == [Placement(1, 1, 0), Placement(3, 2, 1)]

    def test_swap_survives_reread(self):
        """同じスロット内の入れ替えは兄弟タスクの永続化設定に関係なく保持される"""
        store = InMemorySlotStore({SLOT: [Task(1), Task(2)]})
        executor = make_executor(store, persist_displaced_siblings=False)
        result = executor.drop_task(Task(2), SLOT, SLOT, 0)

        assert result.can_place
        assert store.updates == [PlacementUpdate(1, 2, 2), PlacementUpdate(2, 0, 2, SLOT)]
        assert sort_by_column(executor.fetch_slot(SLOT)) == [Placement(2, 2, 0), Placement(1, 2, 2)]

    def test_move_out_reflows_legacy_source(self):
        """旧形式スロットから移動した後、残りのタスクは左詰めで保存される"""
        store = InMemorySlotStore({SLOT: [Task(1), Task(2), Task(3)]})
        executor = make_executor(store)
        result = executor.drop_task(Task(3), SLOT, OTHER, 0)

        assert result.placement == Placement(3, 2, 0)
        assert store.layout(OTHER) == [(3, 0, 2)]
        assert store.layout(SLOT) == [(1, 0, 1), (2, 1, 1)]
        assert sort_by_column(executor.fetch_slot(SLOT)) == [Placement(1, 1, 0), Placement(2, 1, 1)]


class TestSummaryAndDiff:
    """集計と差分"""

    def test_summarize_legacy_slot(self):
        store = InMemorySlotStore({SLOT: [Task(1), Task(2)]})
        summary = make_executor(store).summarize_slot(SLOT)
        assert summary["task_count"] == 2
        assert summary["used_hours"] == 4
        assert summary["free_hours"] == 0
        assert summary["max_available_duration"] == 0
        assert summary["is_legacy_layout"] is True
        assert summary["is_blocked"] is False

    def test_summarize_blocked_slot(self):
        summary = make_executor(InMemorySlotStore()).summarize_slot(BLOCKED)
        assert summary["is_blocked"] is True
        assert summary["free_hours"] == 4

    def test_diff_updates(self):
        before = [Placement(1, 1, 0), Placement(2, 1, 2)]
        after = [Placement(1, 1, 0), Placement(2, 1, 1), Placement(3, 2, 2)]
        assert diff_updates(before, after, SLOT) == [
            PlacementUpdate(2, 1, 1, SLOT),
            PlacementUpdate(3, 2, 2, SLOT),
        ]

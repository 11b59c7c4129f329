"""
スロット操作実行モジュール

UIイベント（作成・ドロップ・リサイズ確定・削除）をレイアウトエンジンに
つなぎ、変更されたタスクだけを永続化シンクへ渡します。
すべての操作は、対象スロットのタスク一覧を実行直前に
プロバイダーから再取得してから計算します。
旧形式（カラム情報なし）のスロットを変更した場合は、均等分割で移行された
兄弟タスクの配置も明示的なカラム情報として永続化します。
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from algorithms.column_model import normalize, is_legacy_layout
from algorithms.placement_solver import (
    PLACEMENT_RIGHTMOST, find_placement, get_total_used_hours, get_max_available_duration
)
from algorithms.rearrangement import rearrange, drop_new_task
from algorithms.reflow import remove_and_reflow
from algorithms.resize import ResizeSession
from models.slot_models import (
    SLOT_COLUMNS, Placement, PlacementUpdate, RearrangementResult, ResizeEdge,
    SlotItem, SlotKey, Task, item_columns, item_id, sort_by_column, validate_duration
)

from .config import AppConfig, get_config

SlotProvider = Callable[[SlotKey], Sequence[Task]]
PersistenceSink = Callable[[PlacementUpdate], None]
BlockingPredicate = Callable[[SlotKey], bool]

logger = logging.getLogger(__name__)


def diff_updates(before: Sequence[SlotItem], after: Sequence[Placement],
                 slot_key: Optional[SlotKey] = None) -> List[PlacementUpdate]:
    """
    保存済みの値から開始カラムまたは幅が変わった配置の更新リストを作成

    before にはカラム情報を持たない旧形式のTaskも渡せる（その場合は常に更新対象）。
    """
    previous = {item_id(item): item_columns(item) for item in before}
    updates = []
    for placement in sort_by_column(after):
        stored = previous.get(placement.placement_id)
        if stored != (placement.duration_columns, placement.column_start):
            updates.append(PlacementUpdate(
                task_id=placement.placement_id,
                column_start=placement.column_start,
                duration_columns=placement.duration_columns,
                slot_key=slot_key
            ))
    return updates


class SlotOperationExecutor:
    """スロット操作の実行を管理するクラス"""

    def __init__(self, slot_provider: SlotProvider, persistence_sink: PersistenceSink,
                 is_blocked: Optional[BlockingPredicate] = None,
                 config: Optional[AppConfig] = None):
        """
        初期化

        Args:
            slot_provider: (従業員, 日付, 期間) の最新タスク一覧を返す関数
            persistence_sink: 更新情報を受け取る関数
            is_blocked: 休暇・祝日などで配置不可のスロットを判定する関数
            config: アプリケーション設定（未指定時は環境変数から読み込み）
        """
        self.slot_provider = slot_provider
        self.persistence_sink = persistence_sink
        self.is_blocked = is_blocked or (lambda slot_key: False)
        self.config = config or get_config()

    def _read_slot(self, slot_key: SlotKey) -> Tuple[List[SlotItem], List[Placement]]:
        """保存されているタスク一覧と正規化後の配置を取得（キャッシュしない）"""
        stored = list(self.slot_provider(slot_key))
        return stored, normalize(stored)

    def fetch_slot(self, slot_key: SlotKey) -> List[Placement]:
        """対象スロットの最新の配置を取得（キャッシュしない）"""
        return self._read_slot(slot_key)[1]

    def _persist(self, updates: Sequence[PlacementUpdate]) -> None:
        """更新情報を永続化シンクへ渡す"""
        for update in updates:
            self.persistence_sink(update)
        if updates:
            logger.info("%d件の配置更新を永続化しました", len(updates))

    def _blocked_result(self, slot_key: SlotKey) -> RearrangementResult:
        """配置不可スロットへの操作結果（配置は現在のまま）"""
        logger.info("スロットがブロックされています: %s", slot_key)
        return RearrangementResult(
            can_place=False,
            arrangement=sort_by_column(self.fetch_slot(slot_key)),
            moved=[],
            reason=f"スロット {slot_key} は休暇・祝日のため配置できません"
        )

    def _sibling_updates(self, stored: Sequence[SlotItem], placements: Sequence[Placement],
                         result: RearrangementResult, task_id: int) -> List[PlacementUpdate]:
        """投入タスク以外の更新リスト"""
        siblings = [p for p in result.arrangement if p.placement_id != task_id]
        updates = diff_updates(stored, siblings)

        # 移行が発生したスロットは全兄弟の配置を書き戻す
        migrated = bool(diff_updates(stored, placements))
        if migrated:
            logger.info("旧形式スロットの配置を永続化します: %s", [u.task_id for u in updates])
            return updates
        if self.config.persist_displaced_siblings:
            return updates
        moved_ids = {delta.placement_id for delta in result.moved}
        return [update for update in updates if update.task_id not in moved_ids]

    def _apply(self, result: RearrangementResult, task_id: int,
               stored: Sequence[SlotItem], placements: Sequence[Placement],
               own_slot_key: Optional[SlotKey] = None) -> None:
        """成功した再配置結果を永続化"""
        if not result.can_place or result.placement is None:
            return
        updates = self._sibling_updates(stored, placements, result, task_id)
        updates.append(PlacementUpdate(
            task_id=task_id,
            column_start=result.placement.column_start,
            duration_columns=result.placement.duration_columns,
            slot_key=own_slot_key
        ))
        self._persist(updates)

    def _with_default_hours(self, task: Task) -> Task:
        """hours未設定の新規タスクに設定値の幅を割り当て"""
        hours = task.hours if task.hours is not None else self.config.default_new_task_hours
        return replace(task, hours=validate_duration(hours))

    def create_task(self, slot_key: SlotKey, task: Task) -> RearrangementResult:
        """
        新規タスクをスロットの右端の空きに作成

        空きが見つからず、設定で許可されている場合は右端へのドロップとして再配置する。
        """
        if self.is_blocked(slot_key):
            return self._blocked_result(slot_key)

        stored, existing = self._read_slot(slot_key)
        new_task = self._with_default_hours(task)
        duration = new_task.hours

        column_start = find_placement(existing, duration, PLACEMENT_RIGHTMOST)
        if column_start is not None:
            placement = Placement(task.task_id, duration, column_start)
            result = RearrangementResult(
                can_place=True,
                arrangement=sort_by_column(existing + [placement]),
                moved=[],
                placement=placement
            )
        elif self.config.create_fallback_to_rearrange:
            result = drop_new_task(existing, replace(new_task, column_start=None))
        else:
            result = RearrangementResult(
                can_place=False,
                arrangement=sort_by_column(existing),
                moved=[],
                reason=f"{duration}カラムの連続した空きがありません"
            )

        self._apply(result, task.task_id, stored, existing, own_slot_key=slot_key)
        return result

    def drop_task(self, task: Task, source_key: Optional[SlotKey], target_key: SlotKey,
                  target_column: int) -> RearrangementResult:
        """
        タスクを目標スロットのカラムにドロップ

        Args:
            task: ドラッグされたタスク（幅はドラッグ元スロットの最新情報を優先）
            source_key: ドラッグ元スロット（パレットからの新規ドロップ時はNone）
            target_key: ドロップ先スロット
            target_column: ドロップ先カラム

        Returns:
            RearrangementResult
        """
        if self.is_blocked(target_key):
            return self._blocked_result(target_key)

        source_stored: List[SlotItem] = []
        source_before: List[Placement] = []
        incoming: Any = None
        if source_key is not None:
            source_stored, source_before = self._read_slot(source_key)
            incoming = next((p for p in source_before if p.placement_id == task.task_id), None)
        if incoming is None:
            incoming = self._with_default_hours(task)

        if source_key == target_key:
            target_stored, target = source_stored, source_before
        else:
            target_stored, target = self._read_slot(target_key)

        result = rearrange(target, incoming, target_column)
        if not result.can_place:
            return result

        self._apply(result, task.task_id, target_stored, target, own_slot_key=target_key)

        # 別スロットへ移動した場合は元スロットを左詰め
        if source_key is not None and source_key != target_key and isinstance(incoming, Placement):
            source_after = remove_and_reflow(source_before, task.task_id)
            self._persist(diff_updates(source_stored, source_after))

        return result

    def delete_task(self, slot_key: SlotKey, task_id: int) -> List[PlacementUpdate]:
        """
        タスク削除後の残りのタスクを左詰めし、変更分を永続化

        タスク自体の削除は呼び出し側の責務。
        """
        stored, before = self._read_slot(slot_key)
        if not any(p.placement_id == task_id for p in before):
            logger.warning("削除対象がスロットに存在しません: id=%s slot=%s", task_id, slot_key)
            return []

        after = remove_and_reflow(before, task_id)
        updates = diff_updates(stored, after)
        self._persist(updates)
        return updates

    def begin_resize(self, slot_key: SlotKey, task_id: int, edge: ResizeEdge) -> ResizeSession:
        """リサイズセッションを開始"""
        current = next((p for p in self.fetch_slot(slot_key) if p.placement_id == task_id), None)
        if current is None:
            raise ValueError(f"タスク {task_id} はスロット {slot_key} に存在しません")
        return ResizeSession(current, edge)

    def release_resize(self, slot_key: SlotKey, session: ResizeSession) -> RearrangementResult:
        """リサイズを確定（最新のスロット情報に対して衝突を解決）"""
        stored, placements = self._read_slot(slot_key)
        result = session.release(lambda: placements)
        self._apply(result, session.original.placement_id, stored, placements)
        return result

    def summarize_slot(self, slot_key: SlotKey) -> Dict[str, Any]:
        """スロットの使用状況を集計"""
        tasks, placements = self._read_slot(slot_key)
        used = get_total_used_hours(placements)
        return {
            "slot": str(slot_key),
            "task_count": len(placements),
            "used_hours": used,
            "free_hours": SLOT_COLUMNS - used,
            "max_available_duration": get_max_available_duration(placements),
            "is_legacy_layout": is_legacy_layout(tasks),
            "is_blocked": self.is_blocked(slot_key)
        }

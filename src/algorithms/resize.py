"""
リサイズエンジン

スロット内のタスクの左端または右端をドラッグして幅を変更します。
ポインタ移動中はプレビューのみを返し、リリース時に一度だけ
最新のスロット情報に対して再配置エンジンを実行します。
"""

import logging
from typing import Callable, List, Optional, Sequence

from models.slot_models import (
    SLOT_COLUMNS, Placement, RearrangementResult, ResizeEdge, ResizeProposal,
    sort_by_column
)
from .rearrangement import rearrange

logger = logging.getLogger(__name__)


def delta_columns_from_pixels(delta_x: float, slot_width: float) -> int:
    """ドラッグ量（ピクセル）をカラム数に変換（四捨五入）"""
    if slot_width <= 0:
        raise ValueError(f"スロット幅は正の値である必要があります: {slot_width}")
    column_width = slot_width / SLOT_COLUMNS
    ratio = delta_x / column_width
    # 0.5 は絶対値方向へ丸める
    if ratio >= 0:
        return int(ratio + 0.5)
    return -int(-ratio + 0.5)


def propose_resize(placement: Placement, edge: ResizeEdge, delta_columns: int) -> ResizeProposal:
    """
    リサイズ後の幅と開始カラムを提案（衝突は未解決）

    左端: 右へ動かすと縮小して開始カラムが増え、左へ動かすと拡大する。
    右端: 幅のみ変化する。いずれも境界内にクランプする。
    """
    if isinstance(delta_columns, bool) or not isinstance(delta_columns, int):
        raise TypeError(f"delta_columnsは整数である必要があります: {delta_columns!r}")
    edge = ResizeEdge(edge)

    if edge is ResizeEdge.LEFT:
        column_end = placement.column_end
        column_start = max(0, min(column_end - 1, placement.column_start + delta_columns))
        duration = column_end - column_start
    else:
        column_start = placement.column_start
        column_end = max(column_start + 1, min(SLOT_COLUMNS, placement.column_end + delta_columns))
        duration = column_end - column_start

    return ResizeProposal(
        placement_id=placement.placement_id,
        duration_columns=duration,
        column_start=column_start
    )


def commit_resize(slot_placements: Sequence[Placement], proposal: ResizeProposal) -> RearrangementResult:
    """
    リサイズ提案を確定し、兄弟タスクとの衝突を再配置エンジンで解決

    リサイズしたタスクの位置は提案のまま固定し、元の開始カラムより左のタスクは
    左へ、それ以外は右へ圧縮する。配置不可の場合、arrangement は元のスロットのまま
    （タスクは元の幅に戻る）。
    """
    resized = proposal.to_placement()
    original = next((p for p in slot_placements if p.placement_id == proposal.placement_id), resized)
    result = rearrange(slot_placements, resized, proposal.column_start,
                       split_column=original.column_start, fixed_start=True)
    if not result.can_place:
        logger.info("リサイズを破棄しました: id=%s 理由=%s", proposal.placement_id, result.reason)
    return result


class ResizeSession:
    """ポインタ操作中のリサイズを管理するクラス"""

    def __init__(self, placement: Placement, edge: ResizeEdge):
        """
        初期化

        Args:
            placement: リサイズ開始時のタスク配置（プレビュー計算専用）
            edge: ドラッグしている辺
        """
        self.original = placement
        self.edge = ResizeEdge(edge)
        self.preview: ResizeProposal = propose_resize(placement, self.edge, 0)
        self._closed = False

    @property
    def is_active(self) -> bool:
        """セッションが継続中か"""
        return not self._closed

    def _ensure_active(self) -> None:
        if self._closed:
            raise RuntimeError("リサイズセッションは既に終了しています")

    def update(self, delta_columns: int) -> ResizeProposal:
        """ポインタ移動ごとのプレビューを更新"""
        self._ensure_active()
        self.preview = propose_resize(self.original, self.edge, delta_columns)
        return self.preview

    def release(self, fetch_slot: Callable[[], List[Placement]]) -> RearrangementResult:
        """
        ポインタリリース時に確定

        開始時に保持したスロット情報は使わず、fetch_slot で最新の配置を取得してから
        再配置エンジンを実行する。
        """
        self._ensure_active()
        self._closed = True

        current = list(fetch_slot())
        if not any(p.placement_id == self.original.placement_id for p in current):
            logger.warning("リサイズ対象がスロットに存在しません: id=%s", self.original.placement_id)
            return RearrangementResult(
                can_place=False,
                arrangement=sort_by_column(current),
                moved=[],
                reason="リサイズ対象のタスクがスロットに存在しません"
            )
        return commit_resize(current, self.preview)

    def cancel(self) -> Optional[ResizeProposal]:
        """リサイズを中止し、破棄したプレビューを返す"""
        self._ensure_active()
        self._closed = True
        discarded = self.preview
        logger.debug("リサイズをキャンセルしました: id=%s", self.original.placement_id)
        return discarded

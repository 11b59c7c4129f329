"""
スロットレイアウト用のデータ構造とクラス定義

このモジュールは、従業員ごと・日付ごとの午前/午後スロットに
タスクを4つの時間カラムで配置するための基盤を提供します。
"""

from typing import List, Optional, Sequence, Union
from dataclasses import dataclass
from datetime import date
from enum import Enum

SLOT_COLUMNS = 4        # スロットの総カラム数（0〜3）
MAX_TASKS_PER_SLOT = 4  # 1スロットあたりの最大タスク数


class Period(Enum):
    """スロット期間の定義"""
    MORNING = "morning"      # 午前
    AFTERNOON = "afternoon"  # 午後


class ResizeEdge(Enum):
    """リサイズ対象の辺"""
    LEFT = "left"
    RIGHT = "right"


def _require_int(name: str, value) -> int:
    """整数であることを確認（boolは不可）"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name}は整数である必要があります: {value!r}")
    return value


def validate_duration(duration_columns: int) -> int:
    """カラム幅が1〜4の範囲にあるか検証"""
    _require_int("duration_columns", duration_columns)
    if not 1 <= duration_columns <= SLOT_COLUMNS:
        raise ValueError(f"duration_columnsは1〜{SLOT_COLUMNS}である必要があります: {duration_columns}")
    return duration_columns


def validate_column(column: int, name: str = "column") -> int:
    """カラム位置が0〜3の範囲にあるか検証"""
    _require_int(name, column)
    if not 0 <= column < SLOT_COLUMNS:
        raise ValueError(f"{name}は0〜{SLOT_COLUMNS - 1}である必要があります: {column}")
    return column


@dataclass(frozen=True)
class SlotKey:
    """スロットの識別子（従業員・日付・期間）"""
    employee_id: str
    date: date
    period: Period

    def __str__(self) -> str:
        return f"{self.employee_id}/{self.date.isoformat()}/{self.period.value}"


@dataclass
class Task:
    """呼び出し側のタスク情報

    hours / column_start が None のタスクはカラム情報を持たない旧形式データ。
    """
    task_id: int
    hours: Optional[int] = None
    column_start: Optional[int] = None
    title: str = ""

    @property
    def has_explicit_columns(self) -> bool:
        """カラム情報が明示的に設定されているか"""
        return self.hours is not None and self.column_start is not None


@dataclass(frozen=True)
class Placement:
    """スロット内でタスクが占有するカラム範囲"""
    placement_id: int
    duration_columns: int
    column_start: int

    def __post_init__(self):
        """配置作成後の検証"""
        validate_duration(self.duration_columns)
        _require_int("column_start", self.column_start)
        if not 0 <= self.column_start <= SLOT_COLUMNS - self.duration_columns:
            raise ValueError(
                f"column_startは0〜{SLOT_COLUMNS - self.duration_columns}である必要があります: "
                f"{self.column_start} (id={self.placement_id})"
            )

    @property
    def column_end(self) -> int:
        """終了カラム（排他的）"""
        return self.column_start + self.duration_columns

    @property
    def columns(self) -> range:
        """占有しているカラムの範囲"""
        return range(self.column_start, self.column_end)

    def overlaps_with(self, other: 'Placement') -> bool:
        """他の配置と重複するかチェック"""
        return self.column_start < other.column_end and other.column_start < self.column_end

    def moved_to(self, column_start: int) -> 'Placement':
        """開始カラムのみ変更した配置を返す"""
        return Placement(self.placement_id, self.duration_columns, column_start)

    def to_task(self, title: str = "") -> Task:
        """Task形式に変換"""
        return Task(task_id=self.placement_id, hours=self.duration_columns,
                    column_start=self.column_start, title=title)


@dataclass(frozen=True)
class PlacementDelta:
    """再配置で開始カラムが変わった配置"""
    placement_id: int
    old_column_start: int
    new_column_start: int
    duration_columns: int

    @property
    def shift(self) -> int:
        """移動量（負: 左, 正: 右）"""
        return self.new_column_start - self.old_column_start


@dataclass(frozen=True)
class PlacementUpdate:
    """永続化シンクに渡す更新情報"""
    task_id: int
    column_start: int
    duration_columns: int
    slot_key: Optional[SlotKey] = None  # スロット移動時のみ設定


@dataclass
class RearrangementResult:
    """再配置の結果"""
    can_place: bool
    arrangement: List[Placement]
    moved: List[PlacementDelta]
    placement: Optional[Placement] = None  # 投入タスクの最終配置
    reason: Optional[str] = None           # 拒否理由

    def updates(self, slot_key: Optional[SlotKey] = None) -> List[PlacementUpdate]:
        """移動した配置の永続化用更新リストを作成"""
        durations = {p.placement_id: p.duration_columns for p in self.arrangement}
        return [
            PlacementUpdate(
                task_id=delta.placement_id,
                column_start=delta.new_column_start,
                duration_columns=durations.get(delta.placement_id, delta.duration_columns),
                slot_key=slot_key
            )
            for delta in self.moved
        ]


@dataclass(frozen=True)
class ResizeProposal:
    """リサイズ提案（衝突未解決のプレビュー）"""
    placement_id: int
    duration_columns: int
    column_start: int

    def to_placement(self) -> Placement:
        """Placementに変換"""
        return Placement(self.placement_id, self.duration_columns, self.column_start)


SlotItem = Union[Task, Placement]


def item_id(item: SlotItem) -> int:
    """TaskまたはPlacementのIDを取得"""
    if isinstance(item, Placement):
        return item.placement_id
    return item.task_id


def item_columns(item: SlotItem):
    """TaskまたはPlacementの(幅, 開始カラム)を取得"""
    if isinstance(item, Placement):
        return item.duration_columns, item.column_start
    return item.hours, item.column_start


def validate_placements(placements: Sequence[Placement]) -> List[str]:
    """スロット内配置の不変条件を検証し、違反メッセージのリストを返す"""
    errors = []

    if len(placements) > MAX_TASKS_PER_SLOT:
        errors.append(f"タスク数超過: {len(placements)} > {MAX_TASKS_PER_SLOT}")

    total = sum(p.duration_columns for p in placements)
    if total > SLOT_COLUMNS:
        errors.append(f"容量超過: 合計{total}カラム > {SLOT_COLUMNS}")

    ids = set()
    for p in placements:
        if p.placement_id in ids:
            errors.append(f"ID重複: {p.placement_id}")
        ids.add(p.placement_id)
        if p.column_start < 0 or p.column_end > SLOT_COLUMNS:
            errors.append(f"範囲外: {p.placement_id} [{p.column_start}, {p.column_end})")

    ordered = sorted(placements, key=lambda p: p.column_start)
    for left, right in zip(ordered, ordered[1:]):
        if left.overlaps_with(right):
            errors.append(f"重複配置: {left.placement_id} と {right.placement_id}")

    return errors


def is_valid_layout(placements: Sequence[Placement]) -> bool:
    """不変条件をすべて満たすか"""
    return not validate_placements(placements)


def sort_by_column(placements: Sequence[Placement]) -> List[Placement]:
    """開始カラム順（同値はID順）に並べ替え"""
    return sorted(placements, key=lambda p: (p.column_start, p.placement_id))

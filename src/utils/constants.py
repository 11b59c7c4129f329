"""
定数定義モジュール

スロットレイアウトエンジンで使用する定数を定義します。
"""

from models.slot_models import SLOT_COLUMNS, MAX_TASKS_PER_SLOT

# スロット容量設定（1スロット = 4時間カラム）
COLUMN_INDEXES = list(range(SLOT_COLUMNS))
GRID_COLS = [f"c{c}" for c in COLUMN_INDEXES]

# 期間選択肢
PERIOD_CHOICES = ["午前", "午後"]

# デモ用の従業員
DEFAULT_EMPLOYEES = [f"Emp {c}" for c in "ABC"]

# デモ操作の選択肢
OPERATION_CHOICES = [
    "タスク作成",
    "ドロップ（カラム指定）",
    "リサイズ",
    "タスク削除"
]

# 設定のデフォルト値
DEFAULT_SETTINGS = {
    "persist_displaced_siblings": True,
    "create_fallback_to_rearrange": True,
    "default_new_task_hours": 1
}

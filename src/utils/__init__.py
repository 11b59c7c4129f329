"""
ユーティリティパッケージ

このパッケージは、アプリケーション全体で使用される共通機能を提供します。
設定管理、ログ機能、スロット操作の実行、DataFrame変換などのユーティリティが含まれています。
"""

# 設定管理とログ機能
from .config import get_config, reload_config, AppConfig
from .logger import setup_logging, get_logger, log_extra_fields

from .slot_converter import (
    placements_to_dataframe,
    moved_to_dataframe,
    slot_occupancy_grid
)
from .constants import (
    SLOT_COLUMNS,
    MAX_TASKS_PER_SLOT,
    COLUMN_INDEXES,
    GRID_COLS,
    PERIOD_CHOICES,
    DEFAULT_EMPLOYEES,
    OPERATION_CHOICES,
    DEFAULT_SETTINGS
)
from .slot_operations import SlotOperationExecutor, diff_updates

__all__ = [
    # 設定管理とログ機能
    'get_config',
    'reload_config',
    'AppConfig',
    'setup_logging',
    'get_logger',
    'log_extra_fields',

    # DataFrame変換機能
    'placements_to_dataframe',
    'moved_to_dataframe',
    'slot_occupancy_grid',

    # 定数
    'SLOT_COLUMNS',
    'MAX_TASKS_PER_SLOT',
    'COLUMN_INDEXES',
    'GRID_COLS',
    'PERIOD_CHOICES',
    'DEFAULT_EMPLOYEES',
    'OPERATION_CHOICES',
    'DEFAULT_SETTINGS',

    # スロット操作
    'SlotOperationExecutor',
    'diff_updates'
]

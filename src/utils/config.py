"""
設定管理モジュール

このモジュールは、アプリケーション全体で使用される設定値を管理します。
環境変数から値を読み込み、適切なデフォルト値を提供します。
direnvとの連携を考慮し、開発環境での設定管理を簡素化します。

主な機能:
- 環境変数からの設定値読み込み
- デフォルト値の提供
- 設定値の型変換
- 設定値の検証
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass
from pathlib import Path

from models.slot_models import SLOT_COLUMNS


@dataclass
class AppConfig:
    """アプリケーション設定クラス"""

    # アプリケーション基本設定
    app_name: str
    app_version: str
    debug: bool
    log_level: str

    # Streamlit設定
    streamlit_server_port: int
    streamlit_server_address: str

    # スロット操作設定
    persist_displaced_siblings: bool
    create_fallback_to_rearrange: bool
    default_new_task_hours: int

    # ログ設定
    log_file: Path
    log_max_size: str
    log_backup_count: int


class ConfigManager:
    """設定管理クラス"""

    def __init__(self):
        """設定マネージャーを初期化"""
        self._config: Optional[AppConfig] = None
        self._logger = logging.getLogger(__name__)

    def load_config(self) -> AppConfig:
        """環境変数から設定を読み込み、AppConfigオブジェクトを返す"""
        if self._config is None:
            self._config = self._create_config()
        return self._config

    def _create_config(self) -> AppConfig:
        """環境変数から設定オブジェクトを作成"""

        # アプリケーション基本設定
        app_name = os.getenv('APP_NAME', 'Slot Layout Planner')
        app_version = os.getenv('APP_VERSION', '0.1.0')
        debug = self._parse_bool(os.getenv('DEBUG', 'false'))
        log_level = os.getenv('LOG_LEVEL', 'INFO')

        # Streamlit設定
        streamlit_server_port = self._parse_int('STREAMLIT_SERVER_PORT', '8501')
        streamlit_server_address = os.getenv('STREAMLIT_SERVER_ADDRESS', '0.0.0.0')

        # スロット操作設定
        persist_displaced_siblings = self._parse_bool(os.getenv('PERSIST_DISPLACED_SIBLINGS', 'true'))
        create_fallback_to_rearrange = self._parse_bool(os.getenv('CREATE_FALLBACK_TO_REARRANGE', 'true'))
        default_new_task_hours = self._parse_int('DEFAULT_NEW_TASK_HOURS', '1')

        # ログ設定
        log_file = Path(os.getenv('LOG_FILE', './logs/app.log'))
        log_max_size = os.getenv('LOG_MAX_SIZE', '10MB')
        log_backup_count = self._parse_int('LOG_BACKUP_COUNT', '5')

        # 設定オブジェクトを作成
        config = AppConfig(
            app_name=app_name,
            app_version=app_version,
            debug=debug,
            log_level=log_level,
            streamlit_server_port=streamlit_server_port,
            streamlit_server_address=streamlit_server_address,
            persist_displaced_siblings=persist_displaced_siblings,
            create_fallback_to_rearrange=create_fallback_to_rearrange,
            default_new_task_hours=default_new_task_hours,
            log_file=log_file,
            log_max_size=log_max_size,
            log_backup_count=log_backup_count
        )

        # 設定の検証
        self._validate_config(config)

        # ログ出力
        self._log_config_summary(config)

        return config

    def _parse_bool(self, value: str) -> bool:
        """文字列をブール値に変換"""
        return value.lower() in ('true', '1', 'yes', 'on')

    def _parse_int(self, name: str, default: str) -> int:
        """環境変数を整数に変換"""
        value = os.getenv(name, default)
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{name}は整数である必要があります: {value!r}") from None

    def _validate_config(self, config: AppConfig) -> None:
        """設定値の検証"""
        errors = []

        if config.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"LOG_LEVELが不正です: {config.log_level}")

        if not (1 <= config.streamlit_server_port <= 65535):
            errors.append("STREAMLIT_SERVER_PORTは1〜65535である必要があります")

        if not (1 <= config.default_new_task_hours <= SLOT_COLUMNS):
            errors.append(f"DEFAULT_NEW_TASK_HOURSは1〜{SLOT_COLUMNS}である必要があります")

        if config.log_backup_count < 0:
            errors.append("LOG_BACKUP_COUNTは0以上の値である必要があります")

        # エラーがあれば例外を発生
        if errors:
            error_msg = "設定エラー:\n" + "\n".join(f"- {error}" for error in errors)
            raise ValueError(error_msg)

    def _log_config_summary(self, config: AppConfig) -> None:
        """設定の要約をログに出力"""
        self._logger.info("アプリケーション設定を読み込みました:")
        self._logger.info(f"  アプリ名: {config.app_name} v{config.app_version}")
        self._logger.info(f"  デバッグモード: {config.debug}")
        self._logger.info(f"  ログレベル: {config.log_level}")
        self._logger.info(f"  Streamlit: {config.streamlit_server_address}:{config.streamlit_server_port}")
        self._logger.info(f"  移動タスクの永続化: {config.persist_displaced_siblings}")
        self._logger.info(f"  ログファイル: {config.log_file}")


# グローバル設定インスタンス
config_manager = ConfigManager()


def get_config() -> AppConfig:
    """設定オブジェクトを取得"""
    return config_manager.load_config()


def reload_config() -> AppConfig:
    """設定を再読み込み"""
    config_manager._config = None
    return config_manager.load_config()

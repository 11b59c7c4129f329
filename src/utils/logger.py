"""
ログ管理モジュール

このモジュールは、アプリケーション全体で使用されるログ機能を提供します。
設定と連携し、コンソールとローテーションするログファイルへ出力します。

主な機能:
- ログレベルの設定
- ログファイルへの出力（サイズによるローテーション）
- デバッグ時のカラー出力
- 構造化ログ出力
"""

import logging
import logging.handlers
import sys
from typing import Optional
from .config import get_config


class ColoredFormatter(logging.Formatter):
    """カラー付きログフォーマッター"""

    # ANSIカラーコード
    COLORS = {
        'DEBUG': '\033[36m',    # シアン
        'INFO': '\033[32m',     # 緑
        'WARNING': '\033[33m',  # 黄
        'ERROR': '\033[31m',    # 赤
        'CRITICAL': '\033[35m', # マゼンタ
        'RESET': '\033[0m'      # リセット
    }

    def format(self, record):
        """ログレコードをフォーマット"""
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # ファイルハンドラー側に色コードを残さない
            record.levelname = levelname


class StructuredFormatter(logging.Formatter):
    """構造化ログフォーマッター"""

    def format(self, record):
        """構造化されたログメッセージをフォーマット"""
        log_entry = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage()
        }

        # 例外情報があれば追加
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return str(log_entry)


def parse_size(size_str: str) -> int:
    """サイズ文字列（例: 10MB）をバイト数に変換"""
    size_str = size_str.strip().upper()
    units = {'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}
    for suffix, factor in units.items():
        if size_str.endswith(suffix):
            return int(size_str[:-2]) * factor
    return int(size_str)


class LoggerManager:
    """ログマネージャークラス"""

    def __init__(self):
        """ログマネージャーを初期化"""
        self._initialized = False

    def setup_logging(self, log_level: Optional[str] = None) -> None:
        """ログ設定を初期化"""
        if self._initialized:
            return

        config = get_config()

        # 設定からログレベルを取得
        if log_level is None:
            log_level = config.log_level
        numeric_level = getattr(logging, log_level.upper(), logging.INFO)

        # ルートロガーを設定
        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        # 既存のハンドラーをクリア
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        self._setup_console_handler(root_logger, numeric_level, config.debug)
        self._setup_file_handler(root_logger, numeric_level, config)
        self._adjust_library_log_levels(config.debug)

        self._initialized = True
        logging.info("ログシステムを初期化しました")

    def _setup_console_handler(self, logger: logging.Logger, level: int, debug: bool) -> None:
        """コンソールハンドラーを設定"""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        # デバッグモードの場合はカラー付きフォーマッターを使用
        formatter_class = ColoredFormatter if debug else logging.Formatter
        console_handler.setFormatter(formatter_class(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(console_handler)

    def _setup_file_handler(self, logger: logging.Logger, level: int, config) -> None:
        """ファイルハンドラーを設定"""
        log_file = config.log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=parse_size(config.log_max_size),
            backupCount=config.log_backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    def _adjust_library_log_levels(self, debug: bool) -> None:
        """外部ライブラリのログレベルを調整"""
        logging.getLogger('streamlit').setLevel(logging.INFO)
        logging.getLogger('watchdog').setLevel(logging.WARNING)

        # デバッグモードでない場合は、エンジンの詳細ログを抑制
        if not debug:
            logging.getLogger('algorithms').setLevel(logging.INFO)
            logging.getLogger('urllib3').setLevel(logging.WARNING)


# グローバルログマネージャーインスタンス
logger_manager = LoggerManager()


def setup_logging(log_level: Optional[str] = None) -> None:
    """ログ設定を初期化"""
    logger_manager.setup_logging(log_level)


def get_logger(name: str) -> logging.Logger:
    """指定された名前のロガーを取得"""
    return logging.getLogger(name)


def log_extra_fields(logger: logging.Logger, level: int, message: str, **kwargs) -> None:
    """追加フィールド付きでログを出力"""
    structured_message = f"{message} | {kwargs}"
    logger.log(level, structured_message)

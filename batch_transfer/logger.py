"""
ロギングシステム

batch-transferのロギング機能を提供します。
標準出力とファイル出力の両方をサポートし、進捗表示とエラーログを管理します。
各モジュールは logging.getLogger(__name__) で出力し、ここで設定した
'batch_transfer' ロガーのハンドラーに集約されます。
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from .models import RunReport, Summary, TaskResult, TaskSpec

LOGGER_NAME = 'batch_transfer'


@dataclass
class LogConfig:
    """ログ設定"""
    console_level: int = logging.INFO
    file_level: int = logging.DEBUG
    log_file: Optional[Path] = None
    verbose: bool = False


class ProgressLogger:
    """進捗表示とロギングを管理するクラス"""

    def __init__(self, config: LogConfig):
        self.config = config
        self.logger = self._setup_logger()
        self._start_time: Optional[datetime] = None

    def _setup_logger(self) -> logging.Logger:
        """ロガーのセットアップ"""
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.DEBUG)

        # 既存のハンドラーをクリア
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        # フォーマッターを作成
        console_formatter = logging.Formatter(
            '%(message)s'
        )
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # コンソールハンドラー
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.config.console_level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        # ファイルハンドラー（指定されている場合）
        if self.config.log_file:
            # ログディレクトリを作成
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.config.log_file, encoding='utf-8')
            file_handler.setLevel(self.config.file_level)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        return logger

    def log_run_start(self, script_name: str, task_count: int, max_concurrency: int):
        """処理開始時のサマリー表示"""
        self._start_time = datetime.now()

        self.logger.info("=" * 60)
        self.logger.info(f"{script_name} - 処理開始")
        self.logger.info("=" * 60)
        self.logger.info(f"開始時刻: {self._start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info(f"タスク数: {task_count} (同時実行数: {max_concurrency})")
        self.logger.info("")

    def log_task_start(self, index: int, total: int, spec: TaskSpec):
        """タスク開始のログ"""
        self.logger.info(f"タスク開始 [{index}/{total}]: {spec.describe()}")
        if self.config.verbose:
            self.logger.info(f"  - パターン: {spec.match_pattern}")
            if spec.recurse:
                self.logger.info("  - サブディレクトリも含めて検索します")
            if spec.max_age_days:
                self.logger.info(f"  - 作成日: 直近{spec.max_age_days}日以内")

    def log_task_complete(self, index: int, total: int, result: TaskResult):
        """タスク完了のログ"""
        self.logger.info(
            f"タスク完了 [{index}/{total}]: 処理={len(result.outcomes)}個, "
            f"処理エラー={result.action_errors}個, "
            f"システムエラー={len(result.system_errors)}件")

    def log_run_complete(self, report: RunReport, summary: Summary):
        """処理完了時のサマリー表示"""
        end_time = datetime.now()
        total_time = (end_time - self._start_time).total_seconds() if self._start_time else report.duration

        self.logger.info("=" * 60)
        self.logger.info("処理完了サマリー")
        self.logger.info("=" * 60)
        self.logger.info(f"終了時刻: {end_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info(f"総処理時間: {total_time:.2f}秒")
        self.logger.info("")
        self.logger.info("処理結果:")
        self.logger.info(f"  - ファイル処理数: {summary.total}")
        self.logger.info(f"  - 処理エラー: {summary.action_errors}")
        self.logger.info(f"  - システムエラー: {summary.system_error_count}")

        if report.system_errors:
            self.logger.info("")
            self.logger.info(f"システムエラー詳細 ({len(report.system_errors)}件):")
            for error in report.system_errors:
                self.logger.error(f"  - {error.message}")

        self.logger.info("=" * 60)

    def log_error(self, file_path: Path, error_message: str, exception: Optional[Exception] = None):
        """エラーログの詳細記録"""
        error_msg = f"エラー - {file_path}: {error_message}"

        if exception:
            error_msg += f" ({type(exception).__name__}: {str(exception)})"

        self.logger.error(error_msg)

        # 詳細なスタックトレースはファイルログのみに記録
        if exception and self.config.log_file:
            self.logger.debug("スタックトレース:", exc_info=exception)

    def log_warning(self, message: str):
        """警告メッセージのログ"""
        self.logger.warning(f"警告: {message}")

    def log_info(self, message: str):
        """情報メッセージのログ"""
        self.logger.info(message)

    def log_debug(self, message: str):
        """デバッグメッセージのログ"""
        self.logger.debug(message)


def create_default_logger(verbose: bool = False, log_file: Optional[Path] = None) -> ProgressLogger:
    """デフォルトのロガーを作成"""
    config = LogConfig(
        console_level=logging.DEBUG if verbose else logging.INFO,
        file_level=logging.DEBUG,
        log_file=log_file,
        verbose=verbose
    )
    return ProgressLogger(config)


def get_default_log_file() -> Path:
    """デフォルトのログファイルパスを取得"""
    log_dir = Path.home() / '.batch_transfer' / 'logs'
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return log_dir / f'batch_transfer_{timestamp}.log'

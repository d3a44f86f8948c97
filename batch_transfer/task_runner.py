"""
タスク実行モジュール

1つのタスク（ファイル選択 → ファイルごとのコピー/移動）を実行し、
タスク専用の結果バッファを返します。
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .file_operations import transfer_file
from .file_selector import FileSelector
from .models import (
    Action, ActionOutcome, FileCandidate, InfoEvent, SystemErrorRecord,
    TaskResult, TaskSpec,
)
from .path_validator import PathValidator
from .retry import RetryingOperation

FileAction = Callable[[Action, Path, Path, bool], None]

# 処理対象ファイル数のイベントコード
EVENT_FILES_SELECTED = 10


class TaskRunner:
    """タスク単位の処理を担当するクラス"""

    def __init__(self,
                 file_selector: Optional[FileSelector] = None,
                 retrying_operation: Optional[RetryingOperation] = None,
                 file_action: FileAction = transfer_file):
        """
        TaskRunnerを初期化

        Args:
            file_selector: 処理対象ファイルの選択
            retrying_operation: ファイル操作の再試行ポリシー
            file_action: コピー/移動を行う関数
        """
        self.file_selector = file_selector or FileSelector()
        self.retrying_operation = retrying_operation or RetryingOperation()
        self.file_action = file_action
        self.logger = logging.getLogger(__name__)

    def run_task(self, spec: TaskSpec) -> TaskResult:
        """
        タスクを実行

        ファイル単位の失敗は ActionOutcome に記録して次のファイルへ進みます。
        フォルダ不在など、ファイル単位以外の失敗はシステムエラーとして記録し、
        タスクを終了します。

        Args:
            spec: タスク定義

        Returns:
            タスクの結果バッファ
        """
        result = TaskResult(spec=spec)

        missing = [folder for folder in (spec.source_folder, spec.destination_folder)
                   if not PathValidator.is_directory(folder)]
        if missing:
            folders = ', '.join(f"'{folder}'" for folder in missing)
            self._add_system_error(
                result, f"タスク {spec.describe()} を中止: フォルダが見つかりません {folders}")
            return result

        try:
            candidates = self.file_selector.select(
                spec.source_folder, spec.match_pattern, spec.recurse, spec.max_age_days)

            message = (f"'{spec.source_folder}' で処理対象ファイルを"
                       f"{len(candidates)}個発見しました")
            self.logger.info(message)
            result.events.append(InfoEvent(
                timestamp=datetime.now(), message=message, code=EVENT_FILES_SELECTED))

            for candidate in candidates:
                result.outcomes.append(self._process_file(spec, candidate))

        except Exception as e:
            self._add_system_error(result, f"タスク {spec.describe()} が失敗しました: {e}")

        return result

    def _process_file(self, spec: TaskSpec, candidate: FileCandidate) -> ActionOutcome:
        """
        単一ファイルを処理

        Args:
            spec: タスク定義
            candidate: 処理対象ファイル

        Returns:
            ファイルの処理結果
        """
        destination_path = spec.destination_folder / candidate.name

        error = None
        try:
            self.retrying_operation.run(lambda: self.file_action(
                spec.action, candidate.full_path, destination_path, spec.overwrite))
            self.logger.debug(f"{spec.action.value} 完了: {candidate.full_path}")
        except Exception as e:
            error = str(e)
            self.logger.error(f"エラー - {candidate.full_path}: {error}")

        return ActionOutcome(
            timestamp=datetime.now(),
            action=spec.action,
            source_path=candidate.full_path,
            destination_path=destination_path,
            overwrite=spec.overwrite,
            success=error is None,
            error=error
        )

    def _add_system_error(self, result: TaskResult, message: str) -> None:
        self.logger.error(message)
        result.system_errors.append(
            SystemErrorRecord(timestamp=datetime.now(), message=message))

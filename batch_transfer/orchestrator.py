"""
オーケストレーターモジュール

設定されたタスクを順次または上限付きスレッドプールで実行し、
各タスクの結果を設定順に統合して RunReport を作成します。
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .models import RunReport, SystemErrorRecord, TaskResult, TaskSpec
from .task_runner import TaskRunner


class Orchestrator:
    """全タスクの実行と結果の統合を担当するクラス"""

    def __init__(self, task_runner: Optional[TaskRunner] = None, progress_logger=None):
        """
        Orchestratorを初期化

        Args:
            task_runner: タスク実行
            progress_logger: 進捗表示用ロガー
        """
        self.task_runner = task_runner or TaskRunner()
        self.progress_logger = progress_logger
        self.logger = logging.getLogger(__name__)

    def run_all(self, specs: Sequence[TaskSpec], max_concurrency: int = 1) -> RunReport:
        """
        すべてのタスクを実行

        Args:
            specs: タスク定義のリスト（設定順）
            max_concurrency: 同時実行数の上限（1以下は順次実行）

        Returns:
            設定順に統合された実行レポート
        """
        start_time = datetime.now()
        started = time.time()

        if max_concurrency <= 1 or len(specs) <= 1:
            results = self._run_sequential(specs)
        else:
            results = self._run_parallel(specs, min(max_concurrency, len(specs)))

        return RunReport(
            start_time=start_time,
            duration=time.time() - started,
            task_results=tuple(results)
        )

    def _run_sequential(self, specs: Sequence[TaskSpec]) -> List[TaskResult]:
        results = []
        for i, spec in enumerate(specs):
            try:
                results.append(self._run_one(i, len(specs), spec))
            except Exception as e:
                results.append(self._crashed_task(spec, e))
        return results

    def _run_parallel(self, specs: Sequence[TaskSpec], max_workers: int) -> List[TaskResult]:
        """
        タスクを並列実行

        各タスクは自身のバッファのみに書き込み、統合は全タスク完了後に
        設定順で行います。

        Args:
            specs: タスク定義のリスト
            max_workers: 最大ワーカー数

        Returns:
            設定順のタスク結果
        """
        self.logger.debug(f"並列実行: ワーカー数={max_workers}")
        results: Dict[int, TaskResult] = {}

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(self._run_one, i, len(specs), spec): i
                for i, spec in enumerate(specs)
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    results[index] = self._crashed_task(specs[index], e)

        return [results[i] for i in range(len(specs))]

    def _run_one(self, index: int, total: int, spec: TaskSpec) -> TaskResult:
        if self.progress_logger:
            self.progress_logger.log_task_start(index + 1, total, spec)

        result = self.task_runner.run_task(spec)

        if self.progress_logger:
            self.progress_logger.log_task_complete(index + 1, total, result)
        return result

    def _crashed_task(self, spec: TaskSpec, error: Exception) -> TaskResult:
        """ワーカー内で捕捉されなかった例外をタスクのシステムエラーに変換"""
        message = f"タスク {spec.describe()} が予期せず終了しました: {error}"
        self.logger.error(message)
        return TaskResult(
            spec=spec,
            system_errors=[SystemErrorRecord(timestamp=datetime.now(), message=message)]
        )

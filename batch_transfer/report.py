"""
レポート集計モジュール

実行レポートから集計値を算出し、出力するログファイルと
削除対象の古いログファイルを決定します。いずれも入出力を伴いません。
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional

from .models import ArtifactKind, ArtifactRequest, LogPolicy, RunReport, Summary

SYSTEM_ERRORS_NAME = 'System errors'
ALL_ACTIONS_NAME = 'All actions'
ACTION_ERRORS_NAME = 'Action errors'


class ReportAggregator:
    """集計とログファイル出力ポリシーの評価を担当するクラス"""

    @staticmethod
    def summarize(report: RunReport) -> Summary:
        """
        集計値を算出

        Args:
            report: 実行レポート

        Returns:
            合計処理数・処理エラー数・システムエラー数
        """
        return Summary(
            total=report.total_actions,
            action_errors=report.action_errors,
            system_error_count=report.system_error_count
        )

    @staticmethod
    def decide_artifacts(report: RunReport, policy: LogPolicy) -> List[ArtifactRequest]:
        """
        出力するログファイルを決定

        write_all_actions と write_only_action_errors の両方が有効な場合は
        write_all_actions が優先されます。

        Args:
            report: 実行レポート
            policy: ログファイル出力ポリシー

        Returns:
            ログファイル出力要求のリスト
        """
        requests = []
        summary = ReportAggregator.summarize(report)

        if policy.write_system_errors and summary.system_error_count > 0:
            requests.append(ArtifactRequest(
                kind=ArtifactKind.SYSTEM_ERRORS,
                name=SYSTEM_ERRORS_NAME,
                records=tuple(report.system_errors)
            ))

        if policy.write_all_actions and summary.total > 0:
            name = ALL_ACTIONS_NAME
            if summary.action_errors > 0:
                name += ' with errors'
            requests.append(ArtifactRequest(
                kind=ArtifactKind.ALL_ACTIONS,
                name=name,
                records=tuple(report.outcomes)
            ))
        elif policy.write_only_action_errors and summary.action_errors > 0:
            requests.append(ArtifactRequest(
                kind=ArtifactKind.ACTION_ERRORS,
                name=ACTION_ERRORS_NAME,
                records=tuple(o for o in report.outcomes if not o.success)
            ))

        return requests

    @staticmethod
    def log_cutoff_date(retention_days: int, now: Optional[datetime] = None) -> Optional[datetime]:
        """保持期限の日時（0日は削除無効でNone）"""
        if retention_days <= 0:
            return None
        return (now or datetime.now()) - timedelta(days=retention_days)

    @staticmethod
    def select_expired_logs(existing_files: Iterable[Path],
                            cutoff_date: Optional[datetime]) -> List[Path]:
        """
        保持期限を過ぎたログファイルを選択

        Args:
            existing_files: ログフォルダ内のファイル
            cutoff_date: これより前に更新されたファイルが削除対象

        Returns:
            削除対象ファイルのリスト
        """
        if cutoff_date is None:
            return []

        expired = []
        for file_path in existing_files:
            if not file_path.is_file():
                continue
            modified = datetime.fromtimestamp(file_path.stat().st_mtime)
            if modified < cutoff_date:
                expired.append(file_path)
        return expired

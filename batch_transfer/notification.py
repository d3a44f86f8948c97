"""
通知判定モジュール

通知条件を評価して通知の要否を判定し、件名・優先度・本文・添付ファイルから
なる通知内容を作成します。
"""

from html import escape
from pathlib import Path
from typing import Iterable, List, Sequence

from .models import (
    NotificationEnvelope, NotificationTrigger, Priority, RunReport, Summary,
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" + ('' if count == 1 else 's')


class NotificationDecider:
    """通知の要否判定と通知内容の作成を担当するクラス"""

    @staticmethod
    def should_notify(trigger: NotificationTrigger, summary: Summary) -> bool:
        """
        通知条件を評価

        Args:
            trigger: 通知条件
            summary: 集計結果

        Returns:
            通知する場合True
        """
        if trigger is NotificationTrigger.ALWAYS:
            return True
        if trigger is NotificationTrigger.ON_ERROR:
            return summary.has_errors
        if trigger is NotificationTrigger.ON_ERROR_OR_ACTION:
            return summary.has_errors or summary.total > 0
        return False

    @staticmethod
    def build_subject(summary: Summary) -> str:
        """件名を作成（エラーがある場合は先頭にエラー件数）"""
        subject = _plural(summary.total, 'action')
        error_count = summary.action_errors + summary.system_error_count
        if error_count > 0:
            subject = f"{_plural(error_count, 'error')}, {subject}"
        return subject

    @staticmethod
    def build_envelope(summary: Summary, report: RunReport,
                       attachments: Iterable[Path] = (),
                       to: Sequence[str] = (), bcc: Sequence[str] = (),
                       script_name: str = 'batch-transfer') -> NotificationEnvelope:
        """
        通知内容を作成

        Args:
            summary: 集計結果
            report: 実行レポート
            attachments: 添付するログファイル（重複は除外）
            to: 宛先
            bcc: BCC宛先
            script_name: 本文に表示する名前

        Returns:
            通知内容
        """
        unique: List[Path] = []
        for path in attachments:
            if path not in unique:
                unique.append(path)

        return NotificationEnvelope(
            subject=NotificationDecider.build_subject(summary),
            priority=Priority.HIGH if summary.has_errors else Priority.NORMAL,
            body=NotificationDecider._build_body(summary, report, script_name),
            attachments=tuple(unique),
            to=tuple(to),
            bcc=tuple(bcc)
        )

    @staticmethod
    def _build_body(summary: Summary, report: RunReport, script_name: str) -> str:
        """HTML本文を作成"""
        lines = [
            f"<h2>{escape(script_name)}</h2>",
            f"<p>Start time: {report.start_time:%Y-%m-%d %H:%M:%S}"
            f" (duration {report.duration:.1f}s)</p>",
            "<table>",
            f"<tr><th>Actions</th><td>{summary.total}</td></tr>",
            f"<tr><th>Action errors</th><td>{summary.action_errors}</td></tr>",
            f"<tr><th>System errors</th><td>{summary.system_error_count}</td></tr>",
            "</table>",
        ]

        if report.task_results:
            lines.append("<table>")
            lines.append("<tr><th>Action</th><th>Source</th><th>Destination</th>"
                         "<th>Files</th><th>Errors</th></tr>")
            for result in report.task_results:
                spec = result.spec
                errors = result.action_errors + len(result.system_errors)
                lines.append(
                    f"<tr><td>{spec.action.value}</td>"
                    f"<td>{escape(str(spec.source_folder))}</td>"
                    f"<td>{escape(str(spec.destination_folder))}</td>"
                    f"<td>{len(result.outcomes)}</td><td>{errors}</td></tr>")
            lines.append("</table>")

        if report.system_errors:
            lines.append("<p>System errors:</p><ul>")
            for error in report.system_errors:
                lines.append(f"<li>{escape(error.message)}</li>")
            lines.append("</ul>")

        return '\n'.join(lines)

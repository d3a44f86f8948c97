"""
実行パイプライン

タスクの実行、ログファイルの出力と古いログの削除、イベントログ出力、
通知送信までの一連の処理を管理します。
出力先での失敗は実行全体のシステムエラーとして記録し、後続の処理は継続します。
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from .config import RunConfig, load_config
from .event_log import EventLogWriter
from .exceptions import SinkError, ValidationError
from .file_operations import transfer_file
from .log_writer import LogFileWriter
from .logger import ProgressLogger, create_default_logger
from .mailer import SmtpMailer
from .models import EventSeverity, InfoEvent, RunReport, SystemErrorRecord
from .notification import NotificationDecider
from .orchestrator import Orchestrator
from .report import ReportAggregator
from .retry import RetryingOperation
from .task_runner import FileAction, TaskRunner

# イベントログのイベントコード
EVENT_RUN_STARTED = 1
EVENT_RUN_FINISHED = 2
EVENT_SYSTEM_ERROR = 3


class TransferPipeline:
    """実行全体を担当するクラス"""

    def __init__(self, config: RunConfig,
                 progress_logger: Optional[ProgressLogger] = None,
                 file_action: FileAction = transfer_file,
                 log_writer: Optional[LogFileWriter] = None,
                 event_log_writer: Optional[EventLogWriter] = None,
                 mailer=None,
                 sleep: Optional[Callable[[float], None]] = None):
        """
        TransferPipelineを初期化

        Args:
            config: 実行設定
            progress_logger: 進捗表示用ロガー
            file_action: コピー/移動を行う関数
            log_writer: ログファイル出力
            event_log_writer: イベントログ出力
            mailer: 通知送信（send(envelope) を持つオブジェクト）
            sleep: リトライ待機関数（テスト用）
        """
        self.config = config
        self.progress_logger = progress_logger or create_default_logger()
        self.log_writer = log_writer or LogFileWriter()
        self.event_log_writer = event_log_writer or EventLogWriter()
        self.mailer = mailer or SmtpMailer(config.notification.smtp)

        retry_kwargs = {'sleep': sleep} if sleep else {}
        retrying_operation = RetryingOperation(
            attempts=config.retry.attempts,
            delay_seconds=config.retry.delay_seconds,
            **retry_kwargs
        )
        self.orchestrator = Orchestrator(
            TaskRunner(retrying_operation=retrying_operation, file_action=file_action),
            self.progress_logger
        )

    def run(self) -> RunReport:
        """
        実行

        Returns:
            出力先での失敗を含む最終的な実行レポート
        """
        config = self.config
        self.progress_logger.log_run_start(
            config.script_name, len(config.tasks), config.max_concurrent_tasks)
        started = InfoEvent(
            timestamp=datetime.now(),
            message=f"{config.script_name} 開始: {len(config.tasks)}タスク",
            code=EVENT_RUN_STARTED
        )

        report = self.orchestrator.run_all(config.task_specs, config.max_concurrent_tasks)
        report = report.with_opening_events([started])

        sink_errors: List[SystemErrorRecord] = []
        attachments = self._write_log_files(report, sink_errors)
        report = report.with_run_errors(sink_errors)

        summary = ReportAggregator.summarize(report)
        finished = InfoEvent(
            timestamp=datetime.now(),
            message=(f"{config.script_name} 終了: 処理={summary.total}, "
                     f"処理エラー={summary.action_errors}, "
                     f"システムエラー={summary.system_error_count}"),
            severity=EventSeverity.ERROR if summary.has_errors else EventSeverity.INFORMATION,
            code=EVENT_RUN_FINISHED
        )
        report = report.with_closing_events([finished])

        sink_errors = []
        self._write_event_log(report, sink_errors)
        self._send_notification(report, attachments, sink_errors)
        report = report.with_run_errors(sink_errors)

        self.progress_logger.log_run_complete(report, ReportAggregator.summarize(report))
        return report

    def _write_log_files(self, report: RunReport,
                         sink_errors: List[SystemErrorRecord]) -> List[Path]:
        """
        古いログファイルを削除し、ポリシーに従ってログファイルを出力

        Returns:
            出力したログファイルのパス
        """
        settings = self.config.log
        if settings.folder is None:
            return []

        try:
            settings.folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._record_sink_error(sink_errors, f"ログフォルダを作成できません: {settings.folder} - {e}")
            return []

        self._remove_expired_logs(settings.folder, settings.retention_days, sink_errors)

        prefix = f"{report.start_time:%Y_%m_%d_%H%M%S} - {_safe_name(self.config.script_name)}"
        written: List[Path] = []
        for artifact in ReportAggregator.decide_artifacts(report, settings.policy):
            base_path = settings.folder / f"{prefix} - {artifact.name}"
            try:
                written.extend(self.log_writer.write(
                    artifact.records, base_path, settings.formats, settings.append))
            except SinkError as e:
                self._record_sink_error(sink_errors, str(e))

        for path in written:
            self.progress_logger.log_info(f"ログファイル出力: {path}")
        return written

    def _remove_expired_logs(self, folder: Path, retention_days: int,
                             sink_errors: List[SystemErrorRecord]) -> None:
        cutoff = ReportAggregator.log_cutoff_date(retention_days)
        try:
            expired = ReportAggregator.select_expired_logs(folder.rglob('*'), cutoff)
        except OSError as e:
            self._record_sink_error(sink_errors, f"ログフォルダを参照できません: {folder} - {e}")
            return

        for path in expired:
            try:
                path.unlink()
                self.progress_logger.log_debug(f"古いログファイルを削除: {path}")
            except OSError as e:
                self._record_sink_error(sink_errors, f"古いログファイルを削除できません: {path} - {e}")

    def _write_event_log(self, report: RunReport,
                         sink_errors: List[SystemErrorRecord]) -> None:
        settings = self.config.event_log
        if settings is None:
            return

        events = list(report.events)
        events.extend(
            InfoEvent(timestamp=error.timestamp, message=error.message,
                      severity=EventSeverity.ERROR, code=EVENT_SYSTEM_ERROR)
            for error in report.system_errors
        )
        try:
            self.event_log_writer.write(self.config.event_source, settings.log_name, events)
        except SinkError as e:
            self._record_sink_error(sink_errors, str(e))

    def _send_notification(self, report: RunReport, attachments: List[Path],
                           sink_errors: List[SystemErrorRecord]) -> None:
        settings = self.config.notification
        summary = ReportAggregator.summarize(report)
        if not NotificationDecider.should_notify(settings.when, summary):
            self.progress_logger.log_debug("通知条件を満たさないため通知しません")
            return

        envelope = NotificationDecider.build_envelope(
            summary, report, attachments,
            to=settings.to, bcc=settings.bcc, script_name=self.config.script_name)
        try:
            self.mailer.send(envelope)
        except SinkError as e:
            self._record_sink_error(sink_errors, str(e))

    def _record_sink_error(self, sink_errors: List[SystemErrorRecord], message: str) -> None:
        # 出力先の失敗は警告のみとし、再度出力を試みない
        self.progress_logger.log_warning(message)
        sink_errors.append(SystemErrorRecord(timestamp=datetime.now(), message=message))


def _safe_name(name: str) -> str:
    """ファイル名に使えない文字を置き換え"""
    return re.sub(r'[\\/:*?"<>|]', '_', name).strip() or 'batch-transfer'


def run_from_file(config_path: Union[str, Path],
                  progress_logger: Optional[ProgressLogger] = None,
                  **kwargs) -> RunReport:
    """
    設定ファイルを読み込んで実行

    設定が不正な場合はタスクを実行せず、違反ごとのシステムエラーを持つ
    レポートを返します。

    Args:
        config_path: JSON設定ファイルのパス
        progress_logger: 進捗表示用ロガー
        **kwargs: TransferPipeline に渡す追加の引数

    Returns:
        実行レポート
    """
    progress_logger = progress_logger or create_default_logger()
    try:
        config = load_config(config_path)
    except ValidationError as e:
        now = datetime.now()
        for message in e.errors:
            progress_logger.log_error(Path(config_path), message)
        return RunReport(start_time=now).with_run_errors(
            SystemErrorRecord(timestamp=now, message=message) for message in e.errors)

    return TransferPipeline(config, progress_logger=progress_logger, **kwargs).run()

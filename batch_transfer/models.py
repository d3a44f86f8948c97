"""
データモデル定義

batch-transferで使用するデータクラスと列挙型を定義します。
集計値はすべてコレクションから算出し、別管理のカウンターは持ちません。
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple


class Action(Enum):
    """ファイル操作の種類"""
    COPY = 'copy'
    MOVE = 'move'


class EventSeverity(Enum):
    """イベントログの重要度"""
    INFORMATION = 'information'
    WARNING = 'warning'
    ERROR = 'error'


class NotificationTrigger(Enum):
    """通知を送信する条件"""
    NEVER = 'never'
    ALWAYS = 'always'
    ON_ERROR = 'on_error'
    ON_ERROR_OR_ACTION = 'on_error_or_action'


class Priority(Enum):
    """通知の優先度"""
    NORMAL = 'normal'
    HIGH = 'high'


class ArtifactKind(Enum):
    """ログファイルの種類"""
    SYSTEM_ERRORS = 'system_errors'
    ALL_ACTIONS = 'all_actions'
    ACTION_ERRORS = 'action_errors'


@dataclass(frozen=True)
class TaskSpec:
    """タスク定義（読み込み後は不変）"""
    action: Action
    source_folder: Path
    match_pattern: str
    destination_folder: Path
    recurse: bool = False
    max_age_days: int = 0  # 0 = 期間制限なし
    overwrite: bool = False

    def describe(self) -> str:
        """ログ出力用のタスク表記"""
        return (f"{self.action.value} '{self.source_folder}' -> "
                f"'{self.destination_folder}'")


@dataclass
class FileCandidate:
    """処理対象ファイルの情報"""
    full_path: Path
    name: str
    creation_time: datetime


@dataclass(frozen=True)
class ActionOutcome:
    """ファイル単位の処理結果"""
    timestamp: datetime
    action: Action
    source_path: Path
    destination_path: Path
    overwrite: bool
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class SystemErrorRecord:
    """タスクまたは実行全体を妨げたエラー"""
    timestamp: datetime
    message: str


@dataclass(frozen=True)
class InfoEvent:
    """イベントログ向けの情報イベント"""
    timestamp: datetime
    message: str
    severity: EventSeverity = EventSeverity.INFORMATION
    code: int = 1


@dataclass
class TaskResult:
    """1タスク分の結果バッファ（タスクごとに独立）"""
    spec: TaskSpec
    outcomes: List[ActionOutcome] = field(default_factory=list)
    system_errors: List[SystemErrorRecord] = field(default_factory=list)
    events: List[InfoEvent] = field(default_factory=list)

    @property
    def action_errors(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)


@dataclass(frozen=True)
class Summary:
    """集計結果"""
    total: int
    action_errors: int
    system_error_count: int

    @property
    def has_errors(self) -> bool:
        return self.action_errors > 0 or self.system_error_count > 0


@dataclass(frozen=True)
class RunReport:
    """
    実行全体のレポート

    タスクごとのバッファを設定順に保持し、全体のコレクションと件数は
    そこから導出します。作成後は変更せず、追加は新しいレポートを返します。
    """
    start_time: datetime
    duration: float = 0.0
    task_results: Tuple[TaskResult, ...] = ()
    run_system_errors: Tuple[SystemErrorRecord, ...] = ()
    opening_events: Tuple[InfoEvent, ...] = ()
    closing_events: Tuple[InfoEvent, ...] = ()

    @property
    def outcomes(self) -> List[ActionOutcome]:
        return [o for result in self.task_results for o in result.outcomes]

    @property
    def system_errors(self) -> List[SystemErrorRecord]:
        errors = [e for result in self.task_results for e in result.system_errors]
        errors.extend(self.run_system_errors)
        return errors

    @property
    def events(self) -> List[InfoEvent]:
        """開始イベント、タスクのイベント（設定順）、終了イベントの順"""
        events = list(self.opening_events)
        events.extend(e for result in self.task_results for e in result.events)
        events.extend(self.closing_events)
        return events

    @property
    def total_actions(self) -> int:
        return len(self.outcomes)

    @property
    def action_errors(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def system_error_count(self) -> int:
        return len(self.system_errors)

    @property
    def failed(self) -> bool:
        """システムエラーが1件でもあれば失敗"""
        return self.system_error_count > 0

    def with_run_errors(self, errors: Iterable[SystemErrorRecord]) -> 'RunReport':
        return replace(self, run_system_errors=self.run_system_errors + tuple(errors))

    def with_opening_events(self, events: Iterable[InfoEvent]) -> 'RunReport':
        return replace(self, opening_events=self.opening_events + tuple(events))

    def with_closing_events(self, events: Iterable[InfoEvent]) -> 'RunReport':
        return replace(self, closing_events=self.closing_events + tuple(events))


@dataclass(frozen=True)
class LogPolicy:
    """ログファイル出力ポリシー"""
    write_system_errors: bool = True
    write_all_actions: bool = False
    write_only_action_errors: bool = True


@dataclass(frozen=True)
class ArtifactRequest:
    """出力するログファイルの要求"""
    kind: ArtifactKind
    name: str
    records: Tuple[object, ...]


@dataclass(frozen=True)
class NotificationEnvelope:
    """通知内容"""
    subject: str
    priority: Priority
    body: str
    attachments: Tuple[Path, ...] = ()
    to: Tuple[str, ...] = ()
    bcc: Tuple[str, ...] = ()

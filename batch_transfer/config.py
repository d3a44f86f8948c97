"""
設定読み込みモジュール

JSON形式の設定ファイルを読み込み、pydantic モデルで検証して実行設定に変換します。
違反は最初の1件で止めずにすべて報告します。
"""

import json
import re
from pathlib import Path
from typing import Any, List, Literal, Mapping, Optional, Tuple, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic import field_validator, model_validator

from .exceptions import NotFoundError, ValidationError
from .models import Action, LogPolicy, NotificationTrigger, TaskSpec
from .retry import MAX_ATTEMPTS, MAX_DELAY_SECONDS, MIN_ATTEMPTS, MIN_DELAY_SECONDS
from .secret_resolver import resolve_secret

LogFormat = Literal['csv', 'json', 'txt']


def _require_text(value: Any) -> Any:
    """空でない文字列（またはPath）のみ受け付ける"""
    if isinstance(value, Path):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("空でない文字列で指定してください")
    return value


class _Settings(BaseModel):
    model_config = ConfigDict(frozen=True)


class TaskSettings(_Settings):
    """タスク設定"""
    action: Action
    source_folder: Path
    match_pattern: str = '.*'
    destination_folder: Path
    recurse: StrictBool = False
    max_age_days: StrictInt = Field(default=0, ge=0, description="0 = 期間制限なし")
    overwrite: StrictBool = False

    @field_validator('source_folder', 'destination_folder', mode='before')
    @classmethod
    def folder_is_text(cls, v):
        return _require_text(v)

    @field_validator('match_pattern')
    @classmethod
    def pattern_compiles(cls, v):
        """ファイル名パターンは正規表現としてコンパイルできること"""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"正規表現として不正です: {e}") from e
        return v

    @model_validator(mode='after')
    def folders_differ(self):
        if self.source_folder == self.destination_folder:
            raise ValueError(f"コピー元とコピー先が同じフォルダです: {self.source_folder}")
        return self

    def to_spec(self) -> TaskSpec:
        return TaskSpec(
            action=self.action,
            source_folder=self.source_folder,
            match_pattern=self.match_pattern,
            destination_folder=self.destination_folder,
            recurse=self.recurse,
            max_age_days=self.max_age_days,
            overwrite=self.overwrite
        )


class RetrySettings(_Settings):
    """リトライ設定"""
    attempts: StrictInt = Field(default=5, ge=MIN_ATTEMPTS, le=MAX_ATTEMPTS)
    delay_seconds: StrictInt = Field(default=3, ge=MIN_DELAY_SECONDS, le=MAX_DELAY_SECONDS)


class LogSettings(_Settings):
    """ログファイル設定"""
    folder: Optional[Path] = None
    formats: Tuple[LogFormat, ...] = Field(default=('csv',), min_length=1)
    append: StrictBool = False
    write_system_errors: StrictBool = True
    write_all_actions: StrictBool = False
    write_only_action_errors: StrictBool = True
    retention_days: StrictInt = Field(default=0, ge=0, description="0 = 削除しない")

    @field_validator('folder', mode='before')
    @classmethod
    def folder_is_text(cls, v):
        return v if v is None else _require_text(v)

    @property
    def policy(self) -> LogPolicy:
        return LogPolicy(
            write_system_errors=self.write_system_errors,
            write_all_actions=self.write_all_actions,
            write_only_action_errors=self.write_only_action_errors
        )


class EventLogSettings(_Settings):
    """イベントログ設定（source 省略時は script_name）"""
    source: Optional[str] = None
    log_name: str = 'batch_transfer.events'

    @field_validator('source', 'log_name', mode='before')
    @classmethod
    def name_is_text(cls, v):
        return v if v is None else _require_text(v)


class SmtpSettings(_Settings):
    """SMTP設定"""
    host: str = ''
    port: StrictInt = Field(default=25, ge=1, le=65535)
    sender: str = 'batch-transfer@localhost'
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: StrictBool = False

    @model_validator(mode='before')
    @classmethod
    def resolve_secrets(cls, data):
        """ENV:名前 形式の文字列をすべて環境変数の値に置き換え"""
        if not isinstance(data, Mapping):
            return data
        resolved = {}
        for key, value in data.items():
            if isinstance(value, str):
                try:
                    value = resolve_secret(value)
                except NotFoundError as e:
                    raise ValueError(str(e)) from e
            resolved[key] = value
        return resolved


class NotificationSettings(_Settings):
    """通知設定"""
    when: NotificationTrigger = NotificationTrigger.NEVER
    to: Tuple[str, ...] = ()
    bcc: Tuple[str, ...] = ()
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)

    @model_validator(mode='after')
    def recipients_required(self):
        """通知する場合は宛先とSMTPホストが必須"""
        if self.when is NotificationTrigger.NEVER:
            return self
        missing = []
        if not self.to:
            missing.append('notification.to')
        if not self.smtp.host.strip():
            missing.append('notification.smtp.host')
        if missing:
            raise ValueError(f"通知する場合は次を指定してください: {', '.join(missing)}")
        return self


class RunConfig(_Settings):
    """実行設定"""
    tasks: Tuple[TaskSettings, ...] = Field(min_length=1)
    script_name: str = 'batch-transfer'
    max_concurrent_tasks: StrictInt = Field(default=1, ge=1)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    log: LogSettings = Field(default_factory=LogSettings)
    event_log: Optional[EventLogSettings] = None
    notification: NotificationSettings = Field(default_factory=NotificationSettings)

    @field_validator('script_name', mode='before')
    @classmethod
    def script_name_is_text(cls, v):
        return _require_text(v)

    @property
    def task_specs(self) -> List[TaskSpec]:
        return [task.to_spec() for task in self.tasks]

    @property
    def event_source(self) -> str:
        if self.event_log and self.event_log.source:
            return self.event_log.source
        return self.script_name


def _format_error(error: Mapping[str, Any]) -> str:
    """pydantic のエラーを "tasks[0].action: ..." 形式に変換"""
    path = ''
    for part in error['loc']:
        if isinstance(part, int):
            path += f'[{part}]'
        else:
            path += f'.{part}' if path else str(part)
    message = error['msg']
    return f"{path}: {message}" if path else message


def validate_config_data(data: Any) -> List[str]:
    """
    設定内容を検証

    Args:
        data: JSONから読み込んだ設定内容

    Returns:
        違反メッセージのリスト（問題がなければ空）
    """
    try:
        RunConfig.model_validate(data)
    except pydantic.ValidationError as e:
        return [_format_error(error) for error in e.errors()]
    return []


def parse_config(data: Any) -> RunConfig:
    """
    設定内容を検証して RunConfig に変換

    Args:
        data: JSONから読み込んだ設定内容

    Returns:
        実行設定

    Raises:
        ValidationError: 検証ルールの違反、またはシークレットが解決できない場合
    """
    try:
        return RunConfig.model_validate(data)
    except pydantic.ValidationError as e:
        errors = [_format_error(error) for error in e.errors()]
        raise ValidationError(f"設定ファイルに{len(errors)}件の問題があります", errors) from e


def load_config(path: Union[str, Path]) -> RunConfig:
    """
    設定ファイルを読み込み

    Args:
        path: JSON設定ファイルのパス

    Returns:
        実行設定

    Raises:
        ValidationError: ファイルが存在しない、JSONとして不正、
                         または検証ルールに違反する場合
    """
    config_path = Path(path)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ValidationError(f"設定ファイルが存在しません: {config_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"設定ファイルを読み込めません: {config_path} - {e}") from e

    return parse_config(data)

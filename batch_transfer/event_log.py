"""
イベントログ出力モジュール

情報イベントを標準の logging 経由でシステムログに書き出します。
出力先（syslog、ファイルなど）はロガーに設定したハンドラーで決まります。
"""

import logging
import sys
from typing import Iterable, List, Optional

from .exceptions import EventLogError
from .models import EventSeverity, InfoEvent

_LEVELS = {
    EventSeverity.INFORMATION: logging.INFO,
    EventSeverity.WARNING: logging.WARNING,
    EventSeverity.ERROR: logging.ERROR,
}


class EventLogWriter:
    """イベントをシステムログに書き出すクラス"""

    def __init__(self, handler: Optional[logging.Handler] = None):
        """
        EventLogWriterを初期化

        Args:
            handler: イベントロガーに追加するハンドラー（省略時は既存設定を使用）
        """
        self.handler = handler

    def write(self, source: str, log_name: str, events: Iterable[InfoEvent]) -> None:
        """
        イベントを書き出し

        ハンドラー内部の失敗（StreamHandler などが handleError に渡すもの）は
        指定されたハンドラーについて検出し、EventLogError とします。

        Args:
            source: イベントの発生元名
            log_name: 出力先のロガー名
            events: 書き出すイベント

        Raises:
            EventLogError: 書き出しに失敗した場合
        """
        if not log_name:
            raise EventLogError("イベントログ名が指定されていません")

        event_logger = logging.getLogger(log_name)
        # 未設定のロガーでも INFO 以上を記録する
        if event_logger.level == logging.NOTSET:
            event_logger.setLevel(logging.INFO)
        if self.handler and self.handler not in event_logger.handlers:
            event_logger.addHandler(self.handler)

        failures: List[BaseException] = []
        if self.handler:
            self.handler.handleError = lambda record: failures.append(sys.exc_info()[1])

        try:
            for event in events:
                event_logger.log(
                    _LEVELS[event.severity],
                    f"[{source}] {event.message}",
                    extra={'event_source': source, 'event_code': event.code,
                           'event_time': event.timestamp.isoformat()}
                )
        except Exception as e:
            raise EventLogError(f"イベントログ書き込み失敗: {log_name} - {e}") from e
        finally:
            if self.handler:
                vars(self.handler).pop('handleError', None)

        if failures:
            raise EventLogError(f"イベントログ書き込み失敗: {log_name} - {failures[0]}")

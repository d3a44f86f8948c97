"""
カスタム例外クラス定義

batch-transferで使用する例外クラスを定義します。
"""

from typing import List, Optional


class ProcessingError(Exception):
    """処理エラーの基底クラス"""
    pass


class ValidationError(ProcessingError):
    """設定検証エラー（違反内容をすべて保持）"""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors: List[str] = list(errors) if errors else [message]


class NotFoundError(ProcessingError):
    """ディレクトリ・環境変数などが見つからない"""
    pass


class FileOperationError(ProcessingError):
    """ファイル操作（コピー・移動）エラー"""
    pass


class SinkError(ProcessingError):
    """ログ出力・通知など出力先のエラーの基底クラス"""
    pass


class LogWriteError(SinkError):
    """ログファイル書き込みエラー"""
    pass


class EventLogError(SinkError):
    """イベントログ書き込みエラー"""
    pass


class TransportError(SinkError):
    """通知送信エラー"""
    pass

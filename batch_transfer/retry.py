"""
リトライ処理モジュール

失敗する可能性のある操作を固定間隔で再試行します。
待機間隔は一定です（指数バックオフなし）。
"""

import logging
import time
from typing import Callable, TypeVar

T = TypeVar('T')

MIN_ATTEMPTS, MAX_ATTEMPTS = 1, 25
MIN_DELAY_SECONDS, MAX_DELAY_SECONDS = 1, 30


class RetryingOperation:
    """固定間隔・回数上限付きで操作を再試行するクラス"""

    def __init__(self, attempts: int = 5, delay_seconds: int = 3,
                 sleep: Callable[[float], None] = time.sleep):
        """
        RetryingOperationを初期化

        Args:
            attempts: 最大試行回数（1〜25）
            delay_seconds: 試行間の待機秒数（1〜30）
            sleep: 待機関数

        Raises:
            ValueError: 範囲外の値が指定された場合
        """
        if not MIN_ATTEMPTS <= attempts <= MAX_ATTEMPTS:
            raise ValueError(
                f"attempts は {MIN_ATTEMPTS}〜{MAX_ATTEMPTS} の範囲で指定してください: {attempts}")
        if not MIN_DELAY_SECONDS <= delay_seconds <= MAX_DELAY_SECONDS:
            raise ValueError(
                f"delay_seconds は {MIN_DELAY_SECONDS}〜{MAX_DELAY_SECONDS} の範囲で指定してください: {delay_seconds}")

        self.attempts = attempts
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)

    def run(self, action: Callable[[], T]) -> T:
        """
        操作を実行し、失敗した場合は再試行

        Args:
            action: 実行する操作

        Returns:
            操作の戻り値

        Raises:
            Exception: すべての試行が失敗した場合、最後の試行の例外
        """
        for attempt in range(1, self.attempts + 1):
            try:
                return action()
            except Exception as e:
                if attempt >= self.attempts:
                    raise
                self.logger.warning(
                    f"試行 {attempt}/{self.attempts} 失敗: {e} "
                    f"({self.delay_seconds}秒後に再試行)")
                self._sleep(self.delay_seconds)

        # attempts >= 1 のため到達しない
        raise RuntimeError("リトライ処理が不正に終了しました")

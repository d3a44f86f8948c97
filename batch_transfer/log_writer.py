"""
ログファイル出力モジュール

処理結果・システムエラーのレコードを CSV / JSON / テキスト形式で書き出します。
"""

import csv
import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from .exceptions import LogWriteError

SUPPORTED_FORMATS = ('csv', 'json', 'txt')


def record_to_row(record: Any) -> Dict[str, Any]:
    """
    レコードを出力用の辞書に変換

    Args:
        record: データクラスのインスタンス

    Returns:
        文字列・数値・真偽値のみからなる辞書
    """
    data = asdict(record) if is_dataclass(record) else dict(record)
    row = {}
    for key, value in data.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat(timespec='seconds')
        elif isinstance(value, Path):
            value = str(value)
        elif value is None:
            value = ''
        row[key] = value
    return row


class LogFileWriter:
    """レコードをログファイルに書き出すクラス"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def write(self, records: Sequence[Any], base_path: Path,
              formats: Iterable[str] = ('csv',), append: bool = False) -> List[Path]:
        """
        レコードをログファイルに書き出し

        Args:
            records: 書き出すレコード
            base_path: 拡張子を除いた出力先パス
            formats: 出力形式（csv, json, txt）
            append: 既存ファイルに追記する場合True

        Returns:
            書き出したファイルのパス

        Raises:
            LogWriteError: 書き込みに失敗した場合
        """
        rows = [record_to_row(record) for record in records]
        written = []

        for fmt in formats:
            if fmt not in SUPPORTED_FORMATS:
                raise LogWriteError(f"未対応のログ形式です: {fmt}")

            path = base_path.with_name(f"{base_path.name}.{fmt}")
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                getattr(self, f"_write_{fmt}")(rows, path, append)
            except (OSError, ValueError, TypeError) as e:
                raise LogWriteError(f"ログファイル書き込み失敗: {path} - {e}") from e

            self.logger.debug(f"ログファイル出力: {path} ({len(rows)}件)")
            written.append(path)

        return written

    @staticmethod
    def _write_csv(rows: List[Dict[str, Any]], path: Path, append: bool) -> None:
        write_header = not (append and path.exists())
        fieldnames = list(rows[0].keys()) if rows else []
        with open(path, 'a' if append else 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            if write_header:
                writer.writeheader()
            writer.writerows(rows)

    @staticmethod
    def _write_json(rows: List[Dict[str, Any]], path: Path, append: bool) -> None:
        existing = []
        if append and path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                existing = json.load(f)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(existing + rows, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _write_txt(rows: List[Dict[str, Any]], path: Path, append: bool) -> None:
        with open(path, 'a' if append else 'w', encoding='utf-8') as f:
            for row in rows:
                f.write(' | '.join(f"{key}: {value}" for key, value in row.items()))
                f.write('\n')

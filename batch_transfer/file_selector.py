"""
ファイルセレクター

ソースディレクトリをスキャンし、ファイル名パターンと作成日で
処理対象ファイルを選択する機能を提供します。
"""

import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from .models import FileCandidate
from .path_validator import PathValidator


def get_creation_time(file_path: Path) -> datetime:
    """
    ファイルの作成日時を取得

    st_birthtime を提供しないプラットフォームでは更新日時で代用します。

    Args:
        file_path: ファイルパス

    Returns:
        作成日時
    """
    stat_info = file_path.stat()
    timestamp = getattr(stat_info, 'st_birthtime', None)
    if timestamp is None:
        timestamp = stat_info.st_mtime
    return datetime.fromtimestamp(timestamp)


class FileSelector:
    """ディレクトリをスキャンして処理対象ファイルを選択するクラス"""

    def __init__(self,
                 today: Callable[[], date] = date.today,
                 creation_time: Callable[[Path], datetime] = get_creation_time):
        """
        FileSelectorを初期化

        Args:
            today: 当日の日付を返す関数
            creation_time: ファイルの作成日時を返す関数
        """
        self._today = today
        self._creation_time = creation_time

    def select(self, source_folder: Path, pattern: str, recurse: bool,
               max_age_days: int = 0) -> List[FileCandidate]:
        """
        処理対象ファイルを選択

        Args:
            source_folder: スキャンするディレクトリ
            pattern: ファイル名に対する正規表現（パスではなく名前に適用）
            recurse: サブディレクトリも検索する場合True
            max_age_days: 作成日の上限日数（0は制限なし、1は当日作成のみ）

        Returns:
            パス順にソートされたファイル候補のリスト

        Raises:
            NotFoundError: ディレクトリが無効な場合
        """
        PathValidator.validate_directory(source_folder)

        matcher = re.compile(pattern)
        cutoff = self.cutoff_date(max_age_days)

        candidates = []
        for file_path in sorted(self._iter_files(source_folder, recurse)):
            if not matcher.search(file_path.name):
                continue

            created = self._creation_time(file_path)
            if cutoff and created.date() < cutoff:
                continue

            candidates.append(FileCandidate(
                full_path=file_path,
                name=file_path.name,
                creation_time=created
            ))

        return candidates

    def cutoff_date(self, max_age_days: int) -> Optional[date]:
        """
        作成日の下限を計算

        Args:
            max_age_days: 作成日の上限日数

        Returns:
            下限日（制限なしの場合None）
        """
        if max_age_days <= 0:
            return None
        return self._today() - timedelta(days=max_age_days - 1)

    @staticmethod
    def _iter_files(directory: Path, recurse: bool) -> Iterator[Path]:
        """ファイルのみを列挙（ディレクトリは除外）"""
        entries = directory.rglob('*') if recurse else directory.iterdir()
        for file_path in entries:
            if file_path.is_file():
                yield file_path

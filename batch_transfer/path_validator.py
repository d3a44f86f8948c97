"""
パス検証ユーティリティ

ディレクトリパスの検証とクロスプラットフォーム対応を提供します。
"""

import os
from pathlib import Path
from typing import Union

from .exceptions import NotFoundError


class PathValidator:
    """パス検証を行うユーティリティクラス"""
    
    @staticmethod
    def validate_directory(path: Path) -> None:
        """
        ディレクトリの存在とアクセス権を検証
        
        Args:
            path: 検証するディレクトリパス
            
        Raises:
            NotFoundError: ディレクトリが存在しない、ディレクトリではない、
                           または読み取り権限がない場合
        """
        if not path.exists():
            raise NotFoundError(f"ディレクトリが存在しません: {path}")
        
        if not path.is_dir():
            raise NotFoundError(f"指定されたパスはディレクトリではありません: {path}")
        
        # 読み取り権限の確認
        if not os.access(path, os.R_OK):
            raise NotFoundError(f"ディレクトリに読み取り権限がありません: {path}")
    
    @staticmethod
    def is_directory(path: Path) -> bool:
        """ディレクトリとして利用可能な場合True"""
        try:
            PathValidator.validate_directory(path)
        except NotFoundError:
            return False
        return True
    
    @staticmethod
    def normalize_path(path_str: Union[str, Path]) -> Path:
        """
        パス文字列を正規化してPathオブジェクトに変換
        macOSとWindowsの両方のパス形式をサポート
        
        Args:
            path_str: パス文字列
            
        Returns:
            正規化されたPathオブジェクト
        """
        # ~ を展開し、OS固有の形式に正規化する
        return Path(path_str).expanduser().resolve()

"""
ファイル操作モジュール

単一ファイルのコピーと移動を行います。
上書きが許可されていない場合、既存のコピー先ファイルはエラーになります。
"""

import logging
import shutil
from pathlib import Path

from .exceptions import FileOperationError
from .models import Action

logger = logging.getLogger(__name__)


def transfer_file(action: Action, source_path: Path, destination_path: Path,
                  overwrite: bool) -> None:
    """
    ファイルをコピーまたは移動

    Args:
        action: コピーまたは移動
        source_path: コピー元ファイル
        destination_path: コピー先ファイル
        overwrite: 既存ファイルを置き換える場合True

    Raises:
        FileOperationError: コピー先が既に存在する（上書き不可）、
                            またはOSレベルの操作が失敗した場合
    """
    if not source_path.exists():
        raise FileOperationError(f"ソースファイルが存在しません: {source_path}")

    if destination_path.exists() and not overwrite:
        raise FileOperationError(
            f"コピー先ファイルが既に存在します: {destination_path}")

    try:
        if action is Action.MOVE:
            if destination_path.exists():
                # 上書き時は既存ファイルを先に削除
                destination_path.unlink()
            shutil.move(str(source_path), str(destination_path))
        else:
            # shutil.copy2を使用してメタデータも保持
            shutil.copy2(source_path, destination_path)
    except PermissionError as e:
        raise FileOperationError(f"アクセス権限エラー: {e}") from e
    except OSError as e:
        raise FileOperationError(f"ファイル操作エラー: {e}") from e

    logger.debug(f"{action.value} 成功: {source_path} -> {destination_path}")

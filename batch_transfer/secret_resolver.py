"""
シークレット解決

設定値 "ENV:名前" を環境変数の値に置き換えます。
"""

import os
from typing import Mapping, Optional

from .exceptions import NotFoundError

ENV_PREFIX = 'ENV:'


def resolve_secret(reference: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    設定値を解決

    Args:
        reference: "ENV:名前" 形式の参照、またはそのままの値
        environ: 参照する環境変数（省略時は os.environ）

    Returns:
        解決した値

    Raises:
        NotFoundError: 参照先の環境変数が存在しない場合
    """
    if not isinstance(reference, str) or not reference.startswith(ENV_PREFIX):
        return reference

    name = reference[len(ENV_PREFIX):].strip()
    env = os.environ if environ is None else environ
    if not name or name not in env:
        raise NotFoundError(f"環境変数が見つかりません: {name}")
    return env[name]

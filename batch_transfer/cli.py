"""
コマンドラインインターフェース

batch-transferのメインエントリーポイントです。
argparseのサブコマンド機能を使用して、run、validateコマンドを提供します。
"""

import argparse
import sys

from .config import load_config
from .exceptions import ProcessingError, ValidationError
from .logger import create_default_logger, get_default_log_file
from .path_validator import PathValidator
from .pipeline import run_from_file


def create_parser() -> argparse.ArgumentParser:
    """
    コマンドライン引数パーサーを作成

    Returns:
        設定済みのArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='batch-transfer',
        description='設定ファイルに定義されたファイルのコピー/移動タスクを一括実行するツール',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  # 設定ファイルのタスクを実行
  batch-transfer run /path/to/config.json

  # 設定ファイルの検証のみ
  batch-transfer validate /path/to/config.json

詳細については各サブコマンドのヘルプを参照してください:
  batch-transfer <command> --help
        """
    )

    # サブコマンドを作成
    subparsers = parser.add_subparsers(
        dest='command',
        help='利用可能なコマンド',
        metavar='<command>'
    )

    # runコマンド（エイリアス: r）
    run_parser = subparsers.add_parser(
        'run',
        aliases=['r'],
        help='設定ファイルのタスクを実行',
        description='設定ファイルのタスクを実行し、ログ出力と通知を行います。'
                    'システムエラーがあった場合は終了コード1を返します。',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  # 基本的な使用方法
  batch-transfer run /path/to/config.json

  # 詳細ログを表示し、ログファイルにも記録
  batch-transfer run /path/to/config.json --verbose

  # 診断ログの出力先を指定
  batch-transfer run /path/to/config.json --log-file /var/log/batch.log
        """
    )
    run_parser.add_argument(
        'config',
        type=str,
        help='JSON設定ファイルのパス'
    )
    run_parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='詳細ログを表示'
    )
    run_parser.add_argument(
        '--log-file', '-l',
        type=str,
        help='診断ログファイルのパス（--verbose指定時の既定: ~/.batch_transfer/logs）'
    )

    # validateコマンド（エイリアス: v）
    validate_parser = subparsers.add_parser(
        'validate',
        aliases=['v'],
        help='設定ファイルを検証',
        description='設定ファイルを検証し、問題をすべて表示します。タスクは実行しません。'
    )
    validate_parser.add_argument(
        'config',
        type=str,
        help='JSON設定ファイルのパス'
    )

    return parser


def handle_run_command(args) -> int:
    """
    runコマンドを処理

    Args:
        args: 解析されたコマンドライン引数

    Returns:
        終了コード（0: 成功、1: システムエラーあり）
    """
    try:
        if args.log_file:
            log_file = PathValidator.normalize_path(args.log_file)
        else:
            log_file = get_default_log_file() if args.verbose else None
        progress_logger = create_default_logger(verbose=args.verbose, log_file=log_file)

        report = run_from_file(PathValidator.normalize_path(args.config),
                               progress_logger=progress_logger)
        return 1 if report.failed else 0

    except ProcessingError as e:
        print(f"❌ 処理エラー: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ 予期しないエラー: {e}", file=sys.stderr)
        return 1


def handle_validate_command(args) -> int:
    """
    validateコマンドを処理

    Args:
        args: 解析されたコマンドライン引数

    Returns:
        終了コード（0: 問題なし、1: 問題あり）
    """
    try:
        config = load_config(PathValidator.normalize_path(args.config))
    except ValidationError as e:
        print(f"❌ 入力エラー: {e}", file=sys.stderr)
        for message in e.errors:
            print(f"  - {message}", file=sys.stderr)
        return 1

    print(f"✅ 設定ファイルは有効です: {len(config.tasks)}タスク")
    return 0


def main() -> int:
    """
    メインエントリーポイント

    Returns:
        終了コード（0: 成功、1: エラー）
    """
    parser = create_parser()

    # 引数が指定されていない場合はヘルプを表示
    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    args = parser.parse_args()

    # コマンドが指定されていない場合はヘルプを表示
    if not args.command:
        parser.print_help()
        return 0

    # 各コマンドの処理を実行
    if args.command in ['run', 'r']:
        return handle_run_command(args)
    elif args.command in ['validate', 'v']:
        return handle_validate_command(args)
    else:
        print(f"❌ 不明なコマンド: {args.command}", file=sys.stderr)
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())

"""
ファイル操作のプロパティベーステスト

Property: ファイルコピー・移動の保存性
"""

import hashlib
import tempfile
from pathlib import Path
from hypothesis import given, strategies as st
from hypothesis import settings
import pytest

from batch_transfer.exceptions import FileOperationError
from batch_transfer.file_operations import transfer_file
from batch_transfer.models import Action


def calculate_file_hash(file_path: Path) -> str:
    """ファイルのハッシュ値を計算"""
    hash_md5 = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            hash_md5.update(chunk)
    return hash_md5.hexdigest()


@st.composite
def file_transfer_scenario_strategy(draw):
    """ファイル転送のテストシナリオを生成するストラテジー"""
    basename = draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('Lu', 'Ll', 'Nd'),
            min_codepoint=32,
            max_codepoint=126
        ),
        min_size=1,
        max_size=20
    ))
    file_content = draw(st.binary(min_size=0, max_size=10000))
    action = draw(st.sampled_from([Action.COPY, Action.MOVE]))
    return {'name': f"{basename}.dat", 'file_content': file_content, 'action': action}


@settings(max_examples=100)
@given(file_transfer_scenario_strategy())
def test_transfer_preservation_property(scenario):
    """
    **Property: ファイル転送の保存性**

    コピー・移動されたファイルは元のファイルと同じ名前と内容を持ち、
    移動の場合は元のファイルが残らないべきである。
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        source_dir = temp_path / "source"
        target_dir = temp_path / "target"
        source_dir.mkdir()
        target_dir.mkdir()

        source_path = source_dir / scenario['name']
        source_path.write_bytes(scenario['file_content'])
        original_hash = calculate_file_hash(source_path)

        destination_path = target_dir / scenario['name']
        transfer_file(scenario['action'], source_path, destination_path, overwrite=False)

        assert destination_path.exists()
        assert calculate_file_hash(destination_path) == original_hash
        assert source_path.exists() == (scenario['action'] is Action.COPY)


@pytest.mark.parametrize("action", [Action.COPY, Action.MOVE])
def test_existing_destination_without_overwrite_fails(action):
    """上書き不可で既存ファイルがある場合はエラーとなり、既存ファイルは変更されない"""
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        source_path = temp_path / "a.txt"
        destination_path = temp_path / "out" / "a.txt"
        destination_path.parent.mkdir()
        source_path.write_text("new")
        destination_path.write_text("old")

        with pytest.raises(FileOperationError):
            transfer_file(action, source_path, destination_path, overwrite=False)

        assert destination_path.read_text() == "old"
        assert source_path.exists()


@pytest.mark.parametrize("action", [Action.COPY, Action.MOVE])
def test_existing_destination_with_overwrite_is_replaced(action):
    """上書き可の場合は既存ファイルが置き換えられる"""
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        source_path = temp_path / "a.txt"
        destination_path = temp_path / "out" / "a.txt"
        destination_path.parent.mkdir()
        source_path.write_text("new")
        destination_path.write_text("old")

        transfer_file(action, source_path, destination_path, overwrite=True)

        assert destination_path.read_text() == "new"
        assert source_path.exists() == (action is Action.COPY)


def test_missing_source_fails():
    """存在しないソースファイルはエラー"""
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        with pytest.raises(FileOperationError):
            transfer_file(Action.COPY, temp_path / "none.txt", temp_path / "out.txt", False)

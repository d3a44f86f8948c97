"""
FileSelectorのプロパティベーステスト

Property 1: 期間制限なしの場合はパターンに一致する全ファイルを選択
Property 2: 作成日の境界は日付単位（k-1日前は含み、k日前は除外）
"""

import tempfile
from datetime import date, datetime, time, timedelta
from pathlib import Path
from hypothesis import given, strategies as st
from hypothesis import settings
import pytest

from batch_transfer.file_selector import FileSelector, get_creation_time
from batch_transfer.exceptions import NotFoundError


TODAY = date(2024, 6, 15)

# ファイルシステムで安全に使用できる文字のストラテジー
safe_basename_strategy = st.text(
    alphabet=st.characters(
        whitelist_categories=('Lu', 'Ll', 'Nd'),
        min_codepoint=32,
        max_codepoint=126
    ),
    min_size=1,
    max_size=20
)


def make_selector(creation_times):
    """作成日時を辞書で指定できるFileSelectorを作成"""
    return FileSelector(
        today=lambda: TODAY,
        creation_time=lambda path: creation_times[path.name]
    )


@st.composite
def files_with_ages_strategy(draw):
    """ファイル名・拡張子・経過日数の組を生成するストラテジー"""
    num_files = draw(st.integers(min_value=1, max_value=10))
    files = []
    for i in range(num_files):
        basename = draw(safe_basename_strategy)
        extension = draw(st.sampled_from(['.csv', '.txt', '.log']))
        age_days = draw(st.integers(min_value=0, max_value=400))
        files.append((f"{basename}_{i}{extension}", age_days))
    return files


@settings(max_examples=50)
@given(files_with_ages_strategy())
def test_unlimited_age_selects_every_matching_file_property(files):
    """
    **Property 1: 期間制限なしの選択**

    max_age_days = 0 の場合、作成日時に関係なくパターンに一致する
    すべてのファイルが選択されるべきである。
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        source = Path(temp_dir)
        creation_times = {}
        for name, age_days in files:
            (source / name).write_text("data")
            creation_times[name] = datetime.combine(TODAY - timedelta(days=age_days), time(12))

        selector = make_selector(creation_times)
        selected = selector.select(source, r'\.csv$', recurse=False, max_age_days=0)

        expected = sorted(name for name, _ in files if name.endswith('.csv'))
        assert [c.name for c in selected] == expected


@settings(max_examples=100)
@given(
    max_age_days=st.integers(min_value=1, max_value=60),
    hour=st.integers(min_value=0, max_value=23)
)
def test_age_boundary_uses_date_granularity_property(max_age_days, hour):
    """
    **Property 2: 作成日の境界**

    max_age_days = k の場合、k-1日前に作成されたファイルは含まれ、
    k日前に作成されたファイルは時刻に関係なく除外されるべきである。
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        source = Path(temp_dir)
        (source / "inside.txt").write_text("in")
        (source / "outside.txt").write_text("out")

        creation_times = {
            # 境界日の 00:00 〜 23:00
            "inside.txt": datetime.combine(
                TODAY - timedelta(days=max_age_days - 1), time(hour)),
            # 1日古い日の 23:59
            "outside.txt": datetime.combine(
                TODAY - timedelta(days=max_age_days), time(23, 59)),
        }

        selector = make_selector(creation_times)
        selected = selector.select(source, '.*', recurse=False, max_age_days=max_age_days)

        assert [c.name for c in selected] == ["inside.txt"]


def test_max_age_one_means_created_today():
    """max_age_days = 1 は当日作成のファイルのみ"""
    with tempfile.TemporaryDirectory() as temp_dir:
        source = Path(temp_dir)
        (source / "today.txt").write_text("a")
        (source / "yesterday.txt").write_text("b")

        selector = make_selector({
            "today.txt": datetime.combine(TODAY, time(0, 0)),
            "yesterday.txt": datetime.combine(TODAY - timedelta(days=1), time(23, 59)),
        })

        assert selector.cutoff_date(1) == TODAY
        assert [c.name for c in selector.select(source, '.*', False, 1)] == ["today.txt"]


def test_pattern_matches_name_not_path():
    """パターンはフルパスではなくファイル名に対して評価される"""
    with tempfile.TemporaryDirectory() as temp_dir:
        source = Path(temp_dir) / "reports"
        source.mkdir()
        (source / "data.csv").write_text("a")
        (source / "notes.txt").write_text("b")

        selected = FileSelector().select(source, 'reports', recurse=False)

        assert selected == []


def test_recurse_flag_controls_subdirectories():
    """サブディレクトリのファイルは recurse=True の場合のみ選択され、ディレクトリ自体は含まれない"""
    with tempfile.TemporaryDirectory() as temp_dir:
        source = Path(temp_dir)
        (source / "top.csv").write_text("a")
        sub = source / "sub.csv"
        sub.mkdir()
        (sub / "nested.csv").write_text("b")

        flat = FileSelector().select(source, r'\.csv$', recurse=False)
        deep = FileSelector().select(source, r'\.csv$', recurse=True)

        assert [c.name for c in flat] == ["top.csv"]
        assert sorted(c.name for c in deep) == ["nested.csv", "top.csv"]
        assert all(c.full_path.is_file() for c in deep)


def test_select_is_restartable():
    """再呼び出しで再列挙される"""
    with tempfile.TemporaryDirectory() as temp_dir:
        source = Path(temp_dir)
        (source / "a.txt").write_text("a")
        selector = FileSelector()

        first = selector.select(source, '.*', False)
        (source / "b.txt").write_text("b")
        second = selector.select(source, '.*', False)

        assert len(first) == 1
        assert [c.name for c in second] == ["a.txt", "b.txt"]


def test_missing_source_folder_raises_not_found():
    """存在しないディレクトリは NotFoundError"""
    with tempfile.TemporaryDirectory() as temp_dir:
        with pytest.raises(NotFoundError):
            FileSelector().select(Path(temp_dir) / "missing", '.*', False)


def test_file_instead_of_folder_raises_not_found():
    """ファイルを指定した場合も NotFoundError"""
    with tempfile.TemporaryDirectory() as temp_dir:
        file_path = Path(temp_dir) / "file.txt"
        file_path.write_text("x")
        with pytest.raises(NotFoundError):
            FileSelector().select(file_path, '.*', False)


def test_default_creation_time_is_recent_for_new_file():
    """既定の作成日時取得は新規ファイルに対して現在に近い日時を返す"""
    with tempfile.TemporaryDirectory() as temp_dir:
        file_path = Path(temp_dir) / "new.txt"
        file_path.write_text("x")

        created = get_creation_time(file_path)

        assert abs((datetime.now() - created).total_seconds()) < 3600

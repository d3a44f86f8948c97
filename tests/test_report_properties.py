"""
ReportAggregatorのプロパティベーステスト

Property: 集計値の一貫性
Property: ログファイル出力の決定表（write_all_actions の優先）
Property: 保持期限による削除対象の選択
"""

import os
import tempfile
import time
from datetime import datetime, timedelta
from pathlib import Path
from hypothesis import given, strategies as st
from hypothesis import settings
import pytest

from batch_transfer.models import (
    Action, ActionOutcome, ArtifactKind, LogPolicy, RunReport, SystemErrorRecord,
    TaskResult, TaskSpec,
)
from batch_transfer.report import ReportAggregator

NOW = datetime(2024, 6, 15, 12, 0, 0)
SPEC = TaskSpec(action=Action.COPY, source_folder=Path("/in"), match_pattern='.*',
                destination_folder=Path("/out"))


def make_report(successes: int, failures: int, system_errors: int, run_errors: int = 0) -> RunReport:
    """指定件数のレコードを持つレポートを作成"""
    outcomes = [
        ActionOutcome(timestamp=NOW, action=Action.COPY, source_path=Path(f"/in/{i}"),
                      destination_path=Path(f"/out/{i}"), overwrite=False,
                      success=i < successes, error=None if i < successes else "failed")
        for i in range(successes + failures)
    ]
    errors = [SystemErrorRecord(timestamp=NOW, message=f"task error {i}")
              for i in range(system_errors)]
    report = RunReport(start_time=NOW, task_results=(
        TaskResult(spec=SPEC, outcomes=outcomes, system_errors=errors),))
    return report.with_run_errors(
        SystemErrorRecord(timestamp=NOW, message=f"run error {i}") for i in range(run_errors))


counts = st.integers(min_value=0, max_value=5)


@settings(max_examples=100)
@given(successes=counts, failures=counts, system_errors=counts, run_errors=counts)
def test_summary_matches_collections_property(successes, failures, system_errors, run_errors):
    """
    **Property: 集計値の一貫性**

    集計値は常にレポートのコレクションのサイズと一致すべきである。
    """
    report = make_report(successes, failures, system_errors, run_errors)

    summary = ReportAggregator.summarize(report)

    assert summary.total == len(report.outcomes) == successes + failures
    assert summary.action_errors == len([o for o in report.outcomes if not o.success]) == failures
    assert summary.system_error_count == len(report.system_errors) == system_errors + run_errors


@settings(max_examples=200)
@given(successes=counts, failures=counts, system_errors=counts,
       write_system_errors=st.booleans(), write_all_actions=st.booleans(),
       write_only_action_errors=st.booleans())
def test_artifact_decision_table_property(successes, failures, system_errors,
                                          write_system_errors, write_all_actions,
                                          write_only_action_errors):
    """
    **Property: ログファイル出力の決定表**

    システムエラーのログは独立して判定され、全処理ログが要求される場合は
    処理エラーのみのログは出力されないべきである。
    """
    report = make_report(successes, failures, system_errors)
    policy = LogPolicy(write_system_errors=write_system_errors,
                       write_all_actions=write_all_actions,
                       write_only_action_errors=write_only_action_errors)

    kinds = [a.kind for a in ReportAggregator.decide_artifacts(report, policy)]

    assert (ArtifactKind.SYSTEM_ERRORS in kinds) == (write_system_errors and system_errors > 0)
    all_actions = write_all_actions and successes + failures > 0
    assert (ArtifactKind.ALL_ACTIONS in kinds) == all_actions
    assert (ArtifactKind.ACTION_ERRORS in kinds) == (
        not all_actions and write_only_action_errors and failures > 0)
    assert not (ArtifactKind.ALL_ACTIONS in kinds and ArtifactKind.ACTION_ERRORS in kinds)


def test_all_actions_takes_precedence_over_action_errors():
    """両方有効で処理エラー3件の場合は全処理ログのみ（名前にエラー付き）"""
    report = make_report(successes=2, failures=3, system_errors=0)
    policy = LogPolicy(write_system_errors=True, write_all_actions=True,
                       write_only_action_errors=True)

    artifacts = ReportAggregator.decide_artifacts(report, policy)

    assert len(artifacts) == 1
    assert artifacts[0].kind is ArtifactKind.ALL_ACTIONS
    assert artifacts[0].name == "All actions with errors"
    assert len(artifacts[0].records) == 5


def test_action_errors_artifact_contains_only_failures():
    """処理エラーのログには失敗したレコードのみ含まれる"""
    report = make_report(successes=2, failures=1, system_errors=1)
    policy = LogPolicy(write_system_errors=True, write_all_actions=False,
                       write_only_action_errors=True)

    artifacts = {a.kind: a for a in ReportAggregator.decide_artifacts(report, policy)}

    assert artifacts[ArtifactKind.ACTION_ERRORS].name == "Action errors"
    assert [r.success for r in artifacts[ArtifactKind.ACTION_ERRORS].records] == [False]
    assert artifacts[ArtifactKind.SYSTEM_ERRORS].name == "System errors"
    assert len(artifacts[ArtifactKind.SYSTEM_ERRORS].records) == 1


def test_all_actions_without_errors_has_plain_name():
    report = make_report(successes=2, failures=0, system_errors=0)
    policy = LogPolicy(write_all_actions=True)

    artifacts = ReportAggregator.decide_artifacts(report, policy)

    assert [a.name for a in artifacts] == ["All actions"]


def test_zero_retention_disables_deletion():
    """保持日数0は削除しない"""
    assert ReportAggregator.log_cutoff_date(0, NOW) is None
    assert ReportAggregator.select_expired_logs([Path("/whatever.csv")], None) == []


def test_cutoff_date_is_now_minus_retention():
    assert ReportAggregator.log_cutoff_date(30, NOW) == NOW - timedelta(days=30)


def test_select_expired_logs_by_modification_time():
    """更新日時が期限より前のファイルのみ削除対象"""
    with tempfile.TemporaryDirectory() as temp_dir:
        folder = Path(temp_dir)
        old_file = folder / "old.csv"
        new_file = folder / "new.csv"
        old_file.write_text("old")
        new_file.write_text("new")
        (folder / "subdir").mkdir()

        ten_days_ago = time.time() - 10 * 24 * 3600
        os.utime(old_file, (ten_days_ago, ten_days_ago))

        cutoff = ReportAggregator.log_cutoff_date(5)
        expired = ReportAggregator.select_expired_logs(folder.iterdir(), cutoff)

        assert expired == [old_file]

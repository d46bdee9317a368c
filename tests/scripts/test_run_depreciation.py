"""Tests for the run_depreciation command-line entry point."""

import json

import pytest

from asset_kernel.db.engine import reset_engine
from scripts.run_depreciation import main
from tests.conftest import TEST_ACTOR_ID, TEST_BUSINESS_UNIT_ID


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'assets.db'}"
    yield url
    reset_engine()


def _run(capsys, *argv) -> tuple[int, object]:
    code = main(list(argv))
    return code, json.loads(capsys.readouterr().out)


def test_create_tables(db_url, capsys):
    code, result = _run(capsys, "--db-url", db_url, "create-tables")

    assert code == 0
    assert result == {"success": True, "message": "Tables created"}


def test_batch_on_empty_database(db_url, capsys):
    _run(capsys, "--db-url", db_url, "create-tables")

    code, result = _run(capsys, "--db-url", db_url, "batch", "--actor", str(TEST_ACTOR_ID))

    assert code == 0
    assert result["success"] is True
    assert result["processed_assets"] == 0
    assert result["message"] == "Processed 0 assets for depreciation"


def test_queries_on_empty_database(db_url, capsys):
    _run(capsys, "--db-url", db_url, "create-tables")

    code, due = _run(capsys, "--db-url", db_url, "due", "--actor", str(TEST_ACTOR_ID))
    assert code == 0
    assert due == []

    code, summary = _run(
        capsys, "--db-url", db_url,
        "summary", str(TEST_BUSINESS_UNIT_ID), "--actor", str(TEST_ACTOR_ID),
    )
    assert code == 0
    assert summary["total_assets"] == 0


def test_failed_result_exits_non_zero(db_url, capsys):
    _run(capsys, "--db-url", db_url, "create-tables")

    code, result = _run(
        capsys, "--db-url", db_url,
        "calculate", "00000000-0000-4000-a000-0000000000ff", "--actor", str(TEST_ACTOR_ID),
    )

    assert code == 1
    assert result["code"] == "ASSET_NOT_FOUND"


def test_bad_config_path(db_url, tmp_path, capsys):
    code = main(["--config", str(tmp_path / "missing.yaml"), "--db-url", db_url, "due",
                 "--actor", str(TEST_ACTOR_ID)])

    assert code == 1
    assert "Could not load config" in capsys.readouterr().err


def test_invalid_uuid_is_a_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        main(["calculate", "not-a-uuid", "--actor", str(TEST_ACTOR_ID)])
    assert exc_info.value.code == 2


def test_dashboard_and_reschedule_on_empty_database(db_url, capsys):
    _run(capsys, "--db-url", db_url, "create-tables")

    code, dashboard = _run(
        capsys, "--db-url", db_url,
        "dashboard", str(TEST_BUSINESS_UNIT_ID), "--actor", str(TEST_ACTOR_ID),
    )
    assert code == 0
    assert dashboard["recent_calculations"] == []
    assert dashboard["upcoming_calculations"] == []
    assert dashboard["summary"]["total_assets"] == 0

    code, result = _run(
        capsys, "--db-url", db_url,
        "reschedule", str(TEST_BUSINESS_UNIT_ID), "--actor", str(TEST_ACTOR_ID),
        "--date", "2024-07-01",
    )
    assert code == 0
    assert result == {
        "success": True,
        "message": "Scheduled depreciation calculation for 0 assets on 2024-07-01",
        "scheduled_assets": 0,
    }

"""
Tests for the depreciation sweep task (asset_batch/tasks/depreciation_tasks.py).

Runs DueDepreciationTask through the real BatchExecutor against the
database: item preparation, per-asset isolation, and the mapping of
service outcomes to item statuses.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from asset_batch.domain.types import BatchItemStatus, BatchRunStatus
from asset_batch.services.executor import BatchExecutor
from asset_batch.tasks import DUE_DEPRECIATION, DueDepreciationTask, default_task_registry
from asset_batch.tasks.base import BatchItemInput
from asset_modules.depreciation.selectors import DepreciationSelector
from tests.conftest import OTHER_BUSINESS_UNIT_ID, TEST_BUSINESS_UNIT_ID


@pytest.fixture
def run_sweep(session, clock, actor_id):
    def _run(**parameters):
        executor = BatchExecutor(session, default_task_registry(clock=clock), clock=clock)
        return executor.run(DUE_DEPRECIATION, actor_id, parameters)

    return _run


class TestPrepareItems:

    def test_items_keyed_by_item_code(self, session, clock, make_asset):
        asset = make_asset(item_code="LAP-001")

        (item,) = DueDepreciationTask().prepare_items({}, session, clock.now())

        assert item.item_key == "LAP-001"
        assert item.payload == {"asset_id": asset.id, "item_code": "LAP-001"}

    def test_unconfigured_assets_not_prepared(self, session, clock, make_asset):
        make_asset(useful_life_months=None)
        make_asset(purchase_price=None, current_book_value=None)

        assert DueDepreciationTask().prepare_items({}, session, clock.now()) == ()

    def test_string_ids_accepted(self, session, clock, make_asset):
        asset = make_asset()
        make_asset(business_unit_id=OTHER_BUSINESS_UNIT_ID)

        items = DueDepreciationTask().prepare_items(
            {"business_unit_id": str(TEST_BUSINESS_UNIT_ID), "asset_ids": [str(asset.id)]},
            session,
            clock.now(),
        )

        assert [i.payload["asset_id"] for i in items] == [asset.id]


class TestSweep:

    def test_every_due_asset_processed(self, run_sweep, make_asset):
        assets = [make_asset() for _ in range(4)]

        run = run_sweep()

        assert run.status == BatchRunStatus.COMPLETED
        assert run.succeeded == 4
        for asset in assets:
            assert asset.current_book_value == Decimal("118000.00")
        data = run.item_results[0].result_data
        assert data["depreciation_amount"] == Decimal("2000.00")
        assert data["new_book_value"] == Decimal("118000.00")
        assert data["is_fully_depreciated"] is False

    def test_failures_do_not_stop_the_batch(self, session, run_sweep, make_asset):
        good = [make_asset() for _ in range(3)]
        # Zero life passes selection but is rejected by the Applier
        bad = [make_asset(useful_life_months=0) for _ in range(2)]

        run = run_sweep()

        assert run.total_items == 5
        assert run.succeeded == 3
        assert run.failed == 2
        assert run.status == BatchRunStatus.PARTIALLY_COMPLETED
        assert {r.error_code for r in run.failed_items} == {"MISSING_DEPRECIATION_CONFIG"}
        assert {r.result_data["asset_id"] for r in run.failed_items} == {a.id for a in bad}

        selector = DepreciationSelector(session)
        assert all(selector.count_entries(a.id) == 1 for a in good)
        assert all(selector.count_entries(a.id) == 0 for a in bad)

    def test_salvage_floor_is_skipped_and_repaired(self, session, run_sweep, make_asset):
        floor = make_asset(
            purchase_price=Decimal("1000.00"),
            salvage_value=Decimal("100.00"),
            current_book_value=Decimal("100.00"),
            accumulated_depreciation=Decimal("900.00"),
        )
        make_asset()

        run = run_sweep()

        assert run.status == BatchRunStatus.COMPLETED
        assert (run.succeeded, run.skipped, run.failed) == (1, 1, 0)
        skipped = next(r for r in run.item_results if r.status == BatchItemStatus.SKIPPED)
        assert skipped.error_code == "salvage_value_reached"
        assert skipped.result_data["reason"] == "salvage_value_reached"
        assert floor.is_fully_depreciated

    def test_scoped_to_business_unit(self, run_sweep, make_asset):
        make_asset()
        other = make_asset(business_unit_id=OTHER_BUSINESS_UNIT_ID)

        run = run_sweep(business_unit_id=TEST_BUSINESS_UNIT_ID)

        assert run.total_items == 1
        assert other.current_book_value == Decimal("120000.00")

    def test_nothing_due(self, run_sweep):
        run = run_sweep()
        assert run.status == BatchRunStatus.COMPLETED
        assert run.total_items == 0


def test_unknown_asset_in_payload_fails_item(session, clock, actor_id):
    task = DueDepreciationTask(clock=clock)
    item = BatchItemInput(item_index=0, item_key="GHOST", payload={
        "asset_id": uuid4(), "item_code": "GHOST",
    })

    result = task.execute_item(item, {"actor_id": actor_id}, session, clock.now())

    assert result.status == BatchItemStatus.FAILED
    assert result.error_code == "ASSET_NOT_FOUND"
    assert result.result_data["item_code"] == "GHOST"

"""Unit tests for the view controller state transitions"""

import asyncio
import pytest
from riskmap.controller import ViewController, ViewStatus
from riskmap.domain.exceptions import FetchError, MalformedResponseError
from riskmap.domain.figure import EMPTY_FIGURE


@pytest.fixture
def rescored(record_factory):
    """Score batches keyed by age weight"""
    def batch(*scores):
        return [record_factory(lat=10.0 * (i + 1), lon=float(i + 1), risk_score=s) for i, s in enumerate(scores)]

    return {
        0.7: batch(0.05, 0.4, 0.95),
        0.8: batch(0.08, 0.45, 0.92),
        1.2: batch(0.15, 0.55, 0.97),
        1.5: batch(0.2, 0.6, 0.99),
    }


def test_initial_state(fake_source_factory):
    controller = ViewController(fake_source_factory())

    assert controller.records == ()
    assert controller.weight == 1.0
    assert controller.figure is EMPTY_FIGURE
    assert controller.status is ViewStatus.IDLE
    assert controller.last_error is None


async def test_start_builds_figure_from_baseline(fake_source_factory, sample_records):
    source = fake_source_factory(baseline=sample_records)
    controller = ViewController(source)

    await controller.start()

    assert controller.records == tuple(sample_records)
    assert controller.figure.point_count == 3
    assert controller.figure.title == "Risk Scores (Age Weight 1.00x)"
    assert controller.status is ViewStatus.READY
    assert source.calls == [("fetch_baseline", None)]


async def test_start_failure_leaves_initial_state(fake_source_factory):
    error = FetchError("fetch_baseline", "connection refused")
    controller = ViewController(fake_source_factory(baseline=error))

    await controller.start()

    assert controller.records == ()
    assert controller.weight == 1.0
    assert controller.figure is EMPTY_FIGURE
    assert controller.status is ViewStatus.ERROR
    assert controller.last_error is error


async def test_weight_change_after_failed_start_issues_no_fetch(fake_source_factory, rescored):
    source = fake_source_factory(baseline=FetchError("fetch_baseline", "offline"), scored=rescored)
    controller = ViewController(source)
    await controller.start()

    assert controller.change_weight(1.5) is None
    await controller.set_weight(0.7)

    assert source.calls == [("fetch_baseline", None)]
    assert controller.weight == 0.7
    assert controller.figure is EMPTY_FIGURE


async def test_reload_after_failed_start_recovers(fake_source_factory, sample_records, rescored):
    source = fake_source_factory(baseline=FetchError("fetch_baseline", "offline"), scored=rescored)
    controller = ViewController(source)
    await controller.start()

    source.baseline = sample_records
    await controller.reload()
    await controller.set_weight(1.5)

    assert controller.status is ViewStatus.READY
    assert controller.last_error is None
    assert controller.records == tuple(rescored[1.5])
    assert controller.figure.title == "Risk Scores (Age Weight 1.50x)"


async def test_weight_change_replaces_records_and_figure(fake_source_factory, sample_records, rescored):
    source = fake_source_factory(baseline=sample_records, scored=rescored)
    controller = ViewController(source)
    await controller.start()

    await controller.set_weight(0.7)

    assert source.calls[-1] == ("fetch_scored", 0.7)
    assert controller.records == tuple(rescored[0.7])
    assert controller.figure.layers[0].color == (0.05, 0.4, 0.95)
    assert controller.figure.title == "Risk Scores (Age Weight 0.70x)"


@pytest.mark.parametrize(
    "error",
    [FetchError("fetch_scored", "HTTP 500"), MalformedResponseError("fetch_scored", "missing risk_score")],
)
async def test_weight_change_failure_keeps_previous_figure(fake_source_factory, sample_records, error):
    source = fake_source_factory(baseline=sample_records, scored={1.5: error})
    controller = ViewController(source)
    await controller.start()
    figure_before = controller.figure

    await controller.set_weight(1.5)

    assert controller.figure is figure_before
    assert controller.records == tuple(sample_records)
    assert controller.weight == 1.5
    assert controller.status is ViewStatus.ERROR
    assert controller.last_error is error


async def test_controller_usable_after_weight_change_failure(fake_source_factory, sample_records, rescored):
    scored = {**rescored, 1.5: FetchError("fetch_scored", "HTTP 502")}
    controller = ViewController(fake_source_factory(baseline=sample_records, scored=scored))
    await controller.start()

    await controller.set_weight(1.5)
    await controller.set_weight(0.8)

    assert controller.status is ViewStatus.READY
    assert controller.last_error is None
    assert controller.figure.title == "Risk Scores (Age Weight 0.80x)"


async def test_latest_weight_wins_when_older_response_is_slower(fake_source_factory, sample_records, rescored):
    source = fake_source_factory(baseline=sample_records, scored=rescored, delays={1.5: 0.05, 0.8: 0.0})
    controller = ViewController(source)
    await controller.start()

    await asyncio.gather(controller.set_weight(1.5), controller.set_weight(0.8))

    assert controller.weight == 0.8
    assert controller.records == tuple(rescored[0.8])
    assert controller.figure.title == "Risk Scores (Age Weight 0.80x)"


async def test_superseded_weight_task_is_cancelled(fake_source_factory, sample_records, rescored):
    source = fake_source_factory(baseline=sample_records, scored=rescored, delays={1.5: 0.05})
    controller = ViewController(source)
    await controller.start()

    first = controller.change_weight(1.5)
    second = controller.change_weight(0.8)
    await asyncio.wait({first, second})

    assert first.cancelled()
    assert controller.records == tuple(rescored[0.8])


async def test_stale_baseline_response_is_discarded(fake_source_factory, sample_records, rescored):
    source = fake_source_factory(baseline=sample_records, scored=rescored)
    controller = ViewController(source)
    await controller.start()

    source.delays["baseline"] = 0.05
    reload_task = asyncio.create_task(controller.reload())
    await asyncio.sleep(0)
    await controller.set_weight(0.8)
    await reload_task

    assert controller.records == tuple(rescored[0.8])
    assert controller.figure.title == "Risk Scores (Age Weight 0.80x)"
    assert controller.status is ViewStatus.READY


async def test_weight_change_during_startup_applies_after_baseline(fake_source_factory, sample_records, rescored):
    source = fake_source_factory(baseline=sample_records, scored=rescored, delays={"baseline": 0.02})
    controller = ViewController(source)

    start_task = asyncio.create_task(controller.start())
    await asyncio.sleep(0)
    assert controller.change_weight(1.2) is None
    await start_task

    assert source.calls == [("fetch_baseline", None), ("fetch_scored", 1.2)]
    assert controller.records == tuple(rescored[1.2])
    assert controller.figure.title == "Risk Scores (Age Weight 1.20x)"


async def test_empty_recomputed_batch_keeps_figure(fake_source_factory, sample_records):
    controller = ViewController(fake_source_factory(baseline=sample_records, scored={0.7: []}))
    await controller.start()
    figure_before = controller.figure

    await controller.set_weight(0.7)

    assert controller.status is ViewStatus.EMPTY
    assert controller.figure is figure_before
    assert controller.records == tuple(sample_records)


async def test_empty_baseline_shows_no_figure(fake_source_factory):
    source = fake_source_factory(baseline=[])
    controller = ViewController(source)

    await controller.start()
    await controller.set_weight(1.5)

    assert controller.status is ViewStatus.EMPTY
    assert controller.figure is EMPTY_FIGURE
    assert source.calls == [("fetch_baseline", None)]


async def test_snapshot_reflects_state(fake_source_factory, sample_records):
    controller = ViewController(fake_source_factory(baseline=sample_records))
    await controller.start()

    snapshot = controller.snapshot()

    assert snapshot.records == tuple(sample_records)
    assert snapshot.weight == 1.0
    assert snapshot.figure is controller.figure
    assert snapshot.status is ViewStatus.READY
    assert snapshot.last_error is None


async def test_failed_catch_up_after_reload_keeps_baseline_label(fake_source_factory, sample_records):
    """A baseline batch is labelled with the weight it was scored at"""
    source = fake_source_factory(
        baseline=FetchError("fetch_baseline", "offline"),
        scored={1.5: FetchError("fetch_scored", "HTTP 502")},
    )
    controller = ViewController(source)
    await controller.start()
    await controller.set_weight(1.5)

    source.baseline = sample_records
    await controller.reload()

    assert source.calls[-1] == ("fetch_scored", 1.5)
    assert controller.weight == 1.5
    assert controller.status is ViewStatus.ERROR
    assert controller.records == tuple(sample_records)
    assert controller.figure.title == "Risk Scores (Age Weight 1.00x)"

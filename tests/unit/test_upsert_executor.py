"""
Tests del fan-out concurrente y del UpsertExecutor.
"""
import asyncio

import pytest

from sync_service.application.services.fan_out import fan_out
from sync_service.application.services.upsert_executor import UpsertExecutor
from sync_service.domain.entities.index_document import IndexDocument
from sync_service.shared.exceptions.sync import IndexNotReadyError


COLLECTION = "videos"


def _docs(*ids):
    return [
        IndexDocument(id=i, video_id="1", lang="en", title=f"t{i}", slug=f"s{i}", updated_at=0)
        for i in ids
    ]


class TestFanOut:
    @pytest.mark.asyncio
    async def test_failures_do_not_abort_siblings(self):
        async def op(item_id):
            if item_id == "b":
                raise RuntimeError("boom")

        outcome = await fan_out(["a", "b", "c"], op, max_concurrency=4, timeout_s=1, label="test")

        assert outcome.succeeded == ("a", "c")
        assert outcome.failed == {"b": "boom"}
        assert outcome.failed_ids == ("b",)
        assert outcome.attempted == 3

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self):
        async def op(item_id):
            # Los primeros terminan ultimos
            await asyncio.sleep(0.01 * (3 - int(item_id)))

        outcome = await fan_out(["0", "1", "2"], op, max_concurrency=3, timeout_s=1, label="test")

        assert outcome.succeeded == ("0", "1", "2")

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def op(item_id):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        await fan_out([str(i) for i in range(10)], op, max_concurrency=3, timeout_s=1, label="test")

        assert peak == 3

    @pytest.mark.asyncio
    async def test_slow_call_fails_with_timeout(self):
        async def op(item_id):
            if item_id == "slow":
                await asyncio.sleep(1)

        outcome = await fan_out(["fast", "slow"], op, max_concurrency=2, timeout_s=0.05, label="test")

        assert outcome.succeeded == ("fast",)
        assert "timeout" in outcome.failed["slow"]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        async def op(item_id):
            raise AssertionError("no deberia llamarse")

        outcome = await fan_out([], op, max_concurrency=1, timeout_s=1, label="test")

        assert outcome.attempted == 0


class TestUpsertExecutor:
    @pytest.mark.asyncio
    async def test_delivers_all_documents(self, fake_index):
        executor = UpsertExecutor(fake_index, COLLECTION, max_concurrency=2)

        outcome = await executor.deliver(_docs("1", "2", "3"))

        assert outcome.succeeded == ("1", "2", "3")
        assert set(fake_index.documents[COLLECTION]) == {"1", "2", "3"}
        assert fake_index.documents[COLLECTION]["2"]["title"] == "t2"

    @pytest.mark.asyncio
    async def test_partial_failure_is_reported_per_document(self, fake_index):
        fake_index.fail_upsert_ids = {"2"}
        executor = UpsertExecutor(fake_index, COLLECTION)

        outcome = await executor.deliver(_docs("1", "2", "3"))

        assert outcome.succeeded == ("1", "3")
        assert list(outcome.failed) == ["2"]

    @pytest.mark.asyncio
    async def test_not_ready_aborts_without_any_attempt(self, fake_index):
        fake_index.healthy = False
        executor = UpsertExecutor(fake_index, COLLECTION)

        with pytest.raises(IndexNotReadyError):
            await executor.deliver(_docs("1", "2"))

        assert fake_index.upsert_calls == []

    @pytest.mark.asyncio
    async def test_health_exception_counts_as_not_ready(self, fake_index):
        async def broken_health():
            raise ConnectionError("refused")

        fake_index.health = broken_health
        executor = UpsertExecutor(fake_index, COLLECTION)

        with pytest.raises(IndexNotReadyError):
            await executor.ensure_ready()

    @pytest.mark.asyncio
    async def test_respects_max_concurrency(self, fake_index):
        fake_index.slow_ids = {str(i) for i in range(8)}
        fake_index.delay_s = 0.01
        executor = UpsertExecutor(fake_index, COLLECTION, max_concurrency=2)

        await executor.deliver(_docs(*[str(i) for i in range(8)]))

        assert fake_index.max_in_flight == 2

    @pytest.mark.asyncio
    async def test_timeout_marks_document_failed(self, fake_index):
        fake_index.slow_ids = {"2"}
        fake_index.delay_s = 1
        executor = UpsertExecutor(fake_index, COLLECTION, request_timeout_s=0.05)

        outcome = await executor.deliver(_docs("1", "2"))

        assert outcome.succeeded == ("1",)
        assert outcome.failed_ids == ("2",)

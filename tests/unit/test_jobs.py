"""
Tests de integracion de los jobs: SQLite en memoria + indice en memoria.
"""
import pytest

from sync_service.core.config import Settings
from sync_service.core.jobs import CREATE_COLLECTION_JOB_NAME, SyncJobFactory
from sync_service.infrastructure.database.models import SyncServiceModel, VideoModel, VideoTranslationModel
from sync_service.infrastructure.scheduler.job_scheduler import JobScheduler, JobState
from tests.fakes import at


COLLECTION = "videos"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        INDEX_COLLECTION=COLLECTION,
        SYNC_BATCH_SIZE=2,
        SCHEDULER_TIMEZONE="UTC",
    )


@pytest.fixture
async def seeded(session_factory):
    async with session_factory() as db:
        for video_id, status, updated in [(1, "published", 10), (2, "published", 20), (3, "published", 30), (4, "draft", 40)]:
            db.add(VideoModel(id=video_id, status=status, updated_at=at(updated)))
            db.add(
                VideoTranslationModel(
                    id=video_id * 10,
                    video_id=video_id,
                    languages_code="en",
                    title=f"Video {video_id}",
                    slug=f"video-{video_id}",
                    keywords=["demo"],
                )
            )
        await db.commit()
    return session_factory


class TestSyncJobFactory:
    @pytest.mark.asyncio
    async def test_sync_ticks_drain_backlog_and_persist_watermark(self, settings, fake_index, seeded):
        factory = SyncJobFactory(settings, fake_index, seeded)

        first = await factory.run_sync_tick()
        second = await factory.run_sync_tick()

        assert first.synced == ("10", "20")
        assert second.synced == ("30",)
        assert set(fake_index.documents[COLLECTION]) == {"10", "20", "30"}
        async with seeded() as db:
            row = await db.get(SyncServiceModel, settings.SYNC_STATE_ID)
            assert row is not None
            assert row.synced_items == "30"

        third = await factory.run_sync_tick()
        assert third.status == "idle"

    @pytest.mark.asyncio
    async def test_reset_watermark_allows_resync(self, settings, fake_index, seeded):
        factory = SyncJobFactory(settings, fake_index, seeded)
        await factory.run_sync_tick()
        await factory.run_sync_tick()

        watermark = await factory.reset_watermark(at(15))
        result = await factory.run_sync_tick()

        assert watermark.last_sync_time == at(15)
        assert result.synced == ("20", "30")

    @pytest.mark.asyncio
    async def test_prune_removes_ineligible_documents(self, settings, fake_index, seeded):
        fake_index.seed(COLLECTION, "10", "40", "77", "\u00b2", "99999999999999999999")
        factory = SyncJobFactory(settings, fake_index, seeded)

        result = await factory.run_prune()

        assert result.status == "completed"
        assert set(result.pruned) == {"40", "77", "\u00b2", "99999999999999999999"}
        assert set(fake_index.documents[COLLECTION]) == {"10"}

    @pytest.mark.asyncio
    async def test_default_jobs_register_in_scheduler(self, settings, fake_index, seeded):
        factory = SyncJobFactory(settings, fake_index, seeded)
        scheduler = JobScheduler(timezone=settings.SCHEDULER_TIMEZONE)

        for job in factory.build_jobs():
            assert await scheduler.register(job) is True

        assert scheduler.job_ids == [CREATE_COLLECTION_JOB_NAME, "sync-updated-items", "prune-removed-items"]
        assert COLLECTION in fake_index.collections
        assert scheduler.get_stats("sync-updated-items").state == JobState.IDLE

        await scheduler.run_once("sync-updated-items")
        assert scheduler.get_stats("sync-updated-items").runs == 1
        assert set(fake_index.documents[COLLECTION]) == {"10", "20"}
        await scheduler.shutdown(timeout_s=5)

    @pytest.mark.asyncio
    async def test_sync_init_failure_disables_job(self, settings, fake_index):
        class BrokenSessions:
            def __call__(self):
                return self

            async def __aenter__(self):
                raise ConnectionError("db down")

            async def __aexit__(self, *exc):
                return False

        factory = SyncJobFactory(settings, fake_index, BrokenSessions())
        scheduler = JobScheduler(timezone="UTC")

        for job in factory.build_jobs():
            await scheduler.register(job)

        assert scheduler.get_stats(CREATE_COLLECTION_JOB_NAME).state == JobState.STOPPED
        assert scheduler.get_stats("sync-updated-items").state == JobState.DISABLED
        assert scheduler.get_stats("prune-removed-items").state == JobState.IDLE
        await scheduler.shutdown(timeout_s=5)

"""
Contention tests for the claim protocol.

These need real row-level locks and run against PostgreSQL at
TEST_DATABASE_URL; they are skipped when it is not reachable.
"""

import asyncio

import pytest

from jobqueue.constants import JobStatus
from jobqueue.db import Database, JobStore
from jobqueue.errors import JobNotAvailable, NoJobAvailable
from jobqueue.queue import QueueService

pytestmark = pytest.mark.postgres


class TestClaimContention:
    """Concurrent claims against a shared store."""

    @pytest.mark.parametrize(("consumers", "jobs"), [(10, 3), (8, 1), (5, 0)])
    async def test_concurrent_claim_any_is_mutually_exclusive(
        self,
        pg_service: QueueService,
        consumers: int,
        jobs: int,
    ):
        """Test that N racing consumers get K distinct jobs and N-K empty results."""
        for i in range(jobs):
            await pg_service.create(payload=f"job-{i}")

        results = await asyncio.gather(
            *(pg_service.claim_any() for _ in range(consumers)),
            return_exceptions=True,
        )

        claimed = [r for r in results if not isinstance(r, BaseException)]
        empty = [r for r in results if isinstance(r, NoJobAvailable)]

        assert len(claimed) == jobs
        assert len({job.id for job in claimed}) == jobs
        assert len(empty) == consumers - jobs
        assert all(job.status == JobStatus.CLAIMED for job in claimed)

    async def test_concurrent_claim_by_id_single_winner(
        self,
        pg_service: QueueService,
    ):
        """Test that racing claims on one id produce exactly one success."""
        job = await pg_service.create(payload="contested")

        results = await asyncio.gather(
            *(pg_service.claim_by_id(job.id) for _ in range(5)),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, JobNotAvailable)]

        assert len(winners) == 1
        assert winners[0].id == job.id
        assert len(losers) == 4

    async def test_claim_any_skips_locked_row(
        self,
        pg_database: Database,
        pg_service: QueueService,
    ):
        """Test that claim_any moves past a row another transaction holds."""
        first = await pg_service.create(payload="first")
        second = await pg_service.create(payload="second")

        async with pg_database.session() as session:
            held = await JobStore(session).lock_one_available()
            assert held.id == first.id

            claimed = await asyncio.wait_for(pg_service.claim_any(), timeout=5)
            assert claimed.id == second.id

            with pytest.raises(NoJobAvailable):
                await asyncio.wait_for(pg_service.claim_any(), timeout=5)

            await session.rollback()

        # Releasing the lock without claiming leaves the first job available
        claimed = await pg_service.claim_any()
        assert claimed.id == first.id

    async def test_claim_by_id_waits_for_lock_then_rechecks(
        self,
        pg_database: Database,
        pg_service: QueueService,
    ):
        """Test that claim_by_id blocks on a held row and loses if it was claimed."""
        job = await pg_service.create(payload="contested")

        async with pg_database.session() as session:
            store = JobStore(session)
            assert await store.lock_available_by_id(job.id) is not None
            await store.update_status(job.id, JobStatus.CLAIMED)

            waiter = asyncio.create_task(pg_service.claim_by_id(job.id))
            await asyncio.sleep(0.3)
            assert not waiter.done()

            await session.commit()

        with pytest.raises(JobNotAvailable):
            await asyncio.wait_for(waiter, timeout=5)

    async def test_claim_by_id_waits_then_claims_after_rollback(
        self,
        pg_database: Database,
        pg_service: QueueService,
    ):
        """Test that claim_by_id succeeds if the holder releases without claiming."""
        job = await pg_service.create(payload="contested")

        async with pg_database.session() as session:
            assert await JobStore(session).lock_available_by_id(job.id) is not None

            waiter = asyncio.create_task(pg_service.claim_by_id(job.id))
            await asyncio.sleep(0.3)
            assert not waiter.done()

            await session.rollback()

        claimed = await asyncio.wait_for(waiter, timeout=5)
        assert claimed.id == job.id
        assert claimed.status == JobStatus.CLAIMED

    async def test_claimed_job_never_reclaimed(self, pg_service: QueueService):
        """Test that retries after a claim keep reporting JobNotAvailable."""
        job = await pg_service.create(payload="x")
        await pg_service.claim_by_id(job.id)

        for _ in range(3):
            with pytest.raises(JobNotAvailable):
                await pg_service.claim_by_id(job.id)

"""
Unit tests for the claim protocol.

These run sequentially against SQLite; contention between open transactions
is covered by the PostgreSQL tests in tests/integration/test_concurrency.py.
"""

import pytest
from prometheus_client import REGISTRY
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.constants import JobStatus
from jobqueue.db import Database
from jobqueue.errors import JobNotAvailable, NoJobAvailable, TransactionError
from jobqueue.queue import ClaimProtocol, QueueService


def _claim_count(mode: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "claim_attempts_total", {"mode": mode, "outcome": outcome}
    )
    return value or 0.0


class TestClaimProtocol:
    """Tests for ClaimProtocol."""

    @pytest.fixture
    def claims(self, database: Database) -> ClaimProtocol:
        """Create a claim protocol instance."""
        return ClaimProtocol(database)

    async def test_claim_any_returns_claimed_job(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test that a claimed job comes back with status claimed."""
        created = await service.create(payload="p1")

        job = await claims.claim_any()

        assert job.id == created.id
        assert job.payload == "p1"
        assert job.status == JobStatus.CLAIMED

    async def test_claim_any_lowest_id_first(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test that uncontended claims come out in id order."""
        first = await service.create(payload="first")
        second = await service.create(payload="second")

        assert (await claims.claim_any()).id == first.id
        assert (await claims.claim_any()).id == second.id

    async def test_claim_any_empty_queue(self, claims: ClaimProtocol):
        """Test that an empty queue is reported as NoJobAvailable."""
        with pytest.raises(NoJobAvailable):
            await claims.claim_any()

    async def test_claim_any_persists_status(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test that the claim is committed to the store."""
        created = await service.create(payload="x")

        await claims.claim_any()

        jobs = await service.list()
        assert len(jobs) == 1
        assert jobs[0].id == created.id
        assert jobs[0].status == JobStatus.CLAIMED

    async def test_claim_by_id(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test claiming a specific job out of order."""
        await service.create(payload="a")
        target = await service.create(payload="b")

        job = await claims.claim_by_id(target.id)

        assert job.id == target.id
        assert job.status == JobStatus.CLAIMED
        # The lower id is still available
        remaining = await claims.claim_any()
        assert remaining.payload == "a"

    async def test_claim_by_id_missing(self, claims: ClaimProtocol):
        """Test that a missing job is reported as JobNotAvailable."""
        with pytest.raises(JobNotAvailable) as exc_info:
            await claims.claim_by_id(12345)

        assert exc_info.value.job_id == 12345

    async def test_claim_by_id_never_reclaims(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test that a claimed job stays unavailable no matter how often it is retried."""
        created = await service.create(payload="x")
        await claims.claim_by_id(created.id)

        for _ in range(3):
            with pytest.raises(JobNotAvailable):
                await claims.claim_by_id(created.id)

    async def test_claim_by_id_created_as_claimed(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test that a job created as claimed cannot be claimed."""
        created = await service.create(payload="x", status=JobStatus.CLAIMED)

        with pytest.raises(JobNotAvailable):
            await claims.claim_by_id(created.id)
        with pytest.raises(NoJobAvailable):
            await claims.claim_any()

    async def test_failed_commit_leaves_job_available(
        self,
        claims: ClaimProtocol,
        service: QueueService,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Test that a claim whose commit fails changes nothing."""
        created = await service.create(payload="x")

        async def failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)

        with pytest.raises(TransactionError):
            await claims.claim_by_id(created.id)
        with pytest.raises(TransactionError):
            await claims.claim_any()

        monkeypatch.undo()

        jobs = await service.list()
        assert jobs[0].status == JobStatus.AVAILABLE

        job = await claims.claim_by_id(created.id)
        assert job.id == created.id
        assert job.status == JobStatus.CLAIMED

    async def test_claim_records_metrics(
        self,
        claims: ClaimProtocol,
        service: QueueService,
    ):
        """Test that claim outcomes are counted."""
        claimed_before = _claim_count("any", "claimed")
        conflict_before = _claim_count("any", "conflict")

        await service.create(payload="x")
        await claims.claim_any()
        with pytest.raises(NoJobAvailable):
            await claims.claim_any()

        assert _claim_count("any", "claimed") == claimed_before + 1
        assert _claim_count("any", "conflict") == conflict_before + 1
        # Claimed jobs are counted once, by outcome
        assert REGISTRY.get_sample_value("jobs_claimed_total", {"mode": "any"}) is None

"""Tests for the in-memory repositories."""

import asyncio
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from sathi_seva.core.errors import DuplicateApplicationError, InvalidTransitionError, ValidationFailure
from sathi_seva.core.models import (
    ApplicationStatus,
    Job,
    JobApplication,
    JobDraft,
    JobStatus,
    UserProfile,
)
from sathi_seva.storage.memory import (
    InMemoryApplicationRepository,
    InMemoryJobRepository,
    InMemoryProfileRepository,
)


def make_draft(**overrides):
    fields = {
        "title": "Fix kitchen tap",
        "description": "Leaking tap needs a new washer",
        "location": "Koramangala",
        "amount": 400,
        "duration": "1 hour",
        "scheduled_date": "2024-05-01",
        "scheduled_time": "09:30",
        "required_tags": ["Plumbing"],
    }
    fields.update(overrides)
    return JobDraft(**fields)


class TestInMemoryJobRepository:
    """Job store behaviour."""

    @pytest.mark.asyncio
    async def test_create_stores_available_job(self):
        repository = InMemoryJobRepository()

        job = await repository.create(make_draft(), "client-1")

        assert job.status == JobStatus.AVAILABLE
        assert job.client_id == "client-1"
        assert await repository.find_by_id(job.id) == job

    @pytest.mark.asyncio
    async def test_find_available_excludes_poster_and_sorts_newest_first(self):
        base = datetime(2024, 1, 1)
        repository = InMemoryJobRepository([
            Job(id="old", client_id="a", title="Old", amount=1, created_at=base),
            Job(id="new", client_id="a", title="New", amount=1, created_at=base + timedelta(hours=1)),
            Job(id="own", client_id="viewer", title="Mine", amount=1, created_at=base + timedelta(hours=2)),
            Job(id="done", client_id="a", title="Done", amount=1, status=JobStatus.COMPLETED),
        ])

        jobs = await repository.find_available(exclude_client_id="viewer")

        assert [job.id for job in jobs] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_find_by_tags_uses_overlap(self):
        repository = InMemoryJobRepository([
            Job(id="p", client_id="a", title="Pipes", amount=1, required_tags=["Plumbing"]),
            Job(id="c", client_id="a", title="Cook", amount=1, required_tags=["Cooking"]),
        ])

        jobs = await repository.find_by_tags(["Plumbing", "Wiring"])

        assert [job.id for job in jobs] == ["p"]

    @pytest.mark.asyncio
    async def test_find_by_ids_skips_unknown_and_duplicates(self):
        repository = InMemoryJobRepository([Job(id="x", client_id="a", title="X", amount=1)])

        jobs = await repository.find_by_ids(["x", "missing", "x"])

        assert [job.id for job in jobs] == ["x"]

    @pytest.mark.asyncio
    async def test_find_for_user_covers_posted_and_assigned(self):
        repository = InMemoryJobRepository([
            Job(id="posted", client_id="u", title="A", amount=1),
            Job(id="assigned", client_id="other", title="B", amount=1, worker_id="u", status=JobStatus.ASSIGNED),
            Job(id="unrelated", client_id="other", title="C", amount=1),
        ])

        jobs = await repository.find_for_user("u")

        assert {job.id for job in jobs} == {"posted", "assigned"}

    @pytest.mark.asyncio
    async def test_returned_jobs_are_copies(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")

        job.required_tags.append("Tampered")

        stored = await repository.find_by_id(job.id)
        assert stored.required_tags == ["Plumbing"]

    @pytest.mark.asyncio
    async def test_update_merges_patch(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")

        updated = await repository.update(job.id, {"status": JobStatus.ASSIGNED, "worker_id": "w"})

        assert updated.status == JobStatus.ASSIGNED
        assert updated.worker_id == "w"
        assert updated.title == job.title
        assert updated.updated_at >= job.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_job_returns_none(self):
        assert await InMemoryJobRepository().update("missing", {"status": JobStatus.CANCELLED}) is None

    @pytest.mark.asyncio
    async def test_update_cannot_change_id(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")

        with pytest.raises(ValidationFailure):
            await repository.update(job.id, {"id": "other"})

    @pytest.mark.parametrize("amount", [0, -250])
    def test_job_amount_must_be_positive(self, amount):
        with pytest.raises(PydanticValidationError):
            Job(id="j", client_id="client-1", title="Paint fence", amount=amount)

    @pytest.mark.asyncio
    async def test_update_rejects_non_positive_amount(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")

        with pytest.raises(PydanticValidationError):
            await repository.update(job.id, {"amount": -1})

        assert (await repository.find_by_id(job.id)).amount == 400

    @pytest.mark.asyncio
    async def test_assign_worker_claims_available_job(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")

        assigned = await repository.assign_worker(job.id, "worker-1")
        again = await repository.assign_worker(job.id, "worker-1")

        assert assigned.status == JobStatus.ASSIGNED
        assert assigned.worker_id == "worker-1"
        assert again.worker_id == "worker-1"

        with pytest.raises(InvalidTransitionError):
            await repository.assign_worker(job.id, "worker-2")

        assert (await repository.find_by_id(job.id)).worker_id == "worker-1"

    @pytest.mark.asyncio
    async def test_assign_worker_refuses_closed_job(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")
        await repository.update(job.id, {"status": JobStatus.CANCELLED})

        with pytest.raises(InvalidTransitionError):
            await repository.assign_worker(job.id, "worker-1")

    @pytest.mark.asyncio
    async def test_assign_worker_unknown_job_returns_none(self):
        assert await InMemoryJobRepository().assign_worker("missing", "worker-1") is None

    @pytest.mark.asyncio
    async def test_concurrent_assignments_pick_one_worker(self):
        repository = InMemoryJobRepository()
        job = await repository.create(make_draft(), "client-1")

        results = await asyncio.gather(
            repository.assign_worker(job.id, "worker-1"),
            repository.assign_worker(job.id, "worker-2"),
            return_exceptions=True
        )

        winners = [result for result in results if isinstance(result, Job)]
        losers = [result for result in results if isinstance(result, InvalidTransitionError)]
        assert len(winners) == 1 and len(losers) == 1
        assert (await repository.find_by_id(job.id)).worker_id == winners[0].worker_id

    @pytest.mark.asyncio
    async def test_legacy_open_status_reads_as_available(self):
        legacy = Job.model_validate({"id": "legacy", "client_id": "a", "title": "Old", "amount": 1, "status": "open"})
        repository = InMemoryJobRepository([legacy])

        jobs = await repository.find_available()

        assert legacy.status == JobStatus.AVAILABLE
        assert [job.id for job in jobs] == ["legacy"]


class TestInMemoryApplicationRepository:
    """Application store behaviour."""

    @pytest.mark.asyncio
    async def test_create_is_pending(self):
        repository = InMemoryApplicationRepository()

        application = await repository.create("job-1", "worker-1", "Hello")

        assert application.status == ApplicationStatus.PENDING
        assert application.message == "Hello"
        assert await repository.find_by_id(application.id) == application

    @pytest.mark.asyncio
    async def test_duplicate_pair_is_rejected(self):
        repository = InMemoryApplicationRepository()
        await repository.create("job-1", "worker-1")

        with pytest.raises(DuplicateApplicationError):
            await repository.create("job-1", "worker-1")

        assert len(await repository.find_by_job("job-1")) == 1

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_create_one_application(self):
        repository = InMemoryApplicationRepository()

        results = await asyncio.gather(
            *(repository.create("job-1", "worker-1") for _ in range(5)),
            return_exceptions=True
        )

        errors = [result for result in results if isinstance(result, Exception)]
        assert len(errors) == 4
        assert all(isinstance(error, DuplicateApplicationError) for error in errors)

    @pytest.mark.asyncio
    async def test_find_by_worker_sorted_most_recent_first(self):
        base = datetime(2024, 1, 1)
        repository = InMemoryApplicationRepository([
            JobApplication(id="first", job_id="job-1", worker_id="worker-1", applied_at=base),
            JobApplication(id="second", job_id="job-2", worker_id="worker-1", applied_at=base + timedelta(minutes=5)),
            JobApplication(id="other", job_id="job-3", worker_id="worker-2", applied_at=base),
        ])

        applications = await repository.find_by_worker("worker-1")

        assert [application.id for application in applications] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_update_status(self):
        repository = InMemoryApplicationRepository()
        application = await repository.create("job-1", "worker-1")

        updated = await repository.update_status(application.id, ApplicationStatus.REJECTED)

        assert updated.status == ApplicationStatus.REJECTED
        assert await repository.update_status("missing", ApplicationStatus.REJECTED) is None


class TestInMemoryProfileRepository:
    """Profile store behaviour."""

    @pytest.mark.asyncio
    async def test_upsert_keeps_creation_time(self):
        repository = InMemoryProfileRepository()
        created = await repository.upsert(UserProfile(user_id="u", full_name="Asha"))

        updated = await repository.upsert(UserProfile(user_id="u", full_name="Asha K"))

        assert updated.full_name == "Asha K"
        assert updated.created_at == created.created_at
        assert (await repository.find_by_user_id("u")).full_name == "Asha K"

    @pytest.mark.asyncio
    async def test_unknown_user_returns_none(self):
        assert await InMemoryProfileRepository().find_by_user_id("nobody") is None

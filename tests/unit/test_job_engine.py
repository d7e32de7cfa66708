"""Unit tests for the job engine and the publish/unpublish handlers."""

import json
import uuid
from datetime import date

import httpx
import pytest
from sqlalchemy import func, select

from pubflow.exceptions import (
    ConflictError,
    InvalidPayload,
    JobFailed,
    PreconditionFailed,
    StorageNotConfigured,
    SubmissionNotFound,
)
from pubflow.jobs.engine import JobEngine
from pubflow.jobs.payloads import parse_payload
from pubflow.jobs.handlers.unpublish import NO_COPY_MESSAGE
from pubflow.jobs.types import JobStatus, JobType
from pubflow.kernel.models import ActivityType, Job
from pubflow.services import Analytics, Notifier
from pubflow.storage import InMemoryStorageBackend, StorageError, StorageTier

SITE = "demo"
PRV_CDN = "https://prv.cdn.test/"
PUB_CDN = "https://pub.cdn.test/"


def _payload(version, **overrides) -> dict:
    data = {
        "site_name": SITE,
        "submission_version_id": str(version.id),
        "cdn": version.cdn,
        "key": version.cdn_key,
    }
    data.update(overrides)
    return data


async def _job_count(session_maker) -> int:
    async with session_maker() as session:
        return await session.scalar(select(func.count()).select_from(Job))


def _engine_with(storage, versions, jobs, activity, notifier, analytics, registry) -> JobEngine:
    return JobEngine(
        versions=versions,
        jobs=jobs,
        activity=activity,
        storage=storage,
        notifier=notifier,
        analytics=analytics,
        registry=registry,
    )


class TestUnpublish:
    """Unpublish branches by where copies exist."""

    @pytest.mark.asyncio
    async def test_public_copy_only_is_moved_to_private(self, job_engine, storage, versions, make_version):
        """Content only in the public tier ends up only in the private tier."""
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html", b"<html/>")

        job = await job_engine.run(JobType.UNPUBLISH, _payload(version))

        assert job.status == JobStatus.COMPLETED.value
        assert job.message == "Unpublishing complete."
        assert job.results == {"key": "k1", "files_transferred": True, "submission_updated": True}
        assert not await storage.exists(StorageTier.PUB, "k1")
        assert storage.read(StorageTier.PRV, "k1/index.html") == b"<html/>"

        updated = await versions.get(version.id)
        assert updated.status == "UNPUBLISHED"
        assert updated.cdn == PRV_CDN
        assert updated.transition is None

    @pytest.mark.asyncio
    async def test_both_copies_deletes_public(self, job_engine, storage, versions, make_version):
        """With a private copy already present, only the public copy is removed."""
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html", b"public")
        storage.put(StorageTier.PRV, "k1/index.html", b"private")

        job = await job_engine.run(JobType.UNPUBLISH, _payload(version))

        assert job.status == JobStatus.COMPLETED.value
        assert not await storage.exists(StorageTier.PUB, "k1")
        assert storage.read(StorageTier.PRV, "k1/index.html") == b"private"
        assert (await versions.get(version.id)).cdn == PRV_CDN

    @pytest.mark.asyncio
    async def test_private_copy_only(self, job_engine, storage, versions, make_version):
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PRV, "k1/index.html")

        job = await job_engine.run(JobType.UNPUBLISH, _payload(version))

        assert job.status == JobStatus.COMPLETED.value
        assert job.results["files_transferred"] is True
        updated = await versions.get(version.id)
        assert updated.status == "UNPUBLISHED"
        assert updated.cdn == PRV_CDN

    @pytest.mark.asyncio
    async def test_no_copy_anywhere_fails(self, job_engine, versions, jobs, make_version):
        """Missing content fails the job and leaves the version alone."""
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")

        with pytest.raises(PreconditionFailed) as exc_info:
            await job_engine.run(JobType.UNPUBLISH, _payload(version))

        assert exc_info.value.status_code == 422
        job = await jobs.get(uuid.UUID(exc_info.value.context["job_id"]))
        assert job.status == JobStatus.FAILED.value
        assert NO_COPY_MESSAGE in job.message
        assert "No copy of the work version exists in the pub or prv bucket" in job.message

        unchanged = await versions.get(version.id)
        assert unchanged.status == "PUBLISHED"
        assert unchanged.cdn == PUB_CDN

    @pytest.mark.asyncio
    async def test_private_reference_left_alone(self, job_engine, storage, versions, make_version):
        """Content already referenced from the private tier is not touched."""
        version = await make_version(status="PUBLISHED", cdn=PRV_CDN, key="k1")
        storage.put(StorageTier.PRV, "k1/index.html")

        job = await job_engine.run(JobType.UNPUBLISH, _payload(version))

        assert job.results == {"key": "k1", "files_transferred": False, "submission_updated": True}
        assert (await versions.get(version.id)).status == "UNPUBLISHED"

    @pytest.mark.asyncio
    async def test_retract_targets_retracted(self, job_engine, storage, versions, make_version):
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html")

        await job_engine.run(JobType.RETRACT, _payload(version))

        assert (await versions.get(version.id)).status == "RETRACTED"

    @pytest.mark.asyncio
    async def test_activity_records_start_and_completion(self, job_engine, storage, activity, make_version):
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html")

        await job_engine.run(JobType.UNPUBLISH, _payload(version))

        types = {entry.activity_type for entry in await activity.history(version.id)}
        assert types == {ActivityType.JOB_STARTED.value, ActivityType.JOB_COMPLETED.value}


class TestPublish:
    """Publish copies content to the public tier."""

    @pytest.mark.asyncio
    async def test_publish_from_private(self, job_engine, storage, versions, make_version):
        version = await make_version(status="PENDING", cdn=PRV_CDN, key="k1")
        storage.put(StorageTier.PRV, "k1/index.html", b"<html/>")

        job = await job_engine.run(
            JobType.PUBLISH,
            _payload(version, date_published="2026-10-19", updates_slug=True),
        )

        assert job.status == JobStatus.COMPLETED.value
        assert job.message == "Publishing complete."
        assert job.results == {
            "key": "k1",
            "cdn": PRV_CDN,
            "files_transferred": True,
            "submission_updated": True,
            "date_published_updated": True,
            "slug_updated": True,
        }
        assert storage.read(StorageTier.PUB, "k1/index.html") == b"<html/>"
        assert await storage.exists(StorageTier.PRV, "k1")

        updated = await versions.get(version.id)
        assert updated.status == "PUBLISHED"
        assert updated.cdn == PUB_CDN
        assert updated.date_published == date(2026, 10, 19)
        assert updated.slug == "a-study-of-things"

    @pytest.mark.asyncio
    async def test_publish_missing_folder(self, job_engine, versions, make_version):
        version = await make_version(status="PENDING", cdn=PRV_CDN, key="k1")

        with pytest.raises(PreconditionFailed) as exc_info:
            await job_engine.run(JobType.PUBLISH, _payload(version))

        assert exc_info.value.detail == f"Folder does not exist {PRV_CDN}/k1"
        assert (await versions.get(version.id)).status == "PENDING"


class TestEngineValidation:
    """Failures raised before any job row exists."""

    @pytest.mark.asyncio
    async def test_unknown_job_type(self, job_engine, session_maker, make_version):
        version = await make_version()
        with pytest.raises(InvalidPayload):
            await job_engine.run("REINDEX", _payload(version))
        assert await _job_count(session_maker) == 0

    @pytest.mark.asyncio
    async def test_malformed_payload(self, job_engine, session_maker):
        with pytest.raises(InvalidPayload):
            await job_engine.run(JobType.UNPUBLISH, {"site_name": SITE})
        assert await _job_count(session_maker) == 0

    @pytest.mark.asyncio
    async def test_storage_not_configured(
        self, versions, jobs, activity, notifier, analytics, registry, session_maker, make_version
    ):
        engine = _engine_with(None, versions, jobs, activity, notifier, analytics, registry)
        version = await make_version()

        with pytest.raises(StorageNotConfigured) as exc_info:
            await engine.run(JobType.UNPUBLISH, _payload(version))

        assert exc_info.value.status_code == 500
        assert await _job_count(session_maker) == 0

    @pytest.mark.asyncio
    async def test_unknown_version(self, job_engine, session_maker, make_version):
        version = await make_version()
        with pytest.raises(SubmissionNotFound):
            await job_engine.run(
                JobType.UNPUBLISH, _payload(version, submission_version_id=str(uuid.uuid4()))
            )
        assert await _job_count(session_maker) == 0

    @pytest.mark.asyncio
    async def test_target_state_outside_workflow(self, job_engine, make_version):
        version = await make_version()
        with pytest.raises(InvalidPayload):
            await job_engine.run(JobType.UNPUBLISH, _payload(version, target_state="ARCHIVED"))

    @pytest.mark.asyncio
    async def test_unknown_workflow_uses_default_target(self, job_engine, make_version):
        version = await make_version(workflow_name="CUSTOM")
        target = job_engine.resolve_target_state(
            JobType.RETRACT, parse_payload(_payload(version)), version
        )
        assert target == "RETRACTED"


class FailingStorage(InMemoryStorageBackend):
    """Blob store whose object copies always fail."""

    async def copy_object(self, name, new_name, from_tier, to_tier):
        raise StorageError("disk full")


class BrokenListingStorage(InMemoryStorageBackend):
    async def list_objects(self, tier, key):
        raise OSError("connection reset")


class SdkErrorStorage(InMemoryStorageBackend):
    """Blob store whose client raises its own exception type."""

    async def copy_object(self, name, new_name, from_tier, to_tier):
        raise RuntimeError("sdk client error")


class TestStorageFailures:
    """Storage errors fail the job with a 500."""

    @pytest.mark.asyncio
    async def test_move_failure(self, versions, jobs, activity, notifier, analytics, registry, make_version):
        storage = FailingStorage({StorageTier.PRV: PRV_CDN, StorageTier.PUB: PUB_CDN})
        storage.put(StorageTier.PUB, "k1/index.html")
        engine = _engine_with(storage, versions, jobs, activity, notifier, analytics, registry)
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")

        with pytest.raises(JobFailed) as exc_info:
            await engine.run(JobType.UNPUBLISH, _payload(version))

        job = await jobs.get(uuid.UUID(exc_info.value.context["job_id"]))
        assert job.status == JobStatus.FAILED.value
        assert job.message == "Error moving public copy to prv bucket: disk full"
        assert job.results == {"key": "k1", "files_transferred": False}
        assert (await versions.get(version.id)).status == "PUBLISHED"

        types = {entry.activity_type for entry in await activity.history(version.id)}
        assert ActivityType.JOB_FAILED.value in types

    @pytest.mark.asyncio
    async def test_unexpected_storage_error(
        self, versions, jobs, activity, notifier, analytics, registry, make_version
    ):
        storage = BrokenListingStorage({StorageTier.PRV: PRV_CDN, StorageTier.PUB: PUB_CDN})
        engine = _engine_with(storage, versions, jobs, activity, notifier, analytics, registry)
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")

        with pytest.raises(JobFailed) as exc_info:
            await engine.run(JobType.UNPUBLISH, _payload(version))

        assert exc_info.value.status_code == 500
        job = await jobs.get(uuid.UUID(exc_info.value.context["job_id"]))
        assert job.message == "Storage operation failed: connection reset"

    @pytest.mark.asyncio
    async def test_non_storage_error_fails_job(
        self, versions, jobs, activity, notifier, analytics, registry, make_version
    ):
        """Errors outside the storage and domain hierarchies still end the job FAILED."""
        storage = SdkErrorStorage({StorageTier.PRV: PRV_CDN, StorageTier.PUB: PUB_CDN})
        storage.put(StorageTier.PUB, "k1/index.html")
        engine = _engine_with(storage, versions, jobs, activity, notifier, analytics, registry)
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")

        with pytest.raises(JobFailed) as exc_info:
            await engine.run(JobType.UNPUBLISH, _payload(version))

        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        job = await jobs.get(uuid.UUID(exc_info.value.context["job_id"]))
        assert job.status == JobStatus.FAILED.value
        assert job.message == "Job failed unexpectedly: sdk client error"
        assert (await versions.get(version.id)).status == "PUBLISHED"

        types = {entry.activity_type for entry in await activity.history(version.id)}
        assert ActivityType.JOB_FAILED.value in types
        assert ActivityType.JOB_COMPLETED.value not in types


class TestConcurrentChange:
    """The final status write is guarded by the status the job started from."""

    @pytest.mark.asyncio
    async def test_status_changed_during_job(self, job_engine, storage, versions, jobs, make_version, monkeypatch):
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html")
        original_move = storage.move

        async def move_then_race(key, from_tier, to_tier):
            await original_move(key, from_tier, to_tier)
            current = await versions.get(version.id)
            await versions.update(version.id, current.occ, status="RETRACTED")

        monkeypatch.setattr(storage, "move", move_then_race)

        with pytest.raises(ConflictError) as exc_info:
            await job_engine.run(JobType.UNPUBLISH, _payload(version))

        assert exc_info.value.status_code == 409
        job = await jobs.get(uuid.UUID(exc_info.value.context["job_id"]))
        assert job.status == JobStatus.FAILED.value
        assert job.message.startswith("Error updating submission status: ")
        assert job.results["files_transferred"] is True
        assert "submission_updated" not in job.results
        assert (await versions.get(version.id)).status == "RETRACTED"


def _recording_transport(status_code: int, requests: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code)

    return httpx.MockTransport(handler)


class TestSideEffects:
    """Notifications and analytics never decide a job's outcome."""

    @pytest.mark.asyncio
    async def test_failing_sinks_do_not_fail_job(
        self, storage, versions, jobs, activity, registry, make_version
    ):
        failing = httpx.MockTransport(lambda request: httpx.Response(500))
        notifier = Notifier("https://hooks.test/abc", transport=failing)
        analytics = Analytics("https://analytics.test/events", transport=failing)
        engine = _engine_with(storage, versions, jobs, activity, notifier, analytics, registry)
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html")

        job = await engine.run(JobType.UNPUBLISH, _payload(version))

        assert job.status == JobStatus.COMPLETED.value
        assert job.results["submission_updated"] is True
        assert (await versions.get(version.id)).status == "UNPUBLISHED"
        assert (await jobs.get(job.id)).status == JobStatus.COMPLETED.value

    @pytest.mark.asyncio
    async def test_completion_is_tracked(self, storage, versions, jobs, activity, notifier, registry, make_version):
        requests = []
        analytics = Analytics("https://analytics.test/events", transport=_recording_transport(200, requests))
        engine = _engine_with(storage, versions, jobs, activity, notifier, analytics, registry)
        version = await make_version(status="PUBLISHED", cdn=PUB_CDN, key="k1")
        storage.put(StorageTier.PUB, "k1/index.html")

        job = await engine.run(JobType.UNPUBLISH, _payload(version))

        events = [json.loads(request.content) for request in requests]
        assert [event["event"] for event in events] == ["submission_status_changed", "job_completed"]
        completed = events[-1]["properties"]
        assert completed["job_id"] == str(job.id)
        assert completed["job_type"] == "UNPUBLISH"
        assert completed["site"] == SITE
        assert completed["target_state"] == "UNPUBLISHED"

"""
Publish handler - make a submission's content public.

Content is copied (not moved) from the private tier so the private copy
stays the source of truth.
"""

from pubflow.exceptions import JobFailed, PreconditionFailed
from pubflow.jobs.handlers.base import STORAGE_ERRORS, JobRun
from pubflow.kernel.models.job import Job
from pubflow.storage import StorageTier


async def run_publish(run: JobRun) -> Job:
    payload = run.payload
    storage = run.storage
    results = run.results

    source = await run.source_tier()
    if not await storage.exists(source, payload.key):
        await run.abort(PreconditionFailed, f"Folder does not exist {payload.cdn}/{payload.key}")

    if source != StorageTier.PUB:
        try:
            await storage.copy(payload.key, source, StorageTier.PUB)
        except STORAGE_ERRORS as e:
            await run.abort(JobFailed, "Error copying folder", e)
    results.mark_files_transferred()
    await run.recorder.running("Files transferred to new location")

    await run.update_reference(StorageTier.PUB)

    extra = {}
    if payload.date_published is not None:
        extra["date_published"] = payload.date_published
    updated = await run.update_status(**extra)
    if payload.date_published is not None:
        results.mark_date_published_updated()

    if payload.updates_slug:
        updated = await run.apply_slug(updated)
        results.mark_slug_updated()

    await run.announce(updated)
    return await run.recorder.complete("Publishing complete.")

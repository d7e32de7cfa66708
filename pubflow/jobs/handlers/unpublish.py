"""
Unpublish handler - withdraw content from the public tier.

Also runs retract jobs; only the target state differs.

Branches, for content referenced from the public tier:
- public and private copies: delete the public copy
- public copy only: move it to the private tier
- private copy only: nothing to move
- no copy anywhere: refuse (422)
Content already referenced from the private tier is left alone.
"""

from pubflow.exceptions import JobFailed, PreconditionFailed
from pubflow.jobs.handlers.base import STORAGE_ERRORS, JobRun
from pubflow.kernel.models.job import Job
from pubflow.storage import StorageTier

NO_COPY_MESSAGE = "Cannot Unpublish - No copy of the work version exists in the pub or prv bucket"


async def run_unpublish(run: JobRun) -> Job:
    key = run.payload.key
    storage = run.storage
    recorder = run.recorder
    results = run.results

    if await run.source_tier() == StorageTier.PUB:
        if await storage.exists(StorageTier.PUB, key):
            await recorder.running("Found the work version in the pub bucket")
            if await storage.exists(StorageTier.PRV, key):
                try:
                    await storage.delete(StorageTier.PUB, key)
                except STORAGE_ERRORS as e:
                    await run.abort(JobFailed, "Error removing public copy", e)
            else:
                try:
                    await storage.move(key, StorageTier.PUB, StorageTier.PRV)
                except STORAGE_ERRORS as e:
                    await run.abort(JobFailed, "Error moving public copy to prv bucket", e)
            results.mark_files_transferred()
            await recorder.running("Files transferred to new location")
        else:
            await recorder.running("No work version found in the pub bucket")
            if not await storage.exists(StorageTier.PRV, key):
                await run.abort(PreconditionFailed, NO_COPY_MESSAGE)
            results.mark_files_transferred()
            await recorder.running("Work version found in prv bucket")

        await run.update_reference(StorageTier.PRV)

    updated = await run.update_status()
    await run.announce(updated)
    return await recorder.complete("Unpublishing complete.")

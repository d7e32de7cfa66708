"""
API v1 routes.
"""

from fastapi import APIRouter

from pubflow.api.v1 import jobs, submissions, workflows

router = APIRouter()

router.include_router(workflows.router, tags=["Workflows"])
router.include_router(submissions.router, tags=["Submission Versions"])
router.include_router(jobs.router, tags=["Jobs"])

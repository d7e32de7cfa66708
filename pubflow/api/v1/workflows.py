"""Workflow catalog endpoints."""

from fastapi import APIRouter

from pubflow.api.deps import Registry
from pubflow.schemas.workflow import WorkflowListResponse, WorkflowSummary
from pubflow.workflow import Workflow

router = APIRouter()


@router.get("/workflows", response_model=WorkflowListResponse)
async def list_workflows(registry: Registry):
    """List registered workflows."""
    items = [WorkflowSummary.from_workflow(w) for w in registry.all().values()]
    return WorkflowListResponse(items=items, total=len(items))


@router.get("/workflows/{name}", response_model=Workflow)
async def get_workflow(name: str, registry: Registry):
    """Full workflow definition (states, transitions, labels)."""
    return registry.get(name)

"""Workflow listing schemas."""

from typing import List

from pydantic import BaseModel

from pubflow.workflow import Workflow


class WorkflowSummary(BaseModel):
    name: str
    label: str
    version: int
    initial_state: str
    states: List[str]
    transitions: List[str]

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> "WorkflowSummary":
        return cls(
            name=workflow.name,
            label=workflow.label,
            version=workflow.version,
            initial_state=workflow.initial_state,
            states=workflow.state_names,
            transitions=[t.name for t in workflow.transitions],
        )


class WorkflowListResponse(BaseModel):
    items: List[WorkflowSummary]
    total: int

"""
Transition lookups over a workflow.

Every function here is pure and total: absence is returned as None or an
empty list, never raised.
"""

from typing import List, Optional

from pubflow.jobs.types import JobType
from pubflow.workflow.models import Workflow, WorkflowState, WorkflowTransition


def get_workflow_state(workflow: Workflow, state_name: str) -> Optional[WorkflowState]:
    return workflow.states.get(state_name)


def is_published(workflow: Workflow, state_name: str) -> bool:
    state = get_workflow_state(workflow, state_name)
    return bool(state and state.published)


def is_visible(workflow: Workflow, state_name: str) -> bool:
    state = get_workflow_state(workflow, state_name)
    return bool(state and state.visible)


def get_all_transitions_with_source_state(
    workflow: Workflow, state_name: str
) -> List[WorkflowTransition]:
    """Transitions leaving state_name, in declaration order."""
    return [t for t in workflow.transitions if t.source_state_name == state_name]


def get_all_transitions_with_target_state(
    workflow: Workflow, state_name: str
) -> List[WorkflowTransition]:
    """Transitions entering state_name, in declaration order."""
    return [t for t in workflow.transitions if t.target_state_name == state_name]


def get_valid_transition(
    workflow: Workflow, from_state: str, to_state: str
) -> Optional[WorkflowTransition]:
    """First transition declared from from_state to to_state, if any."""
    for transition in workflow.transitions:
        if transition.source_state_name == from_state and transition.target_state_name == to_state:
            return transition
    return None


def can_transition_to(workflow: Workflow, from_state: str, to_state: str) -> bool:
    return get_valid_transition(workflow, from_state, to_state) is not None


def requires_job(transition: WorkflowTransition) -> bool:
    return transition.requires_job


def get_job_type(transition: WorkflowTransition) -> Optional[JobType]:
    if not transition.requires_job:
        return None
    return transition.job_type


def infer_job_transition(
    workflow: Workflow, from_state: str, job_type: JobType
) -> Optional[WorkflowTransition]:
    """
    Pick the transition a job of job_type most likely stands for.

    Used when a job is started without an explicit target state. A
    transition from from_state that declares job_type wins; otherwise the
    first transition whose target matches the job direction: published for
    PUBLISH, neither published nor visible for UNPUBLISH and RETRACT.
    """
    candidates = get_all_transitions_with_source_state(workflow, from_state)
    for transition in candidates:
        if transition.job_type == job_type:
            return transition

    for transition in candidates:
        target = get_workflow_state(workflow, transition.target_state_name)
        if target is None:
            continue
        if job_type == JobType.PUBLISH and target.published:
            return transition
        if job_type != JobType.PUBLISH and not target.published and not target.visible:
            return transition
    return None

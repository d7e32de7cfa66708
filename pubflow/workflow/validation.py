"""
Structural checks for workflow definitions.

These are lint-style checks: they report problems as strings and leave the
decision to reject a workflow to the caller.
"""

from collections import Counter
from typing import List, Tuple

from pubflow.workflow.models import Workflow, WorkflowState, WorkflowTransition


def _validate_state(state: WorkflowState) -> List[str]:
    errors: List[str] = []
    if not state.name:
        errors.append("State must have a name")
    if not state.label:
        errors.append("State must have a label")
    return errors


def _validate_transition(workflow: Workflow, transition: WorkflowTransition) -> List[str]:
    errors: List[str] = []
    if not transition.name:
        errors.append("Transition must have a name")
    if transition.source_state_name not in workflow.states:
        errors.append(f"Unknown source state {transition.source_state_name}")
    if transition.target_state_name not in workflow.states:
        errors.append(f"Unknown target state {transition.target_state_name}")
    if not transition.help:
        errors.append("Transition must have help text")
    if transition.requires_job and transition.job_type is None:
        errors.append("Transition requires a job but declares no job type")
    return errors


def validate_workflow(workflow: Workflow) -> List[str]:
    """
    Validate a workflow definition.

    Returns:
        List of problems, empty if the workflow is well formed
    """
    errors: List[str] = []

    if not workflow.name:
        errors.append("Workflow must have a name")
    if not workflow.label:
        errors.append("Workflow must have a label")
    if workflow.initial_state not in workflow.states:
        errors.append(f"Initial state {workflow.initial_state} does not exist in states")

    for name, state in workflow.states.items():
        errors.extend(f"State {name}: {err}" for err in _validate_state(state))
        if state.name != name:
            errors.append(f"State {name}: key does not match state name {state.name}")

    for index, transition in enumerate(workflow.transitions):
        errors.extend(
            f"Transition {index}: {err}" for err in _validate_transition(workflow, transition)
        )

    return errors


def find_ambiguous_transitions(workflow: Workflow) -> List[Tuple[str, str]]:
    """(source, target) pairs declared by more than one transition."""
    counts = Counter(
        (t.source_state_name, t.target_state_name) for t in workflow.transitions
    )
    return [pair for pair, count in counts.items() if count > 1]

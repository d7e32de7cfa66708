"""
Workflow layer - declarative state machines for submission lifecycles.
"""

from pubflow.workflow.builtin import (
    BUILTIN_WORKFLOWS,
    CLOSED_REVIEW_WORKFLOW,
    OPEN_REVIEW_WORKFLOW,
    PRIVATE_SITE_WORKFLOW,
    SIMPLE_PUBLIC_WORKFLOW,
    StateNames,
)
from pubflow.workflow.models import (
    TransitionLabels,
    TransitionOptions,
    Workflow,
    WorkflowRegistration,
    WorkflowState,
    WorkflowTransition,
    make_isolated_state,
)
from pubflow.workflow.registry import WorkflowRegistry, load_registrations
from pubflow.workflow.transitions import (
    can_transition_to,
    get_all_transitions_with_source_state,
    get_all_transitions_with_target_state,
    get_job_type,
    get_valid_transition,
    get_workflow_state,
    infer_job_transition,
    is_published,
    is_visible,
    requires_job,
)
from pubflow.workflow.validation import find_ambiguous_transitions, validate_workflow

__all__ = [
    # Definitions
    "Workflow",
    "WorkflowState",
    "WorkflowTransition",
    "TransitionLabels",
    "TransitionOptions",
    "WorkflowRegistration",
    "make_isolated_state",
    # Built-ins
    "BUILTIN_WORKFLOWS",
    "SIMPLE_PUBLIC_WORKFLOW",
    "PRIVATE_SITE_WORKFLOW",
    "OPEN_REVIEW_WORKFLOW",
    "CLOSED_REVIEW_WORKFLOW",
    "StateNames",
    # Registry
    "WorkflowRegistry",
    "load_registrations",
    # Lookups
    "can_transition_to",
    "get_valid_transition",
    "get_all_transitions_with_source_state",
    "get_all_transitions_with_target_state",
    "get_workflow_state",
    "is_published",
    "is_visible",
    "requires_job",
    "get_job_type",
    "infer_job_transition",
    # Validation
    "validate_workflow",
    "find_ambiguous_transitions",
]

"""
Built-in workflows registered with every catalog.

SIMPLE          public sites, editors publish straight from PENDING
PRIVATE         private sites, same graph as SIMPLE
OPEN_REVIEW     review happens in the open (IN_REVIEW is visible)
CLOSED_REVIEW   review happens behind closed doors (IN_REVIEW is hidden)
"""

from pubflow.jobs.types import JobType
from pubflow.scopes import PUBLISHING_SCOPES, SITE_SUBMISSIONS_UPDATE
from pubflow.workflow.models import (
    TransitionLabels,
    TransitionOptions,
    Workflow,
    WorkflowState,
    WorkflowTransition,
)


class StateNames:
    DRAFT = "DRAFT"
    INCOMPLETE = "INCOMPLETE"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    IN_REVIEW = "IN_REVIEW"
    PUBLISHED = "PUBLISHED"
    UNPUBLISHED = "UNPUBLISHED"
    RETRACTED = "RETRACTED"


def _state(
    name: str,
    label: str,
    *tags: str,
    visible: bool = False,
    published: bool = False,
    author_only: bool = False,
    inbox: bool = False,
) -> WorkflowState:
    return WorkflowState(
        name=name,
        label=label,
        visible=visible,
        published=published,
        author_only=author_only,
        inbox=inbox,
        tags=tags,
    )


def _labels(action: str, in_progress: str, confirmation: str, success: str) -> TransitionLabels:
    return TransitionLabels(
        action=action,
        in_progress=in_progress,
        button=action,
        confirmation=confirmation,
        success=success,
    )


def _simple(name: str, source: str, target: str, labels: TransitionLabels, help: str) -> WorkflowTransition:
    return WorkflowTransition(
        name=name,
        source_state_name=source,
        target_state_name=target,
        labels=labels,
        requires_job=False,
        required_scopes=(SITE_SUBMISSIONS_UPDATE,),
        help=help,
    )


def _job(
    name: str,
    source: str,
    target: str,
    labels: TransitionLabels,
    help: str,
    job_type: JobType,
    sets_published_date: bool = False,
    updates_slug: bool = False,
) -> WorkflowTransition:
    return WorkflowTransition(
        name=name,
        source_state_name=source,
        target_state_name=target,
        labels=labels,
        requires_job=True,
        required_scopes=PUBLISHING_SCOPES,
        help=help,
        options=TransitionOptions(
            job_type=job_type,
            sets_published_date=sets_published_date,
            updates_slug=updates_slug,
        ),
    )


def _reject() -> WorkflowTransition:
    return _simple(
        "reject",
        StateNames.PENDING,
        StateNames.REJECTED,
        _labels(
            "Reject",
            "Rejecting...",
            "Are you sure you want to reject this submission?",
            "Submission rejected successfully",
        ),
        "Reject the submission",
    )


def _reset() -> WorkflowTransition:
    return _simple(
        "reset",
        StateNames.REJECTED,
        StateNames.PENDING,
        _labels(
            "Reset",
            "Resetting...",
            "Are you sure you want to reset this submission?",
            "Submission reset successfully",
        ),
        "Reset the submission to pending",
    )


def _reset_from_unpublished() -> WorkflowTransition:
    return _simple(
        "reset_from_unpublished",
        StateNames.UNPUBLISHED,
        StateNames.PENDING,
        _labels(
            "Reset",
            "Resetting...",
            "Are you sure you want to reset this submission from unpublished?",
            "Submission reset successfully",
        ),
        "Reset the submission from unpublished to pending",
    )


def _start_review() -> WorkflowTransition:
    return _simple(
        "start_review",
        StateNames.PENDING,
        StateNames.IN_REVIEW,
        _labels(
            "Start Review",
            "Starting review...",
            "Are you sure you want to start reviewing this submission?",
            "Review started successfully",
        ),
        "Start reviewing the submission",
    )


def _publish(source: str) -> WorkflowTransition:
    return _job(
        "publish",
        source,
        StateNames.PUBLISHED,
        _labels(
            "Publish",
            "Publishing...",
            "Are you sure you want to publish this submission?",
            "Submission publishing started",
        ),
        "Start publishing the submission",
        JobType.PUBLISH,
        sets_published_date=True,
        updates_slug=True,
    )


def _unpublish() -> WorkflowTransition:
    return _job(
        "unpublish",
        StateNames.PUBLISHED,
        StateNames.UNPUBLISHED,
        _labels(
            "Unpublish",
            "Unpublishing...",
            "Are you sure you want to unpublish this submission?",
            "Submission unpublishing started",
        ),
        "Start unpublishing the submission",
        JobType.UNPUBLISH,
    )


def _retract() -> WorkflowTransition:
    return _job(
        "retract",
        StateNames.PUBLISHED,
        StateNames.RETRACTED,
        _labels(
            "Retract",
            "Retracting...",
            "Are you sure you want to retract this publication?",
            "Submission retraction started",
        ),
        "Start retracting the submission",
        JobType.RETRACT,
    )


def _common_states(author_tags: tuple, end_tags: bool) -> dict:
    """States shared by every built-in workflow."""
    rejected = ("error", "end") if end_tags else ("ok",)
    published = ("ok", "end") if end_tags else ("ok",)
    return {
        StateNames.DRAFT: _state(StateNames.DRAFT, "Draft", *author_tags, author_only=True),
        StateNames.INCOMPLETE: _state(
            StateNames.INCOMPLETE, "Incomplete", *author_tags, author_only=True
        ),
        StateNames.PENDING: _state(StateNames.PENDING, "Pending", "ok", inbox=True),
        StateNames.REJECTED: _state(StateNames.REJECTED, "Rejected", *rejected),
        StateNames.PUBLISHED: _state(
            StateNames.PUBLISHED, "Published", *published, visible=True, published=True
        ),
        StateNames.UNPUBLISHED: _state(StateNames.UNPUBLISHED, "Unpublished", "ok"),
        StateNames.RETRACTED: _state(StateNames.RETRACTED, "Retracted", *rejected),
    }


def _mermaid(edges: list) -> str:
    lines = ["graph TD"]
    lines.extend(f"    {source} -->|{name}| {target}" for name, source, target in edges)
    return "\n".join(lines)


def _with_mermaid(workflow: Workflow) -> Workflow:
    edges = [
        (t.name, t.source_state_name, t.target_state_name) for t in workflow.transitions
    ]
    return workflow.model_copy(update={"mermaid": _mermaid(edges)})


SIMPLE_PUBLIC_WORKFLOW = _with_mermaid(Workflow(
    name="SIMPLE",
    label="Simple Workflow (Public Sites)",
    initial_state=StateNames.PENDING,
    states=_common_states((), end_tags=True),
    transitions=(
        _reject(),
        _reset(),
        _publish(StateNames.PENDING),
        _unpublish(),
        _retract(),
        _reset_from_unpublished(),
    ),
))

PRIVATE_SITE_WORKFLOW = _with_mermaid(Workflow(
    name="PRIVATE",
    label="Private Site Workflow",
    initial_state=StateNames.PENDING,
    states=_common_states(("ok",), end_tags=True),
    transitions=(
        _reject(),
        _reset(),
        _publish(StateNames.PENDING),
        _unpublish(),
        _reset_from_unpublished(),
        _retract(),
    ),
))

OPEN_REVIEW_WORKFLOW = _with_mermaid(Workflow(
    name="OPEN_REVIEW",
    label="Open Review Workflow",
    initial_state=StateNames.PENDING,
    states={
        **_common_states(("ok",), end_tags=False),
        StateNames.IN_REVIEW: _state(
            StateNames.IN_REVIEW, "In Review", "ok", visible=True, inbox=True
        ),
    },
    transitions=(
        _start_review(),
        _reject(),
        _reset(),
        _publish(StateNames.IN_REVIEW),
        _unpublish(),
        _reset_from_unpublished(),
        _retract(),
    ),
))

CLOSED_REVIEW_WORKFLOW = _with_mermaid(Workflow(
    name="CLOSED_REVIEW",
    label="Closed Review Workflow",
    initial_state=StateNames.PENDING,
    states={
        **_common_states(("ok",), end_tags=False),
        StateNames.IN_REVIEW: _state(
            StateNames.IN_REVIEW, "In Review", "ok", visible=False, inbox=True
        ),
    },
    transitions=(
        _start_review(),
        _reject(),
        _reset(),
        _publish(StateNames.IN_REVIEW),
        _unpublish(),
        _reset_from_unpublished(),
        _retract(),
    ),
))

BUILTIN_WORKFLOWS = (
    SIMPLE_PUBLIC_WORKFLOW,
    PRIVATE_SITE_WORKFLOW,
    OPEN_REVIEW_WORKFLOW,
    CLOSED_REVIEW_WORKFLOW,
)

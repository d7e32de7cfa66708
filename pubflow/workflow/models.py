"""
Workflow definitions - states, transitions and the workflow itself.

Pure data. A workflow is built once and never mutated afterwards, so every
model here is frozen. Field names accept camelCase aliases so workflows
exported as JSON by extensions can be loaded directly.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from pubflow.jobs.types import JobType

END_TAG = "end"
ERROR_TAG = "error"
OK_TAG = "ok"


class _WorkflowModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class WorkflowState(_WorkflowModel):
    """A named state a submission version can be in."""

    name: str
    label: str
    visible: bool = False
    published: bool = False
    author_only: bool = False
    inbox: bool = False
    tags: Tuple[str, ...] = ()

    @property
    def is_end(self) -> bool:
        return END_TAG in self.tags

    @property
    def is_error(self) -> bool:
        return ERROR_TAG in self.tags


class TransitionLabels(_WorkflowModel):
    """Presentation strings for a transition."""

    action: str
    in_progress: str
    button: str
    confirmation: str
    success: str


class TransitionOptions(_WorkflowModel):
    job_type: Optional[JobType] = None
    sets_published_date: bool = False
    updates_slug: bool = False


class WorkflowTransition(_WorkflowModel):
    """A named, permission-gated edge between two states."""

    name: str
    source_state_name: str
    target_state_name: str
    requires_job: bool = False
    required_scopes: Tuple[str, ...] = ()
    options: Optional[TransitionOptions] = None
    labels: Optional[TransitionLabels] = None
    user_triggered: bool = True
    help: str = ""
    version: int = 1

    @property
    def job_type(self) -> Optional[JobType]:
        if self.options is None:
            return None
        return self.options.job_type

    @property
    def sets_published_date(self) -> bool:
        return bool(self.options and self.options.sets_published_date)

    @property
    def updates_slug(self) -> bool:
        return bool(self.options and self.options.updates_slug)


class Workflow(_WorkflowModel):
    """
    A finite-state machine governing a submission's editorial lifecycle.

    Transitions are kept in declaration order; several transitions may share
    a (source, target) pair and lookups return the first one.
    """

    name: str
    label: str
    version: int = 1
    initial_state: str
    states: Dict[str, WorkflowState]
    transitions: Tuple[WorkflowTransition, ...] = ()
    mermaid: Optional[str] = None

    @model_validator(mode="after")
    def _check_state_references(self) -> "Workflow":
        if self.initial_state not in self.states:
            raise ValueError(
                f"Initial state {self.initial_state} does not exist in states"
            )
        for transition in self.transitions:
            for state_name in (transition.source_state_name, transition.target_state_name):
                if state_name not in self.states:
                    raise ValueError(
                        f"Transition {transition.name} references unknown state {state_name}"
                    )
        return self

    @property
    def state_names(self) -> List[str]:
        return list(self.states)


class WorkflowRegistration(BaseModel):
    """Workflows contributed by one extension."""

    extension: str
    workflows: List[Workflow] = Field(default_factory=list)


def make_isolated_state(name: str) -> WorkflowState:
    """Build a neutral state: hidden, unpublished, no tags."""
    return WorkflowState(
        name=name,
        label=name,
        visible=False,
        published=False,
        author_only=False,
        inbox=False,
        tags=(),
    )

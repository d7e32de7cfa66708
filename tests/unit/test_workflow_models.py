"""Unit tests for workflow definitions and the built-in workflows."""

import pytest
from pydantic import ValidationError

from pubflow.jobs.types import JobType
from pubflow.workflow import (
    BUILTIN_WORKFLOWS,
    CLOSED_REVIEW_WORKFLOW,
    OPEN_REVIEW_WORKFLOW,
    SIMPLE_PUBLIC_WORKFLOW,
    StateNames,
    Workflow,
    WorkflowRegistration,
    WorkflowTransition,
    find_ambiguous_transitions,
    make_isolated_state,
    validate_workflow,
)


def _two_state_workflow(**overrides) -> Workflow:
    data = {
        "name": "TINY",
        "label": "Tiny",
        "initial_state": "A",
        "states": {"A": make_isolated_state("A"), "B": make_isolated_state("B")},
        "transitions": [
            WorkflowTransition(name="go", source_state_name="A", target_state_name="B", help="Go"),
        ],
    }
    data.update(overrides)
    return Workflow(**data)


class TestWorkflowModel:
    """Construction-time invariants."""

    def test_unknown_initial_state_rejected(self):
        """initial_state must be a key of states."""
        with pytest.raises(ValidationError):
            _two_state_workflow(initial_state="Z")

    def test_transition_to_unknown_state_rejected(self):
        """Transitions may only reference declared states."""
        with pytest.raises(ValidationError):
            _two_state_workflow(transitions=[
                WorkflowTransition(name="bad", source_state_name="A", target_state_name="Z"),
            ])

    def test_workflows_are_immutable(self):
        """Registered workflows cannot be mutated afterwards."""
        workflow = _two_state_workflow()
        with pytest.raises(ValidationError):
            workflow.name = "OTHER"

    def test_camel_case_aliases_accepted(self):
        """Extension workflows exported as camelCase JSON load directly."""
        registration = WorkflowRegistration.model_validate({
            "extension": "journal",
            "workflows": [{
                "name": "JOURNAL",
                "label": "Journal",
                "initialState": "DRAFT",
                "states": {
                    "DRAFT": {"name": "DRAFT", "label": "Draft", "authorOnly": True},
                    "PUBLISHED": {"name": "PUBLISHED", "label": "Published", "published": True},
                },
                "transitions": [{
                    "name": "publish",
                    "sourceStateName": "DRAFT",
                    "targetStateName": "PUBLISHED",
                    "requiresJob": True,
                    "options": {"jobType": "PUBLISH", "setsPublishedDate": True},
                }],
            }],
        })
        workflow = registration.workflows[0]
        assert workflow.states["DRAFT"].author_only is True
        assert workflow.transitions[0].job_type == JobType.PUBLISH
        assert workflow.transitions[0].sets_published_date is True
        assert workflow.transitions[0].updates_slug is False

    def test_state_tags(self):
        """end/error tags drive is_end and is_error."""
        states = SIMPLE_PUBLIC_WORKFLOW.states
        assert states[StateNames.PUBLISHED].is_end
        assert not states[StateNames.PUBLISHED].is_error
        assert states[StateNames.REJECTED].is_error
        assert not states[StateNames.PENDING].is_end


class TestBuiltinWorkflows:
    """Properties every built-in workflow must hold."""

    @pytest.mark.parametrize("workflow", BUILTIN_WORKFLOWS, ids=lambda w: w.name)
    def test_transitions_reference_declared_states(self, workflow):
        """Every transition source and target is a key of states."""
        for transition in workflow.transitions:
            assert transition.source_state_name in workflow.states
            assert transition.target_state_name in workflow.states

    @pytest.mark.parametrize("workflow", BUILTIN_WORKFLOWS, ids=lambda w: w.name)
    def test_builtins_validate_cleanly(self, workflow):
        """Built-ins have no structural problems and no ambiguous pairs."""
        assert validate_workflow(workflow) == []
        assert find_ambiguous_transitions(workflow) == []

    @pytest.mark.parametrize("workflow", BUILTIN_WORKFLOWS, ids=lambda w: w.name)
    def test_job_transitions_declare_job_type(self, workflow):
        """Transitions that require a job say which one."""
        for transition in workflow.transitions:
            if transition.requires_job:
                assert transition.job_type in (JobType.PUBLISH, JobType.UNPUBLISH, JobType.RETRACT)

    def test_review_visibility_differs(self):
        """Open review shows IN_REVIEW publicly, closed review does not."""
        assert OPEN_REVIEW_WORKFLOW.states[StateNames.IN_REVIEW].visible is True
        assert CLOSED_REVIEW_WORKFLOW.states[StateNames.IN_REVIEW].visible is False

    def test_mermaid_diagram_lists_transitions(self):
        """Built-ins carry a mermaid diagram of their transitions."""
        assert SIMPLE_PUBLIC_WORKFLOW.mermaid.startswith("graph TD")
        assert "PENDING -->|publish| PUBLISHED" in SIMPLE_PUBLIC_WORKFLOW.mermaid


class TestValidation:
    """Lint-style checks on workflow definitions."""

    def test_missing_help_reported(self):
        """Transitions without help text are flagged."""
        workflow = _two_state_workflow(transitions=[
            WorkflowTransition(name="go", source_state_name="A", target_state_name="B"),
        ])
        assert "Transition 0: Transition must have help text" in validate_workflow(workflow)

    def test_job_without_type_reported(self):
        """requires_job without a job type is flagged."""
        workflow = _two_state_workflow(transitions=[
            WorkflowTransition(
                name="go", source_state_name="A", target_state_name="B", help="Go", requires_job=True
            ),
        ])
        errors = validate_workflow(workflow)
        assert any("declares no job type" in e for e in errors)

    def test_mismatched_state_key_reported(self):
        """A state stored under another name is flagged."""
        workflow = _two_state_workflow(
            states={"A": make_isolated_state("A"), "B": make_isolated_state("C")},
        )
        assert "State B: key does not match state name C" in validate_workflow(workflow)

    def test_ambiguous_pairs_found(self):
        """Two transitions with the same (source, target) are reported once."""
        workflow = _two_state_workflow(transitions=[
            WorkflowTransition(name="go", source_state_name="A", target_state_name="B", help="Go"),
            WorkflowTransition(name="go-too", source_state_name="A", target_state_name="B", help="Go"),
        ])
        assert find_ambiguous_transitions(workflow) == [("A", "B")]

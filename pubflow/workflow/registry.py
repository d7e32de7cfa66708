"""
Catalog of named workflows.

The registry is constructed once by the application (see pubflow.main) and
handed to callers; it is not a module-level singleton. Reads vastly
outnumber writes, registration happens at startup.
"""

import threading
from typing import Dict, Iterable, List, Optional

from pubflow.exceptions import WorkflowNotFound
from pubflow.logging_config import get_logger
from pubflow.workflow.builtin import BUILTIN_WORKFLOWS
from pubflow.workflow.models import Workflow, WorkflowRegistration
from pubflow.workflow.validation import find_ambiguous_transitions

logger = get_logger(__name__)


class WorkflowRegistry:
    """
    In-memory workflow catalog.

    Usage:
        registry = WorkflowRegistry()
        registry.register("JOURNAL", journal_workflow)
        workflow = registry.get("SIMPLE")

    Built-in workflows are registered lazily on first catalog access.
    Registering an existing name overwrites it (last writer wins) and logs
    a warning, which is how extensions override built-ins.
    """

    def __init__(self, builtins: Iterable[Workflow] = BUILTIN_WORKFLOWS):
        self._workflows: Dict[str, Workflow] = {}
        self._builtins = tuple(builtins)
        self._builtins_registered = False
        self._lock = threading.Lock()

    def _ensure_builtins(self) -> None:
        if self._builtins_registered:
            return
        with self._lock:
            if self._builtins_registered:
                return
            for workflow in self._builtins:
                self._register(workflow.name, workflow)
            self._builtins_registered = True

    def _register(self, name: str, workflow: Workflow) -> str:
        if name in self._workflows:
            logger.warning("Workflow %s is being overridden", name)
        for source, target in find_ambiguous_transitions(workflow):
            logger.warning(
                "Workflow %s declares several transitions %s -> %s, the first one wins",
                name,
                source,
                target,
            )
        self._workflows[name] = workflow
        return name

    def register(self, name: str, workflow: Workflow) -> str:
        """
        Register a workflow under name.

        Returns:
            The registered name
        """
        self._ensure_builtins()
        with self._lock:
            return self._register(name, workflow)

    def register_many(self, workflows: Iterable[Workflow]) -> List[str]:
        """Register each workflow under its own name."""
        return [self.register(workflow.name, workflow) for workflow in workflows]

    def get(self, name: str) -> Workflow:
        """
        Look up a workflow by name.

        Raises:
            WorkflowNotFound: If no workflow is registered under name
        """
        self._ensure_builtins()
        workflow = self._workflows.get(name)
        if workflow is None:
            raise WorkflowNotFound(f"Workflow {name} not found")
        return workflow

    def names(self) -> List[str]:
        self._ensure_builtins()
        return list(self._workflows)

    def all(self) -> Dict[str, Workflow]:
        self._ensure_builtins()
        return dict(self._workflows)

    def __contains__(self, name: object) -> bool:
        self._ensure_builtins()
        return name in self._workflows

    def validate(
        self,
        extension_workflows: Iterable[WorkflowRegistration] = (),
        expected_names: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """
        Reconcile configured extension workflows with the catalog.

        Workflows from extension_workflows are registered only when their
        name is not taken yet. Registration here is additive, nothing is
        overwritten or removed.

        Args:
            extension_workflows: Workflows contributed by loaded extensions
            expected_names: Workflow names the configuration expects

        Returns:
            Expected names that are still not registered
        """
        self._ensure_builtins()
        for registration in extension_workflows:
            for workflow in registration.workflows:
                if workflow.name not in self._workflows:
                    self.register(workflow.name, workflow)

        return [name for name in (expected_names or ()) if name not in self._workflows]

    def clear(self) -> None:
        """Drop every workflow, built-ins included. Mainly for tests."""
        with self._lock:
            self._workflows.clear()
            self._builtins_registered = False


def load_registrations(paths: Iterable[str]) -> List[WorkflowRegistration]:
    """
    Read extension workflow registrations from JSON files.

    Raises:
        OSError: If a file cannot be read
        pydantic.ValidationError: If a file does not describe a registration
    """
    registrations = []
    for path in paths:
        with open(path, "rb") as fh:
            registrations.append(WorkflowRegistration.model_validate_json(fh.read()))
        logger.info("Loaded workflow registration from %s", path)
    return registrations

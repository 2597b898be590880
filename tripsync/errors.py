"""Exceptions raised by the transactional workflows."""
from __future__ import annotations


class WorkflowError(RuntimeError):
    """Raised when a multi-step database workflow fails and was rolled back."""

    def __init__(self, workflow: str, message: str) -> None:
        super().__init__(f"{workflow} failed: {message}")
        self.workflow = workflow
        self.message = message


class DuplicateEntryError(WorkflowError):
    """Raised when a workflow insert collides with a unique constraint."""


__all__ = ["WorkflowError", "DuplicateEntryError"]

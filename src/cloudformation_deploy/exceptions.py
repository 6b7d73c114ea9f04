"""
Errors raised by stack operations and workflows.
"""

import json
from typing import Any, Dict, List, Optional


class CloudFormationDeployError(Exception):
    """Base class for all errors raised by this package."""


class ConfigValidationError(CloudFormationDeployError):
    """Configuration failed schema validation. Lists every violation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            "Invalid configuration: " + "; ".join(self.errors)
        )


class ProviderCallError(CloudFormationDeployError):
    """A call to the CloudFormation API failed."""

    def __init__(self, call_name: str, cause: BaseException):
        self.call_name = call_name
        self.cause = cause
        super().__init__(f"Call to {call_name} failed: {cause}")


class TemplateValidationError(ProviderCallError):
    """CloudFormation rejected the template."""


class StackNotFoundError(CloudFormationDeployError):
    """A describe call matched no stack."""

    def __init__(self, stack_id: str):
        self.stack_id = stack_id
        super().__init__(f"No such stack: {stack_id}")


class StackOperationError(CloudFormationDeployError):
    """An awaited stack operation reached a terminal state other than success."""

    def __init__(
        self,
        message: str,
        status: Optional[str] = None,
        failure_event: Optional[Dict[str, Any]] = None,
    ):
        self.status = status
        self.failure_event = failure_event
        super().__init__(message)

    @classmethod
    def from_terminal_state(
        cls, status: Optional[str], failure_event: Optional[Dict[str, Any]]
    ) -> "StackOperationError":
        """Build the error for a non-success terminal state."""
        if failure_event:
            message = (
                f"Stack operation ended in {status}. "
                "Stack operation failed on the following event: "
                f"{json.dumps(failure_event, default=str)}"
            )
        else:
            message = (
                f"Stack operation ended in {status}. "
                "Stack operation failed, but could not identify failure event."
            )
        return cls(message, status=status, failure_event=failure_event)

    def with_context(self, prefix: str) -> "StackOperationError":
        """Return a copy of this error with more context prepended."""
        return StackOperationError(
            f"{prefix}: {self}",
            status=self.status,
            failure_event=self.failure_event,
        )

"""
Base class for stack operations: progress tracking and awaiting completion.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from ..config import get_client_options
from ..constants import (
    ON_DEPLOY_FAILURE,
    STACK_RESOURCE_TYPE,
    OperationType,
    ResourceStatus,
)
from ..exceptions import StackOperationError
from ..utilities import once
from .client import CloudFormationClient

logger = logging.getLogger(__name__)

_FAILED = re.compile(r"FAILED")


@dataclass
class StackData:
    """Progress record for a stack under operation."""

    stack_name: str
    stack_id: Optional[str] = None
    status: Optional[str] = None
    # Chronological, as last loaded in full from CloudFormation.
    events: List[Dict[str, Any]] = field(default_factory=list)


# (terminal states, success states) per operation type.
_CREATE_DELETE_ON_FAILURE: Tuple[FrozenSet[str], FrozenSet[str]] = (
    frozenset(
        [
            ResourceStatus.CREATE_COMPLETE,
            ResourceStatus.DELETE_COMPLETE,
            ResourceStatus.DELETE_FAILED,
        ]
    ),
    frozenset([ResourceStatus.CREATE_COMPLETE]),
)
_CREATE_DO_NOTHING = (
    frozenset([ResourceStatus.CREATE_COMPLETE, ResourceStatus.CREATE_FAILED]),
    frozenset([ResourceStatus.CREATE_COMPLETE]),
)
_DELETE = (
    frozenset([ResourceStatus.DELETE_COMPLETE, ResourceStatus.DELETE_FAILED]),
    frozenset([ResourceStatus.DELETE_COMPLETE]),
)
_UPDATE = (
    frozenset(
        [
            ResourceStatus.UPDATE_COMPLETE,
            ResourceStatus.UPDATE_ROLLBACK_COMPLETE,
            ResourceStatus.UPDATE_ROLLBACK_FAILED,
        ]
    ),
    frozenset([ResourceStatus.UPDATE_COMPLETE]),
)


class CloudFormationOperation:
    """Shared machinery for deploy, update and preview update."""

    def __init__(self, config: Dict[str, Any], template: Any):
        """
        Initialize the operation.

        Args:
            config: Operation configuration
            template: Template document, JSON text, or URL to a template in S3
        """
        self.config = config
        self.template = template
        self._cloudformation: Optional[CloudFormationClient] = None

    @property
    def cloudformation(self) -> CloudFormationClient:
        """Get the CloudFormation client owned by this operation."""
        if self._cloudformation is None:
            self._cloudformation = CloudFormationClient(
                get_client_options(self.config)
            )
        return self._cloudformation

    async def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking client call without blocking the event loop."""
        return await asyncio.to_thread(fn, *args, **kwargs)

    def get_stack_data(self, stack_name: str, stack_id: Optional[str] = None) -> StackData:
        return StackData(stack_name=stack_name, stack_id=stack_id)

    @staticmethod
    def is_stack_event(event: Dict[str, Any], stack_data: StackData) -> bool:
        """Is this event about the stack itself rather than one of its resources?"""
        if event.get("ResourceType") != STACK_RESOURCE_TYPE:
            return False
        # Nested stacks share the resource type but not the physical ID.
        physical_id = event.get("PhysicalResourceId")
        if not physical_id:
            return True
        return physical_id in (stack_data.stack_id, stack_data.stack_name)

    async def update_event_data(self, stack_data: StackData) -> None:
        """Load events for the stack and update the progress record.

        CloudFormation only offers the full history, so new events are
        whatever lies past the previously stored length.
        """
        events = await self.call(
            self.cloudformation.describe_stack_events, stack_data.stack_id
        )

        new_events = events[len(stack_data.events):]
        stack_data.events = events

        on_event_fn = self.config.get("on_event_fn")
        if callable(on_event_fn):
            for event in new_events:
                on_event_fn(event)

        stack_events = [
            event for event in new_events if self.is_stack_event(event, stack_data)
        ]
        if stack_events:
            stack_data.status = stack_events[-1].get("ResourceStatus")

    def get_terminal_states(self, operation_type: str) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        """Get (terminal states, success states) for an operation type."""
        if operation_type == OperationType.CREATE_STACK:
            # With delete on failure, CREATE_FAILED is only a step on the way
            # to one of the delete outcomes.
            if self.config.get("on_deploy_failure") == ON_DEPLOY_FAILURE["DO_NOTHING"]:
                return _CREATE_DO_NOTHING
            return _CREATE_DELETE_ON_FAILURE
        if operation_type == OperationType.DELETE_STACK:
            return _DELETE
        if operation_type == OperationType.UPDATE_STACK:
            return _UPDATE
        raise ValueError(f"Unknown operation type: {operation_type}")

    def is_complete(self, operation_type: str, stack_data: StackData) -> bool:
        terminal, _ = self.get_terminal_states(operation_type)
        return stack_data.status in terminal

    @staticmethod
    def find_failure_event(stack_data: StackData) -> Optional[Dict[str, Any]]:
        """Find the first event likely to signal the cause of a failure."""
        for event in stack_data.events:
            if event.get("ResourceStatus") and _FAILED.search(event["ResourceStatus"]):
                return event
        return None

    async def await_completion(self, operation_type: str, stack_data: StackData) -> None:
        """Wait on the completion of a stack create, delete or update.

        A stack creation set to delete on failure runs through the failed
        creation and the deletion within this one wait. Polls are strictly
        sequential, so events reach on_event_fn in order.

        Raises:
            StackOperationError: If the operation ended in a state other than
                success, including a successful delete of a failed create
            ProviderCallError: If loading events failed
        """
        interval = self.config.get("progress_check_interval_in_seconds", 10)
        _, success = self.get_terminal_states(operation_type)

        while not self.is_complete(operation_type, stack_data):
            await asyncio.sleep(interval)
            await self.update_event_data(stack_data)
            logger.debug(
                f"Stack {stack_data.stack_name} {operation_type}: {stack_data.status}"
            )

        if stack_data.status in success:
            logger.info(f"Stack {stack_data.stack_name} reached {stack_data.status}")
            return

        logger.error(f"Stack {stack_data.stack_name} reached {stack_data.status}")
        raise StackOperationError.from_terminal_state(
            stack_data.status, self.find_failure_event(stack_data)
        )

    def watch_completion(
        self,
        operation_type: str,
        stack_data: StackData,
        callback: Callable[[Optional[BaseException]], Any],
    ) -> "asyncio.Task[None]":
        """Await completion in the background and report the outcome once.

        The returned task is the handle to the wait. The callback receives
        None on success or the error, and fires at most once.
        """
        resolve = once(callback)
        task = asyncio.get_running_loop().create_task(
            self.await_completion(operation_type, stack_data)
        )

        def _done(finished: "asyncio.Task[None]") -> None:
            if finished.cancelled():
                resolve(asyncio.CancelledError())
            else:
                resolve(finished.exception())

        task.add_done_callback(_done)
        return task

"""
Preview a stack update by creating a change set and inspecting it.
"""

import asyncio
import logging
from typing import Any, Dict

from ..cloudformation.operation import CloudFormationOperation
from ..config import fill_preview_update_config_defaults
from ..config_validation import validate_preview_update_config
from ..constants import ChangeSetStatus
from ..exceptions import ConfigValidationError
from ..utilities import get_parameters, get_tags
from .results import PreviewUpdateResult
from .sequencer import Sequencer

logger = logging.getLogger(__name__)

CHANGE_SET_TERMINAL_STATES = frozenset(
    [ChangeSetStatus.CREATE_COMPLETE, ChangeSetStatus.FAILED]
)


class PreviewUpdate(CloudFormationOperation):
    """Create a change set against an existing stack and report its changes."""

    def __init__(self, config: Dict[str, Any], template: Any):
        super().__init__(fill_preview_update_config_defaults(config), template)

    async def await_change_set_completion(self, result: PreviewUpdateResult) -> None:
        """Poll the change set until its creation succeeds or fails.

        Each poll stores the latest description in the result, so an
        incomplete change set is still available if polling fails.
        """
        interval = self.config.get("progress_check_interval_in_seconds", 10)
        change_set_data = result.change_set_data

        while change_set_data.status not in CHANGE_SET_TERMINAL_STATES:
            await asyncio.sleep(interval)
            result.change_set = await self.call(
                self.cloudformation.describe_change_set,
                self.config["stack_name"],
                self.config["change_set_name"],
            )
            change_set_data.status = result.change_set.get("Status")
            logger.debug(
                f"Change set {change_set_data.stack_name}: {change_set_data.status}"
            )

        if change_set_data.status == ChangeSetStatus.FAILED:
            logger.warning(
                f"Change set {change_set_data.stack_name} failed: "
                f"{result.change_set.get('StatusReason')}"
            )

    async def preview_update(self) -> PreviewUpdateResult:
        """Run the preview.

        Returns:
            The result, with the change set description as far as it got,
            and any error in result.errors
        """
        result = PreviewUpdateResult(
            change_set_data=self.get_stack_data(self.config.get("change_set_name"))
        )

        async def validate_config() -> None:
            errors = validate_preview_update_config(self.config)
            if errors:
                raise ConfigValidationError(errors)

        async def validate_template() -> None:
            await self.call(self.cloudformation.validate_template, self.template)

        async def create_change_set() -> None:
            result.change_set_data.stack_id = await self.call(
                self.cloudformation.create_change_set,
                self.config["stack_name"],
                self.config["change_set_name"],
                self.template,
                capabilities=self.config["capabilities"],
                parameters=get_parameters(self.config),
                tags=get_tags(self.config),
            )

        async def await_completion() -> None:
            await self.await_change_set_completion(result)

        async def delete_change_set() -> None:
            if not self.config["delete_change_set"]:
                return
            await self.call(
                self.cloudformation.delete_change_set,
                self.config["stack_name"],
                self.config["change_set_name"],
            )

        sequencer = Sequencer(
            f"preview update {self.config.get('stack_name')}",
            [
                ("validate_config", validate_config),
                ("validate_template", validate_template),
                ("create_change_set", create_change_set),
                ("await_completion", await_completion),
                ("delete_change_set", delete_change_set),
            ],
        )
        error = await sequencer.run()
        if error:
            result.errors.append(error)

        return result

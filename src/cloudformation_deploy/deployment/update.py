"""
Update an existing stack in place.
"""

from typing import Any, Dict

from ..cloudformation.operation import CloudFormationOperation
from ..config import fill_update_config_defaults
from ..config_validation import validate_update_config
from ..constants import OperationType, ResourceStatus
from ..exceptions import ConfigValidationError, StackOperationError
from ..utilities import determine_stack_name, get_parameters, get_tags
from .results import UpdateResult
from .sequencer import Sequencer


class Update(CloudFormationOperation):
    """Apply a template to an existing stack and wait on the outcome."""

    def __init__(self, config: Dict[str, Any], template: Any):
        super().__init__(fill_update_config_defaults(config), template)

    async def update(self) -> UpdateResult:
        """Run the update.

        Returns:
            The result, partial if a stage failed, with the error in
            result.errors
        """
        result = UpdateResult(
            update_stack=self.get_stack_data(determine_stack_name(self.config))
        )
        stack_data = result.update_stack

        async def validate_config() -> None:
            errors = validate_update_config(self.config)
            if errors:
                raise ConfigValidationError(errors)

        async def validate_template() -> None:
            await self.call(self.cloudformation.validate_template, self.template)

        async def update_stack() -> None:
            stack_data.stack_id = await self.call(
                self.cloudformation.update_stack,
                stack_data.stack_name,
                self.template,
                capabilities=self.config["capabilities"],
                parameters=get_parameters(self.config),
                tags=get_tags(self.config),
            )

        async def await_completion() -> None:
            try:
                await self.await_completion(OperationType.UPDATE_STACK, stack_data)
            except StackOperationError as e:
                if stack_data.status == ResourceStatus.UPDATE_ROLLBACK_COMPLETE:
                    raise e.with_context(
                        "Stack update failed. The rollback succeeded"
                    ) from e
                if stack_data.status == ResourceStatus.UPDATE_ROLLBACK_FAILED:
                    raise e.with_context(
                        "Stack update failed. The rollback failed as well"
                    ) from e
                raise

        async def describe_stack() -> None:
            result.describe_stack = await self.call(
                self.cloudformation.describe_stack, stack_data.stack_id
            )

        sequencer = Sequencer(
            f"update {stack_data.stack_name}",
            [
                ("validate_config", validate_config),
                ("validate_template", validate_template),
                ("update_stack", update_stack),
                ("await_completion", await_completion),
                ("describe_stack", describe_stack),
            ],
        )
        error = await sequencer.run()
        if error:
            result.errors.append(error)

        return result

"""
Deploy a template as a new stack, replacing prior instances.
"""

import inspect
import logging
from typing import Any, Dict

from ..cloudformation.operation import CloudFormationOperation, StackData
from ..cloudformation.prior_instances import describe_prior_stacks
from ..config import fill_deploy_config_defaults
from ..config_validation import validate_deploy_config
from ..constants import ON_DEPLOY_FAILURE, PRIOR_INSTANCE, OperationType, ResourceStatus
from ..exceptions import ConfigValidationError, StackOperationError
from ..utilities import determine_stack_name, get_parameters, get_tags
from .results import DeployResult
from .sequencer import Sequencer

logger = logging.getLogger(__name__)


class Deploy(CloudFormationOperation):
    """Create a new stack, then delete the stacks it supersedes."""

    def __init__(self, config: Dict[str, Any], template: Any):
        super().__init__(fill_deploy_config_defaults(config), template)

    async def delete_stack(self, stack_data: StackData) -> None:
        """Delete a stack and wait on the deletion to complete."""
        await self.call(self.cloudformation.delete_stack, stack_data.stack_id)
        await self.await_completion(OperationType.DELETE_STACK, stack_data)

    async def delete_prior_stacks(self, result: DeployResult) -> None:
        """Delete all stacks tagged as earlier instances of the new stack."""
        descriptions = await self.call(
            describe_prior_stacks,
            self.cloudformation,
            self.config["base_name"],
            result.create_stack.stack_id,
        )

        for description in descriptions:
            stack_data = self.get_stack_data(
                description["StackName"], description["StackId"]
            )
            result.delete_stack.append(stack_data)
            logger.info(f"Deleting prior stack {stack_data.stack_name}")
            await self.delete_stack(stack_data)

    async def deploy(self) -> DeployResult:
        """Run the deployment.

        Returns:
            The result, partial if a stage failed, with the error in
            result.errors
        """
        result = DeployResult(
            create_stack=self.get_stack_data(determine_stack_name(self.config))
        )
        stack_data = result.create_stack

        async def validate_config() -> None:
            errors = validate_deploy_config(self.config)
            if errors:
                raise ConfigValidationError(errors)

        async def validate_template() -> None:
            await self.call(self.cloudformation.validate_template, self.template)

        async def create_stack() -> None:
            stack_data.stack_id = await self.call(
                self.cloudformation.create_stack,
                stack_data.stack_name,
                self.template,
                capabilities=self.config["capabilities"],
                on_failure=self.config["on_deploy_failure"],
                parameters=get_parameters(self.config),
                tags=get_tags(self.config),
                timeout_in_minutes=self.config["create_stack_timeout_in_minutes"],
            )

        async def await_completion() -> None:
            try:
                await self.await_completion(OperationType.CREATE_STACK, stack_data)
            except StackOperationError as e:
                if (
                    self.config["on_deploy_failure"] == ON_DEPLOY_FAILURE["DO_NOTHING"]
                    and stack_data.status == ResourceStatus.CREATE_FAILED
                ):
                    raise e.with_context(
                        "Stack creation failed. Per configuration no attempt "
                        "was made to delete the failed stack"
                    ) from e
                if stack_data.status == ResourceStatus.DELETE_FAILED:
                    raise e.with_context(
                        "Stack creation failed. Deletion of the stack failed as well"
                    ) from e
                if stack_data.status == ResourceStatus.DELETE_COMPLETE:
                    raise e.with_context(
                        "Stack creation failed. The failed stack was deleted"
                    ) from e
                raise

        async def describe_stack() -> None:
            result.describe_stack = await self.call(
                self.cloudformation.describe_stack, stack_data.stack_id
            )

        async def post_creation() -> None:
            post_creation_fn = self.config.get("post_creation_fn")
            if not callable(post_creation_fn):
                return
            outcome = post_creation_fn(result.describe_stack)
            if inspect.isawaitable(outcome):
                await outcome

        async def delete_prior_stacks() -> None:
            if self.config["prior_instance"] != PRIOR_INSTANCE["DELETE"]:
                return
            await self.delete_prior_stacks(result)

        sequencer = Sequencer(
            f"deploy {stack_data.stack_name}",
            [
                ("validate_config", validate_config),
                ("validate_template", validate_template),
                ("create_stack", create_stack),
                ("await_completion", await_completion),
                ("describe_stack", describe_stack),
                ("post_creation_fn", post_creation),
                ("delete_prior_stacks", delete_prior_stacks),
            ],
        )
        error = await sequencer.run()
        if error:
            result.errors.append(error)

        return result

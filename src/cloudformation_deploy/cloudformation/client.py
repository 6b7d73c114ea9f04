"""
CloudFormation API calls used by the stack operations.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import ClientOptions
from ..exceptions import ProviderCallError, StackNotFoundError, TemplateValidationError
from ..utilities import add_template_property_to_parameters

logger = logging.getLogger(__name__)

Template = Union[str, Dict[str, Any]]


class CloudFormationClient:
    """Thin request/response mapping onto the boto3 CloudFormation client.

    Each instance owns its own session and client, created on first use,
    so workflows running side by side never share credentials or regions.
    """

    def __init__(self, client_options: Optional[ClientOptions] = None):
        """
        Initialize the client wrapper.

        Args:
            client_options: Session and client options
        """
        self.client_options = client_options or ClientOptions.from_dict(None)
        self._client = None

    @property
    def client(self) -> Any:
        """Get or create the boto3 CloudFormation client."""
        if self._client is None:
            session = boto3.Session(**self.client_options.session_kwargs())
            self._client = session.client(
                "cloudformation", **self.client_options.client_kwargs
            )
        return self._client

    def create_stack(
        self,
        stack_name: str,
        template: Template,
        capabilities: List[str],
        on_failure: str,
        parameters: List[Dict[str, str]],
        tags: List[Dict[str, str]],
        timeout_in_minutes: Optional[int] = None,
    ) -> str:
        """Issue a request to start creation of a stack.

        Returns:
            The new stack ID
        """
        params: Dict[str, Any] = {
            "StackName": stack_name,
            "Capabilities": capabilities,
            "OnFailure": on_failure,
            "Parameters": parameters,
            "Tags": tags,
        }
        if timeout_in_minutes:
            params["TimeoutInMinutes"] = timeout_in_minutes
        add_template_property_to_parameters(params, template)

        try:
            response = self.client.create_stack(**params)
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("create_stack", e) from e

        logger.info(f"Started creation of stack {stack_name}")
        return str(response["StackId"])

    def update_stack(
        self,
        stack_name: str,
        template: Template,
        capabilities: List[str],
        parameters: List[Dict[str, str]],
        tags: List[Dict[str, str]],
    ) -> str:
        """Issue a request to start an update of a stack.

        Returns:
            The stack ID
        """
        params: Dict[str, Any] = {
            "StackName": stack_name,
            "Capabilities": capabilities,
            "Parameters": parameters,
            "Tags": tags,
        }
        add_template_property_to_parameters(params, template)

        try:
            response = self.client.update_stack(**params)
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("update_stack", e) from e

        logger.info(f"Started update of stack {stack_name}")
        return str(response["StackId"])

    def delete_stack(self, stack_id: str) -> None:
        """Issue a request to start deletion of a stack."""
        try:
            self.client.delete_stack(StackName=stack_id)
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("delete_stack", e) from e

        logger.info(f"Started deletion of stack {stack_id}")

    def describe_stack(self, stack_id: str) -> Dict[str, Any]:
        """Obtain a stack description, including its Outputs and Tags."""
        try:
            response = self.client.describe_stacks(StackName=stack_id)
        except ClientError as e:
            if "does not exist" in str(e):
                raise StackNotFoundError(stack_id) from e
            raise ProviderCallError("describe_stacks", e) from e
        except BotoCoreError as e:
            raise ProviderCallError("describe_stacks", e) from e

        if not response.get("Stacks"):
            raise StackNotFoundError(stack_id)

        return dict(response["Stacks"][0])

    def describe_stack_events(self, stack_id: str) -> List[Dict[str, Any]]:
        """Load the full event history of a stack.

        The API returns events newest first; they are returned here in
        chronological order.
        """
        events: List[Dict[str, Any]] = []
        try:
            paginator = self.client.get_paginator("describe_stack_events")
            for page in paginator.paginate(StackName=stack_id):
                events.extend(page.get("StackEvents", []))
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("describe_stack_events", e) from e

        events.reverse()
        return events

    def list_stacks(self, status_filter: List[str]) -> List[Dict[str, Any]]:
        """List summaries of all stacks with a status in the filter."""
        summaries: List[Dict[str, Any]] = []
        try:
            paginator = self.client.get_paginator("list_stacks")
            for page in paginator.paginate(StackStatusFilter=status_filter):
                summaries.extend(page.get("StackSummaries", []))
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("list_stacks", e) from e

        return summaries

    def validate_template(self, template: Template) -> Dict[str, Any]:
        """Validate a template, raising TemplateValidationError if malformed."""
        params = add_template_property_to_parameters({}, template)

        try:
            return dict(self.client.validate_template(**params))
        except (ClientError, BotoCoreError) as e:
            raise TemplateValidationError("validate_template", e) from e

    def create_change_set(
        self,
        stack_name: str,
        change_set_name: str,
        template: Template,
        capabilities: List[str],
        parameters: List[Dict[str, str]],
        tags: List[Dict[str, str]],
    ) -> str:
        """Start creation of a change set for an existing stack.

        Returns:
            The change set ID
        """
        params: Dict[str, Any] = {
            "StackName": stack_name,
            "ChangeSetName": change_set_name,
            "ChangeSetType": "UPDATE",
            "Capabilities": capabilities,
            "Parameters": parameters,
            "Tags": tags,
        }
        add_template_property_to_parameters(params, template)

        try:
            response = self.client.create_change_set(**params)
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("create_change_set", e) from e

        logger.info(f"Started creation of change set {change_set_name}")
        return str(response["Id"])

    def describe_change_set(
        self, stack_name: str, change_set_name: str
    ) -> Dict[str, Any]:
        """Describe a change set, with the Changes of every page merged."""
        params = {"StackName": stack_name, "ChangeSetName": change_set_name}
        description: Optional[Dict[str, Any]] = None
        changes: List[Dict[str, Any]] = []

        try:
            while True:
                response = self.client.describe_change_set(**params)
                if description is None:
                    description = dict(response)
                changes.extend(response.get("Changes", []))

                next_token = response.get("NextToken")
                if not next_token:
                    break
                params["NextToken"] = next_token
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("describe_change_set", e) from e

        description.pop("NextToken", None)
        description["Changes"] = changes
        return description

    def delete_change_set(self, stack_name: str, change_set_name: str) -> None:
        """Delete a change set."""
        try:
            self.client.delete_change_set(
                StackName=stack_name, ChangeSetName=change_set_name
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("delete_change_set", e) from e

        logger.info(f"Deleted change set {change_set_name}")

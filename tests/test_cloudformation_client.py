"""
Tests for the CloudFormation client wrapper.
"""

import json
from unittest.mock import Mock, patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from cloudformation_deploy.cloudformation.client import CloudFormationClient
from cloudformation_deploy.config import ClientOptions
from cloudformation_deploy.exceptions import (
    ProviderCallError,
    StackNotFoundError,
    TemplateValidationError,
)

TEMPLATE = {
    "AWSTemplateFormatVersion": "2010-09-09",
    "Resources": {"Topic": {"Type": "AWS::SNS::Topic"}},
    "Outputs": {"TopicArn": {"Value": {"Ref": "Topic"}}},
}


def client_error(operation: str, message: str = "Something broke") -> ClientError:
    return ClientError(
        {"Error": {"Code": "ValidationError", "Message": message}}, operation
    )


class TestCloudFormationClient:
    """Test CloudFormation API mapping with a mocked boto3 client."""

    def create_client(self) -> CloudFormationClient:
        """Create a client wrapper around a mock boto3 client."""
        client = CloudFormationClient(ClientOptions(region_name="us-east-1"))
        client._client = Mock()
        return client

    def test_boto3_client_created_lazily(self) -> None:
        """The session is only built on first use, from the options given."""
        options = ClientOptions(
            region_name="eu-west-1",
            profile_name="deployer",
            client_kwargs={"endpoint_url": "http://localhost:4566"},
        )

        with patch("boto3.Session") as mock_session:
            client = CloudFormationClient(options)
            mock_session.assert_not_called()

            assert client.client is client.client

        mock_session.assert_called_once_with(
            region_name="eu-west-1", profile_name="deployer"
        )
        mock_session.return_value.client.assert_called_once_with(
            "cloudformation", endpoint_url="http://localhost:4566"
        )

    def test_create_stack(self) -> None:
        client = self.create_client()
        client.client.create_stack.return_value = {"StackId": "arn:stack/web-1/abc"}

        stack_id = client.create_stack(
            "web-1",
            TEMPLATE,
            capabilities=["CAPABILITY_IAM"],
            on_failure="DELETE",
            parameters=[],
            tags=[{"Key": "a", "Value": "b"}],
            timeout_in_minutes=10,
        )

        assert stack_id == "arn:stack/web-1/abc"
        kwargs = client.client.create_stack.call_args[1]
        assert kwargs["StackName"] == "web-1"
        assert kwargs["OnFailure"] == "DELETE"
        assert kwargs["TimeoutInMinutes"] == 10
        assert kwargs["Capabilities"] == ["CAPABILITY_IAM"]
        assert json.loads(kwargs["TemplateBody"]) == TEMPLATE

    def test_create_stack_with_template_url(self) -> None:
        client = self.create_client()
        client.client.create_stack.return_value = {"StackId": "id"}
        url = "https://bucket.s3.amazonaws.com/template.json"

        client.create_stack("web-1", url, [], "DO_NOTHING", [], [], 0)

        kwargs = client.client.create_stack.call_args[1]
        assert kwargs["TemplateURL"] == url
        assert "TemplateBody" not in kwargs
        assert "TimeoutInMinutes" not in kwargs

    def test_create_stack_failure_wrapped(self) -> None:
        client = self.create_client()
        original = client_error("CreateStack", "Stack [web-1] already exists")
        client.client.create_stack.side_effect = original

        with pytest.raises(ProviderCallError) as exc_info:
            client.create_stack("web-1", TEMPLATE, [], "DELETE", [], [])

        assert exc_info.value.call_name == "create_stack"
        assert exc_info.value.__cause__ is original
        assert "Call to create_stack failed" in str(exc_info.value)
        assert "already exists" in str(exc_info.value)

    def test_update_stack(self) -> None:
        client = self.create_client()
        client.client.update_stack.return_value = {"StackId": "id-1"}

        assert client.update_stack("web-1", "{}", [], [], []) == "id-1"
        client.client.update_stack.assert_called_once_with(
            StackName="web-1",
            Capabilities=[],
            Parameters=[],
            Tags=[],
            TemplateBody="{}",
        )

    def test_delete_stack(self) -> None:
        client = self.create_client()
        client.delete_stack("id-1")
        client.client.delete_stack.assert_called_once_with(StackName="id-1")

    def test_delete_stack_failure_wrapped(self) -> None:
        client = self.create_client()
        client.client.delete_stack.side_effect = client_error("DeleteStack")

        with pytest.raises(ProviderCallError, match="delete_stack"):
            client.delete_stack("id-1")

    def test_describe_stack(self) -> None:
        client = self.create_client()
        client.client.describe_stacks.return_value = {
            "Stacks": [{"StackId": "id-1", "StackStatus": "CREATE_COMPLETE"}]
        }

        description = client.describe_stack("id-1")

        assert description["StackStatus"] == "CREATE_COMPLETE"
        client.client.describe_stacks.assert_called_once_with(StackName="id-1")

    def test_describe_stack_no_match(self) -> None:
        client = self.create_client()
        client.client.describe_stacks.return_value = {"Stacks": []}

        with pytest.raises(StackNotFoundError, match="No such stack: id-1"):
            client.describe_stack("id-1")

    def test_describe_stack_does_not_exist(self) -> None:
        client = self.create_client()
        client.client.describe_stacks.side_effect = client_error(
            "DescribeStacks", "Stack with id id-1 does not exist"
        )

        with pytest.raises(StackNotFoundError):
            client.describe_stack("id-1")

    def test_describe_stack_events_chronological(self) -> None:
        """Pages arrive newest first and are reversed into one list."""
        client = self.create_client()
        client.client.get_paginator.return_value.paginate.return_value = [
            {"StackEvents": [{"EventId": "4"}, {"EventId": "3"}]},
            {"StackEvents": [{"EventId": "2"}, {"EventId": "1"}]},
        ]

        events = client.describe_stack_events("id-1")

        assert [e["EventId"] for e in events] == ["1", "2", "3", "4"]
        client.client.get_paginator.assert_called_once_with("describe_stack_events")
        client.client.get_paginator.return_value.paginate.assert_called_once_with(
            StackName="id-1"
        )

    def test_describe_stack_events_failure_wrapped(self) -> None:
        client = self.create_client()
        client.client.get_paginator.return_value.paginate.side_effect = client_error(
            "DescribeStackEvents"
        )

        with pytest.raises(ProviderCallError, match="describe_stack_events"):
            client.describe_stack_events("id-1")

    def test_list_stacks_all_pages(self) -> None:
        client = self.create_client()
        client.client.get_paginator.return_value.paginate.return_value = [
            {"StackSummaries": [{"StackName": "a"}]},
            {"StackSummaries": [{"StackName": "b"}]},
            {},
        ]

        summaries = client.list_stacks(["CREATE_COMPLETE"])

        assert [s["StackName"] for s in summaries] == ["a", "b"]
        client.client.get_paginator.return_value.paginate.assert_called_once_with(
            StackStatusFilter=["CREATE_COMPLETE"]
        )

    def test_validate_template_failure(self) -> None:
        client = self.create_client()
        client.client.validate_template.side_effect = client_error(
            "ValidateTemplate", "Template format error"
        )

        with pytest.raises(TemplateValidationError, match="Template format error"):
            client.validate_template("not a template")

    def test_create_change_set(self) -> None:
        client = self.create_client()
        client.client.create_change_set.return_value = {"Id": "cs-1", "StackId": "id-1"}

        change_set_id = client.create_change_set(
            "web-1", "preview", "https://example.com/t.json", [], [], []
        )

        assert change_set_id == "cs-1"
        kwargs = client.client.create_change_set.call_args[1]
        assert kwargs["ChangeSetType"] == "UPDATE"
        assert kwargs["ChangeSetName"] == "preview"
        assert kwargs["TemplateURL"] == "https://example.com/t.json"

    def test_describe_change_set_merges_pages(self) -> None:
        client = self.create_client()
        client.client.describe_change_set.side_effect = [
            {"Status": "CREATE_COMPLETE", "Changes": [{"n": 1}], "NextToken": "t1"},
            {"Status": "CREATE_COMPLETE", "Changes": [{"n": 2}]},
        ]

        description = client.describe_change_set("web-1", "preview")

        assert description["Status"] == "CREATE_COMPLETE"
        assert description["Changes"] == [{"n": 1}, {"n": 2}]
        assert "NextToken" not in description
        second_call = client.client.describe_change_set.call_args_list[1]
        assert second_call[1]["NextToken"] == "t1"

    def test_delete_change_set(self) -> None:
        client = self.create_client()
        client.delete_change_set("web-1", "preview")
        client.client.delete_change_set.assert_called_once_with(
            StackName="web-1", ChangeSetName="preview"
        )


class TestCloudFormationClientMoto:
    """Round trips against moto's CloudFormation."""

    @mock_aws
    def test_create_and_describe_stack(self) -> None:
        client = CloudFormationClient(ClientOptions(region_name="us-east-1"))

        client.validate_template(TEMPLATE)
        stack_id = client.create_stack(
            "web-1",
            TEMPLATE,
            capabilities=["CAPABILITY_IAM"],
            on_failure="DELETE",
            parameters=[],
            tags=[{"Key": "Team", "Value": "ops"}],
        )
        description = client.describe_stack(stack_id)

        assert description["StackName"] == "web-1"
        assert {"Key": "Team", "Value": "ops"} in description["Tags"]

    @mock_aws
    def test_stack_events_include_stack_status(self) -> None:
        client = CloudFormationClient(ClientOptions(region_name="us-east-1"))
        stack_id = client.create_stack("web-2", TEMPLATE, [], "DELETE", [], [])

        events = client.describe_stack_events(stack_id)
        statuses = {
            e["ResourceStatus"]
            for e in events
            if e["ResourceType"] == "AWS::CloudFormation::Stack"
        }

        assert {"CREATE_IN_PROGRESS", "CREATE_COMPLETE"} <= statuses

    @mock_aws
    def test_list_stacks(self) -> None:
        client = CloudFormationClient(ClientOptions(region_name="us-east-1"))
        client.create_stack("web-3", TEMPLATE, [], "DELETE", [], [])

        summaries = client.list_stacks(["CREATE_COMPLETE"])

        assert [s["StackName"] for s in summaries] == ["web-3"]

    @mock_aws
    def test_describe_missing_stack(self) -> None:
        boto3.client("cloudformation", region_name="us-east-1")
        client = CloudFormationClient(ClientOptions(region_name="us-east-1"))

        with pytest.raises(StackNotFoundError):
            client.describe_stack("no-such-stack")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
